"""
Ciclo de vida (soft-delete) de atletas y entrenamientos.

Estados: Activo (deleted_at NULL) <-> Inactivo (deleted_at con timestamp).

Cada transición:
- corre en transaction.atomic()
- bloquea la fila (y el atleta padre cuando corresponde) con select_for_update()
- escribe con un UPDATE condicional sobre deleted_at; 0 filas => ConflictError

Las vistas solo validan payloads y delegan acá.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from core.errors import (
    ATHLETE_ALREADY_ACTIVE_MESSAGE,
    ATHLETE_ALREADY_INACTIVE_MESSAGE,
    ATHLETE_INACTIVE_EDIT_MESSAGE,
    DUPLICATE_EMAIL_MESSAGE,
    INACTIVE_ATHLETE_TRAININGS_MESSAGE,
    TRAINING_ALREADY_ACTIVE_MESSAGE,
    TRAINING_ALREADY_INACTIVE_MESSAGE,
    TRAINING_INACTIVE_EDIT_MESSAGE,
    ConflictError,
    athlete_not_found,
    training_not_found,
    translate_db_errors,
)
from core.models import Athlete, Training
from core.utils.logging import safe_extra

logger = logging.getLogger(__name__)

ATHLETE_EDITABLE_FIELDS = frozenset({"name", "email", "date_of_birth"})
TRAINING_EDITABLE_FIELDS = frozenset({"type", "duration_minutes", "intensity", "notes"})


# ==============================================================================
#  Lecturas (cualquier estado)
# ==============================================================================

def get_athlete(athlete_id: int) -> Athlete:
    athlete = Athlete.objects.filter(pk=athlete_id).first()
    if athlete is None:
        raise athlete_not_found()
    return athlete


def get_training(training_id: int) -> Training:
    training = Training.objects.select_related("athlete").filter(pk=training_id).first()
    if training is None:
        raise training_not_found()
    return training


def _lock_athlete(athlete_id: int) -> Athlete:
    athlete = Athlete.objects.select_for_update().filter(pk=athlete_id).first()
    if athlete is None:
        raise athlete_not_found()
    return athlete


def _lock_training(training_id: int) -> Training:
    training = Training.objects.select_for_update().filter(pk=training_id).first()
    if training is None:
        raise training_not_found()
    return training


def _conditional_update(model, pk: int, *, active: bool, conflict_message: str, **values) -> None:
    """UPDATE ... WHERE id=pk AND deleted_at IS [NOT] NULL. 0 filas => Conflict."""
    values.setdefault("updated_at", timezone.now())
    updated = model.objects.filter(pk=pk, deleted_at__isnull=active).update(**values)
    if updated == 0:
        raise ConflictError(conflict_message)


# ==============================================================================
#  Atletas
# ==============================================================================

def create_athlete(*, name: str, email: str, date_of_birth) -> Athlete:
    with translate_db_errors("crear atleta", unique_message=DUPLICATE_EMAIL_MESSAGE):
        with transaction.atomic():
            athlete = Athlete.objects.create(name=name, email=email, date_of_birth=date_of_birth)

    logger.info("athletes.created", extra=safe_extra({"athlete_id": athlete.pk}))
    return athlete


def update_athlete(athlete_id: int, **changes) -> Athlete:
    values = {k: v for k, v in changes.items() if k in ATHLETE_EDITABLE_FIELDS}

    with translate_db_errors("actualizar atleta", unique_message=DUPLICATE_EMAIL_MESSAGE):
        with transaction.atomic():
            athlete = _lock_athlete(athlete_id)
            if not athlete.is_active:
                raise ConflictError(ATHLETE_INACTIVE_EDIT_MESSAGE)
            _conditional_update(
                Athlete, athlete_id, active=True, conflict_message=ATHLETE_INACTIVE_EDIT_MESSAGE, **values
            )
            athlete.refresh_from_db()

    logger.info("athletes.updated", extra=safe_extra({"athlete_id": athlete_id, "fields": sorted(values)}))
    return athlete


def soft_delete_athlete(athlete_id: int) -> Athlete:
    with translate_db_errors("desactivar atleta"):
        with transaction.atomic():
            athlete = _lock_athlete(athlete_id)
            if not athlete.is_active:
                raise ConflictError(ATHLETE_ALREADY_INACTIVE_MESSAGE)
            now = timezone.now()
            _conditional_update(
                Athlete, athlete_id, active=True, conflict_message=ATHLETE_ALREADY_INACTIVE_MESSAGE,
                deleted_at=now, updated_at=now,
            )
            athlete.refresh_from_db()

    logger.info("athletes.soft_deleted", extra=safe_extra({"athlete_id": athlete_id}))
    return athlete


def reactivate_athlete(athlete_id: int) -> Athlete:
    with translate_db_errors("reactivar atleta"):
        with transaction.atomic():
            athlete = _lock_athlete(athlete_id)
            if athlete.is_active:
                raise ConflictError(ATHLETE_ALREADY_ACTIVE_MESSAGE)
            _conditional_update(
                Athlete, athlete_id, active=False, conflict_message=ATHLETE_ALREADY_ACTIVE_MESSAGE,
                deleted_at=None,
            )
            athlete.refresh_from_db()

    logger.info("athletes.reactivated", extra=safe_extra({"athlete_id": athlete_id}))
    return athlete


# ==============================================================================
#  Entrenamientos
# ==============================================================================

def create_training(*, athlete_id: int, type: str, duration_minutes: int, intensity: str, notes: str | None = None) -> Training:
    with translate_db_errors("crear entrenamiento"):
        with transaction.atomic():
            athlete = _lock_athlete(athlete_id)
            if not athlete.is_active:
                raise ConflictError(INACTIVE_ATHLETE_TRAININGS_MESSAGE)
            training = Training.objects.create(
                athlete=athlete,
                type=type,
                duration_minutes=duration_minutes,
                intensity=intensity,
                notes=notes,
            )

    logger.info(
        "trainings.created",
        extra=safe_extra({"training_id": training.pk, "athlete_id": athlete_id, "intensity": intensity}),
    )
    return training


def update_training(training_id: int, **changes) -> Training:
    values = {k: v for k, v in changes.items() if k in TRAINING_EDITABLE_FIELDS}

    with translate_db_errors("actualizar entrenamiento"):
        with transaction.atomic():
            # Orden de locks: atleta -> entrenamiento (igual que create/reactivate).
            athlete_id = get_training(training_id).athlete_id
            athlete = _lock_athlete(athlete_id)
            training = _lock_training(training_id)
            if not training.is_active:
                raise ConflictError(TRAINING_INACTIVE_EDIT_MESSAGE)
            if not athlete.is_active:
                raise ConflictError(INACTIVE_ATHLETE_TRAININGS_MESSAGE)
            _conditional_update(
                Training, training_id, active=True, conflict_message=TRAINING_INACTIVE_EDIT_MESSAGE, **values
            )
            training.refresh_from_db()

    logger.info("trainings.updated", extra=safe_extra({"training_id": training_id, "fields": sorted(values)}))
    return training


def soft_delete_training(training_id: int) -> Training:
    """Permitido aunque el atleta esté desactivado (la limpieza nunca se bloquea)."""
    with translate_db_errors("desactivar entrenamiento"):
        with transaction.atomic():
            training = _lock_training(training_id)
            if not training.is_active:
                raise ConflictError(TRAINING_ALREADY_INACTIVE_MESSAGE)
            now = timezone.now()
            _conditional_update(
                Training, training_id, active=True, conflict_message=TRAINING_ALREADY_INACTIVE_MESSAGE,
                deleted_at=now, updated_at=now,
            )
            training.refresh_from_db()

    logger.info("trainings.soft_deleted", extra=safe_extra({"training_id": training_id}))
    return training


def reactivate_training(training_id: int) -> Training:
    with translate_db_errors("reactivar entrenamiento"):
        with transaction.atomic():
            athlete_id = get_training(training_id).athlete_id
            athlete = _lock_athlete(athlete_id)
            training = _lock_training(training_id)
            if training.is_active:
                raise ConflictError(TRAINING_ALREADY_ACTIVE_MESSAGE)
            if not athlete.is_active:
                raise ConflictError(INACTIVE_ATHLETE_TRAININGS_MESSAGE)
            _conditional_update(
                Training, training_id, active=False, conflict_message=TRAINING_ALREADY_ACTIVE_MESSAGE,
                deleted_at=None,
            )
            training.refresh_from_db()

    logger.info("trainings.reactivated", extra=safe_extra({"training_id": training_id}))
    return training
