"""
Errores de dominio expuestos por la API.

Taxonomía:
- NotFound (404): el id no resuelve a ninguna entidad.
- ConflictError (409): violación de la máquina de estados o de unicidad.
- ValidationError (400): lo levantan los serializers de DRF.
- InternalError (500): falla inesperada de persistencia, con causa preservada.
- DatabaseConnectionError (503): la base no está disponible.
"""

from __future__ import annotations

from contextlib import contextmanager

from django.db import DatabaseError, IntegrityError, OperationalError
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound

ATHLETE_NOT_FOUND_MESSAGE = "Atleta no encontrado."
TRAINING_NOT_FOUND_MESSAGE = "Entrenamiento no encontrado."

DUPLICATE_EMAIL_MESSAGE = "Ya existe un atleta registrado con este e-mail."
ATHLETE_INACTIVE_EDIT_MESSAGE = "No es posible editar un atleta desactivado."
ATHLETE_ALREADY_INACTIVE_MESSAGE = "El atleta ya está desactivado."
ATHLETE_ALREADY_ACTIVE_MESSAGE = "El atleta ya está activo."
TRAINING_INACTIVE_EDIT_MESSAGE = "No es posible editar un entrenamiento desactivado."
TRAINING_ALREADY_INACTIVE_MESSAGE = "El entrenamiento ya está desactivado."
TRAINING_ALREADY_ACTIVE_MESSAGE = "El entrenamiento ya está activo."
INACTIVE_ATHLETE_TRAININGS_MESSAGE = (
    "No es posible realizar esta operación en entrenamientos de un atleta desactivado."
)


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicto con el estado actual del recurso."
    default_code = "conflict"


class InternalError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Error interno."
    default_code = "internal_error"


class DatabaseConnectionError(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = (
        "No fue posible conectar con la base de datos. Verifique que el servicio esté disponible."
    )
    default_code = "database_unavailable"


def athlete_not_found() -> NotFound:
    return NotFound(ATHLETE_NOT_FOUND_MESSAGE)


def training_not_found() -> NotFound:
    return NotFound(TRAINING_NOT_FOUND_MESSAGE)


def internal_error(operation: str, cause: BaseException | None = None) -> InternalError:
    """
    500 genérico para una operación puntual (ej: "crear atleta").
    La causa original queda en `__cause__` para diagnóstico.
    """
    err = InternalError(f"Fallo al {operation}.")
    err.__cause__ = cause
    return err


def _is_unique_violation(exc: IntegrityError) -> bool:
    # Postgres: SQLSTATE 23505. SQLite: "UNIQUE constraint failed".
    pgcode = getattr(getattr(exc, "__cause__", None), "pgcode", None) or getattr(exc, "pgcode", None)
    if pgcode == "23505":
        return True
    text = str(exc).lower()
    return "unique" in text or "duplicate key" in text


@contextmanager
def translate_db_errors(operation: str, *, unique_message: str | None = None):
    """
    Traduce errores de la base a errores de API con significado de dominio.

    - IntegrityError por unicidad -> ConflictError(unique_message)
    - OperationalError -> DatabaseConnectionError
    - Otro DatabaseError -> InternalError("Fallo al <operation>.")

    Las APIException (NotFound/ConflictError/...) pasan sin tocar.
    """
    try:
        yield
    except IntegrityError as exc:
        if unique_message and _is_unique_violation(exc):
            raise ConflictError(unique_message) from exc
        raise internal_error(operation, exc) from exc
    except OperationalError as exc:
        raise DatabaseConnectionError() from exc
    except DatabaseError as exc:
        raise internal_error(operation, exc) from exc
