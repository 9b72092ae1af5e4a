from __future__ import annotations

import logging
from collections.abc import Iterable

from core.utils.logging import safe_extra

logger = logging.getLogger(__name__)

# Escala cerrada: low < moderate < high.
INTENSITY_SCORES: dict[str, int] = {"low": 1, "moderate": 2, "high": 3}
FALLBACK_INTENSITY_SCORE = 1


def intensity_score(intensity: str | None) -> int:
    """
    Score de intensidad de un entrenamiento.

    Un valor fuera de {low, moderate, high} no debería llegar nunca (lo valida
    el serializer y la columna tiene choices); si llega, cae a 1 y se loguea.
    """
    score = INTENSITY_SCORES.get(intensity)
    if score is None:
        logger.warning(
            "analytics.load.unknown_intensity",
            extra=safe_extra({"intensity": intensity, "fallback_score": FALLBACK_INTENSITY_SCORE}),
        )
        return FALLBACK_INTENSITY_SCORE
    return score


def compute_training_load(training) -> int:
    """Carga = minutos * score de intensidad."""
    return int(training.duration_minutes) * intensity_score(training.intensity)


def average_intensity_score(trainings: Iterable) -> float:
    """
    Promedio de intensidad ponderado por duración: Σ(min·score) / Σ(min).

    Devuelve 0.0 sin entrenamientos (nunca ZeroDivisionError).
    """
    total_minutes = 0
    weighted = 0
    for t in trainings:
        minutes = int(t.duration_minutes)
        total_minutes += minutes
        weighted += minutes * intensity_score(t.intensity)
    if total_minutes <= 0:
        return 0.0
    return weighted / total_minutes
