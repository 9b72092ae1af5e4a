"""
Calculadores puros de insights.

Entradas: entrenamientos (cualquier objeto con `created_at`, `duration_minutes`,
`intensity`, `type`) o series de cargas semanales. Sin ORM, sin "now", sin I/O.
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from core.models import TRAINING_INTENSITY_VALUES
from analytics.load import compute_training_load
from analytics.range_utils import iso_week_key, to_utc_date

# ==============================================================================
#  Knobs de política (fijados por tests)
# ==============================================================================

MIN_WEEKS_FOR_MONOTONY = 3
MONOTONY_MIN_STDDEV = 0.1
MONOTONY_SENTINEL = 999.0

MIN_WEEKS_FOR_SPIKE = 2
SPIKE_RATIO_THRESHOLD = 1.5

CONSISTENCY_MIN_TRAININGS_PER_WEEK = 2

MIN_WEEKS_FOR_TREND = 3
TREND_WINDOW = 2
TREND_TOLERANCE = 0.05


def round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def percentage_of(count: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(round_half_up(count / total * 100))


# ==============================================================================
#  Serie semanal
# ==============================================================================

@dataclass(frozen=True)
class WeeklyAggregate:
    week_start: date
    week_end: date
    minutes: int
    load: int
    trainings_count: int

    def as_payload(self) -> dict:
        return {
            "weekStart": self.week_start.isoformat(),
            "weekEnd": self.week_end.isoformat(),
            "minutes": self.minutes,
            "load": self.load,
            "trainingsCount": self.trainings_count,
        }


def calculate_weekly_time_series(trainings: Iterable) -> list[WeeklyAggregate]:
    """
    Agrega entrenamientos por semana ISO (lunes a domingo), orden ascendente.

    La serie es dispersa: semanas sin entrenamientos no aparecen. Spike/trend
    operan sobre la secuencia de semanas activas, no sobre el calendario.

    El inicio de semana se deriva de la clave (año ISO, semana ISO) del grupo,
    calculada sobre la fecha UTC de cada entrenamiento.
    """
    buckets: dict[tuple[int, int], list[int]] = {}
    for t in trainings:
        key = iso_week_key(to_utc_date(t.created_at))
        acc = buckets.setdefault(key, [0, 0, 0])
        acc[0] += int(t.duration_minutes)
        acc[1] += compute_training_load(t)
        acc[2] += 1

    series = []
    for (iso_year, iso_week), (minutes, load, count) in sorted(buckets.items()):
        week_start = date.fromisocalendar(iso_year, iso_week, 1)
        series.append(
            WeeklyAggregate(
                week_start=week_start,
                week_end=week_start + timedelta(days=6),
                minutes=minutes,
                load=load,
                trainings_count=count,
            )
        )
    return series


# ==============================================================================
#  Distribuciones
# ==============================================================================

def calculate_intensity_distribution(trainings: Sequence) -> list[dict]:
    """Siempre 3 filas (low, moderate, high), aunque el conteo sea 0."""
    counts = {intensity: 0 for intensity in TRAINING_INTENSITY_VALUES}
    for t in trainings:
        if t.intensity in counts:
            counts[t.intensity] += 1

    total = len(trainings)
    return [
        {"intensity": intensity, "count": counts[intensity], "percentage": percentage_of(counts[intensity], total)}
        for intensity in TRAINING_INTENSITY_VALUES
    ]


def calculate_type_distribution(trainings: Sequence) -> list[dict]:
    """
    Una fila por `type` literal (sin normalizar mayúsculas ni acentos).
    Orden: count desc, luego type asc.
    """
    counts: dict[str, int] = {}
    for t in trainings:
        counts[t.type] = counts.get(t.type, 0) + 1

    total = len(trainings)
    rows = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [{"type": type_, "count": count, "percentage": percentage_of(count, total)} for type_, count in rows]


def get_top_trainings_by_load(trainings: Iterable, limit: int = 5) -> list:
    # sorted() es estable: empates conservan el orden de entrada.
    return sorted(trainings, key=compute_training_load, reverse=True)[: max(0, int(limit))]


# ==============================================================================
#  Detectores de señales
# ==============================================================================

def compute_monotony_index(weekly_loads: Sequence[float]) -> float | None:
    """
    Monotonía = media / desvío estándar poblacional de las cargas semanales.

    - < MIN_WEEKS_FOR_MONOTONY semanas: None ("sin datos suficientes", no 0).
    - desvío < MONOTONY_MIN_STDDEV: MONOTONY_SENTINEL (monotonía máxima).
    """
    if len(weekly_loads) < MIN_WEEKS_FOR_MONOTONY:
        return None
    mean = statistics.fmean(weekly_loads)
    stddev = statistics.pstdev(weekly_loads)
    if stddev < MONOTONY_MIN_STDDEV:
        return MONOTONY_SENTINEL
    return mean / stddev


@dataclass(frozen=True)
class SpikeResult:
    is_spike: bool
    ratio: float
    spike_week_index: int | None = None


def detect_spike(weekly_loads: Sequence[float]) -> SpikeResult:
    """Compara SOLO la última semana contra la media de todas las anteriores."""
    if len(weekly_loads) < MIN_WEEKS_FOR_SPIKE:
        return SpikeResult(is_spike=False, ratio=0.0)

    previous_mean = statistics.fmean(weekly_loads[:-1])
    if previous_mean <= 0:
        return SpikeResult(is_spike=False, ratio=0.0)

    ratio = weekly_loads[-1] / previous_mean
    if ratio >= SPIKE_RATIO_THRESHOLD:
        return SpikeResult(is_spike=True, ratio=ratio, spike_week_index=len(weekly_loads) - 1)
    return SpikeResult(is_spike=False, ratio=ratio)


@dataclass(frozen=True)
class ConsistencyResult:
    active_weeks: int
    streak: int
    consistency_rate: float


def compute_consistency(
    weekly_aggregates: Sequence[WeeklyAggregate],
    min_trainings_per_week: int = CONSISTENCY_MIN_TRAININGS_PER_WEEK,
) -> ConsistencyResult:
    if not weekly_aggregates:
        return ConsistencyResult(active_weeks=0, streak=0, consistency_rate=0.0)

    flags = [w.trainings_count >= min_trainings_per_week for w in weekly_aggregates]

    streak = 0
    for is_active in reversed(flags):
        if not is_active:
            break
        streak += 1

    active_weeks = sum(flags)
    return ConsistencyResult(
        active_weeks=active_weeks,
        streak=streak,
        consistency_rate=active_weeks / len(flags) * 100,
    )


class Trend(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    FLAT = "FLAT"
    UNKNOWN = "UNKNOWN"


def compute_trend(weekly_loads: Sequence[float]) -> Trend:
    """
    Media de las últimas TREND_WINDOW semanas vs. las (hasta) TREND_WINDOW previas.

    UNKNOWN con < MIN_WEEKS_FOR_TREND puntos o si la ventana de referencia promedia 0.
    """
    if len(weekly_loads) < MIN_WEEKS_FOR_TREND:
        return Trend.UNKNOWN

    recent = weekly_loads[-TREND_WINDOW:]
    reference = weekly_loads[-2 * TREND_WINDOW:-TREND_WINDOW]
    reference_mean = statistics.fmean(reference)
    if reference_mean == 0:
        return Trend.UNKNOWN

    change = (statistics.fmean(recent) - reference_mean) / reference_mean
    if abs(change) <= TREND_TOLERANCE:
        return Trend.FLAT
    return Trend.UP if change > 0 else Trend.DOWN
