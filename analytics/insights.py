"""
Ensamblador del payload de insights de un atleta.

Pipeline:
  1) filtros (intensidad/tipo) aplicados igual e independientemente al período
     actual y al de comparación
  2) KPIs con delta/tendencia contra el período de comparación
  3) distribuciones, serie semanal, reglas de insights, highlights

Función pura de sus entradas: mismos entrenamientos -> mismo payload.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from django.conf import settings

from analytics.insights_calc import (
    MIN_WEEKS_FOR_MONOTONY,
    SPIKE_RATIO_THRESHOLD,
    Trend,
    calculate_intensity_distribution,
    calculate_type_distribution,
    calculate_weekly_time_series,
    compute_consistency,
    compute_monotony_index,
    compute_trend,
    detect_spike,
    get_top_trainings_by_load,
    round_half_up,
)
from analytics.load import average_intensity_score, compute_training_load
from analytics.range_utils import to_utc_date

ALL = "ALL"

LOAD_UNIT = "unidades"
KPI_TREND_TOLERANCE = 0.05

SPIKE_CRITICAL_RATIO = 2.0
MONOTONY_WARNING_THRESHOLD = 2.0
CONSISTENCY_GOOD_RATE = 75.0
CONSISTENCY_LOW_RATE = 50.0
MIN_WEEKS_FOR_CONSISTENCY = 2

NO_DATA_ID = "no-data"
NO_DATA_TITLE = "Sin datos en el período"
NO_DATA_DESCRIPTION = "No hay entrenamientos registrados para el período seleccionado."

INTENSITY_LABELS = {"low": "baja", "moderate": "moderada", "high": "alta"}


# ==============================================================================
#  Filtros
# ==============================================================================

@dataclass(frozen=True)
class InsightFilters:
    intensity: str = ALL
    training_type: str = ALL


def matches_filters(training, filters: InsightFilters) -> bool:
    if filters.intensity != ALL and training.intensity != filters.intensity:
        return False
    if filters.training_type != ALL and training.type != filters.training_type:
        return False
    return True


def apply_filters(trainings: Iterable, filters: InsightFilters) -> list:
    return [t for t in trainings if matches_filters(t, filters)]


# ==============================================================================
#  KPIs
# ==============================================================================

def kpi_trend(current: float, previous: float) -> str:
    """up/down/stable con 5% de tolerancia. Base 0: stable si current es 0, si no up."""
    if previous == 0:
        return "stable" if current == 0 else "up"
    change = (current - previous) / previous
    if abs(change) < KPI_TREND_TOLERANCE:
        return "stable"
    return "up" if change > 0 else "down"


def _totals(trainings: Sequence) -> dict:
    return {
        "trainings": len(trainings),
        "minutes": sum(int(t.duration_minutes) for t in trainings),
        "load": sum(compute_training_load(t) for t in trainings),
        "intensity": average_intensity_score(trainings),
    }


def _kpi(label: str, value, unit: str, previous=None, *, ndigits: int | None = None) -> dict:
    shown = round_half_up(value, ndigits) if ndigits is not None else value
    out = {"label": label, "value": shown}
    if previous is not None:
        delta = value - previous
        out["delta"] = round_half_up(delta, ndigits) if ndigits is not None else delta
    out["unit"] = unit
    if previous is not None:
        out["trend"] = kpi_trend(value, previous)
    return out


def build_kpis(current: Sequence, compare: Sequence | None) -> list[dict]:
    """
    Exactamente 4 KPIs, en orden fijo. Con `compare` (aunque esté vacío)
    cada KPI lleva delta y trend.
    """
    cur = _totals(current)
    prev = _totals(compare) if compare is not None else {}
    return [
        _kpi("Total de entrenamientos", cur["trainings"], "entrenamientos", prev.get("trainings")),
        _kpi("Minutos totales", cur["minutes"], "min", prev.get("minutes")),
        _kpi("Carga total", cur["load"], LOAD_UNIT, prev.get("load")),
        _kpi("Intensidad media", cur["intensity"], "score", prev.get("intensity"), ndigits=1),
    ]


# ==============================================================================
#  Reglas de insights
# ==============================================================================

def _insight(id_: str, severity: str, title: str, description: str, type_: str, evidence: str | None = None) -> dict:
    out = {"id": id_, "severity": severity, "title": title, "description": description}
    if evidence is not None:
        out["evidence"] = evidence
    out["type"] = type_
    return out


def no_data_insight() -> dict:
    return _insight(NO_DATA_ID, "info", NO_DATA_TITLE, NO_DATA_DESCRIPTION, "trend")


def _spike_insight(weekly) -> dict | None:
    loads = [w.load for w in weekly]
    spike = detect_spike(loads)
    if not spike.is_spike:
        return None

    week = weekly[spike.spike_week_index]
    severity = "critical" if spike.ratio >= SPIKE_CRITICAL_RATIO else "warning"
    return _insight(
        "load-spike",
        severity,
        "Pico de carga semanal",
        (
            f"La carga de la semana del {week.week_start.isoformat()} fue "
            f"{spike.ratio:.2f}x la media de las semanas anteriores "
            f"(umbral {SPIKE_RATIO_THRESHOLD:.1f}x)."
        ),
        "spike",
        evidence=f"{week.load} {LOAD_UNIT} en la última semana",
    )


def _monotony_insight(weekly) -> dict | None:
    index = compute_monotony_index([w.load for w in weekly])
    if index is None or index < MONOTONY_WARNING_THRESHOLD:
        return None
    return _insight(
        "high-monotony",
        "warning",
        "Monotonía de carga elevada",
        "La carga semanal varía poco entre semanas; el estímulo de entrenamiento es repetitivo.",
        "monotony",
        evidence=f"Índice de monotonía {index:.2f} en {len(weekly)} semanas (mínimo {MIN_WEEKS_FOR_MONOTONY})",
    )


def _trend_insight(weekly) -> dict | None:
    trend = compute_trend([w.load for w in weekly])
    if trend == Trend.UP:
        return _insight(
            "load-trend-up", "info", "Tendencia de carga en alza",
            "La carga de las últimas 2 semanas superó a la de las 2 anteriores.", "trend",
        )
    if trend == Trend.DOWN:
        return _insight(
            "load-trend-down", "warning", "Tendencia de carga en baja",
            "La carga de las últimas 2 semanas fue menor que la de las 2 anteriores.", "trend",
        )
    if trend == Trend.FLAT:
        return _insight(
            "load-trend-flat", "info", "Carga semanal estable",
            "La carga de las últimas semanas se mantuvo dentro de un ±5%.", "trend",
        )
    return None


def _consistency_insight(weekly) -> dict | None:
    if len(weekly) < MIN_WEEKS_FOR_CONSISTENCY:
        return None

    result = compute_consistency(weekly)
    evidence = (
        f"{result.active_weeks} de {len(weekly)} semanas con 2 o más entrenamientos; "
        f"racha actual: {result.streak}"
    )
    rate = int(round_half_up(result.consistency_rate))
    if result.consistency_rate >= CONSISTENCY_GOOD_RATE:
        return _insight(
            "good-consistency", "info", "Buena consistencia",
            f"El {rate}% de las semanas con actividad cumplieron la frecuencia mínima.",
            "consistency", evidence=evidence,
        )
    if result.consistency_rate < CONSISTENCY_LOW_RATE:
        return _insight(
            "low-consistency", "warning", "Consistencia baja",
            f"Solo el {rate}% de las semanas con actividad cumplieron la frecuencia mínima.",
            "consistency", evidence=evidence,
        )
    return None


def _descriptive_insights(trainings: Sequence, weekly, by_intensity: list[dict], by_type: list[dict]) -> list[dict]:
    out = []

    # max() devuelve el primero ante empates (orden low -> high).
    top_intensity = max(by_intensity, key=lambda row: row["count"])
    if top_intensity["intensity"] != "low":
        label = INTENSITY_LABELS.get(top_intensity["intensity"], top_intensity["intensity"])
        out.append(
            _insight(
                "intensity-focus", "info", "Foco en intensidad",
                f"El {top_intensity['percentage']}% de los entrenamientos fue de intensidad {label}.",
                "trend", evidence=f"{top_intensity['count']} de {len(trainings)} entrenamientos",
            )
        )

    if by_type:
        top_type = by_type[0]
        out.append(
            _insight(
                "frequent-training-type", "info", "Tipo de entrenamiento predominante",
                f"{top_type['type']} es el tipo más realizado ({top_type['percentage']}% del total).",
                "trend", evidence=f"{top_type['count']} sesiones",
            )
        )

    if len(weekly) > 1:
        busiest = max(weekly, key=lambda w: w.minutes)
        out.append(
            _insight(
                "most-active-week", "info", "Semana más activa",
                f"La semana del {busiest.week_start.isoformat()} tuvo el mayor volumen: {busiest.minutes} minutos.",
                "trend", evidence=f"{busiest.trainings_count} entrenamientos en la semana",
            )
        )
    return out


def build_insight_records(trainings: Sequence, weekly, by_intensity: list[dict], by_type: list[dict]) -> list[dict]:
    """Señales (spike, monotonía, tendencia, consistencia) y luego descriptivos."""
    records = []
    for rule in (_spike_insight, _monotony_insight, _trend_insight, _consistency_insight):
        record = rule(weekly)
        if record is not None:
            records.append(record)
    records.extend(_descriptive_insights(trainings, weekly, by_intensity, by_type))
    return records


# ==============================================================================
#  Highlights
# ==============================================================================

def highlights_limit() -> int:
    return int(getattr(settings, "INSIGHTS_HIGHLIGHTS_LIMIT", 5))


def build_highlights(trainings: Sequence, limit: int | None = None) -> list[dict]:
    top = get_top_trainings_by_load(trainings, highlights_limit() if limit is None else limit)
    return [
        {
            "id": f"top-load-{idx}",
            "trainingId": t.id,
            "type": t.type,
            "reason": "highest_load",
            "value": compute_training_load(t),
            "unit": LOAD_UNIT,
            "date": to_utc_date(t.created_at).isoformat(),
        }
        for idx, t in enumerate(top, start=1)
    ]


# ==============================================================================
#  Payload completo
# ==============================================================================

def _period_payload(period: tuple[date, date], compare_period: tuple[date, date] | None) -> dict:
    out = {"from": period[0].isoformat(), "to": period[1].isoformat()}
    if compare_period is not None:
        out["compareFrom"] = compare_period[0].isoformat()
        out["compareTo"] = compare_period[1].isoformat()
    return out


def build_athlete_insights(
    *,
    trainings_current: Iterable,
    trainings_compare: Iterable | None = None,
    period: tuple[date, date],
    compare_period: tuple[date, date] | None = None,
    intensity_filter: str = ALL,
    training_type_filter: str = ALL,
) -> dict:
    """
    Payload `AthleteInsightsResponse`.

    Sin entrenamientos (después de filtrar) no es un error: KPIs en 0,
    distribuciones vacías y un único insight informativo "no-data".
    """
    filters = InsightFilters(intensity=intensity_filter or ALL, training_type=training_type_filter or ALL)
    current = apply_filters(trainings_current, filters)
    compare = apply_filters(trainings_compare, filters) if trainings_compare is not None else None

    kpis = build_kpis(current, compare)
    by_intensity = calculate_intensity_distribution(current)

    if not current:
        return {
            "period": _period_payload(period, compare_period),
            "kpis": kpis,
            "distribution": {"byType": [], "byIntensity": by_intensity},
            "timeSeries": [],
            "insights": [no_data_insight()],
            "highlights": [],
        }

    by_type = calculate_type_distribution(current)
    weekly = calculate_weekly_time_series(current)

    return {
        "period": _period_payload(period, compare_period),
        "kpis": kpis,
        "distribution": {"byType": by_type, "byIntensity": by_intensity},
        "timeSeries": [w.as_payload() for w in weekly],
        "insights": build_insight_records(current, weekly, by_intensity, by_type),
        "highlights": build_highlights(current),
    }
