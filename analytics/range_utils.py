from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from datetime import timezone as dt_timezone

from django.conf import settings

# Ventanas predefinidas de insights (en días, inclusive).
PRESET_PERIOD_DAYS: dict[str, int] = {"7": 7, "30": 30, "90": 90}
CUSTOM_PERIOD = "custom"


def max_custom_range_days() -> int | None:
    """Tope opcional de días para el período "custom"; None (o 0) = sin tope."""
    limit = getattr(settings, "INSIGHTS_MAX_CUSTOM_RANGE_DAYS", None)
    return int(limit) if limit else None


def range_days(start: date, end: date) -> int:
    return (end - start).days + 1


# ------------------------------------------------------------------------------
# Semanas ISO (lunes a domingo). Siempre sobre fechas UTC.
# ------------------------------------------------------------------------------

def to_utc_date(value: datetime | date) -> date:
    """
    Fecha calendario UTC de un timestamp.

    Los datetimes naive se asumen UTC (USE_TZ=True los guarda así).
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(dt_timezone.utc)
        return value.date()
    return value


def iso_week_key(d: date) -> tuple[int, int]:
    iso = d.isocalendar()
    return iso[0], iso[1]


def iso_week_number(d: date) -> int:
    return d.isocalendar()[1]


def iso_week_start(d: date) -> date:
    """Lunes de la semana ISO que contiene `d`."""
    year, week = iso_week_key(d)
    return date.fromisocalendar(year, week, 1)


def day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Rango [start 00:00:00, end 23:59:59.999999] en UTC, para filtros `__range`."""
    return (
        datetime.combine(start, time.min, tzinfo=dt_timezone.utc),
        datetime.combine(end, time.max, tzinfo=dt_timezone.utc),
    )


# ------------------------------------------------------------------------------
# Resolución de período
# ------------------------------------------------------------------------------

@dataclass(frozen=True)
class InsightsPeriod:
    start: date
    end: date
    compare_start: date | None = None
    compare_end: date | None = None

    @property
    def days(self) -> int:
        return range_days(self.start, self.end)

    @property
    def has_compare(self) -> bool:
        return self.compare_start is not None and self.compare_end is not None


def resolve_insights_period(
    period: str,
    from_date: date | None = None,
    to_date: date | None = None,
    *,
    now: datetime,
    compare: bool = False,
) -> InsightsPeriod:
    """
    Traduce (period, fromDate, toDate) a fechas concretas.

    - Presets "7"/"30"/"90": end = hoy (UTC según `now`), start = end - (días - 1).
    - "custom": requiere ambas fechas y start <= end.
    - compare: período inmediatamente anterior de igual longitud (sin hueco ni solape).

    Levanta ValueError con un código corto ("custom_range_required", ...) que
    el serializer traduce a mensaje de usuario.
    """
    if period == CUSTOM_PERIOD:
        if from_date is None or to_date is None:
            raise ValueError("custom_range_required")
        if from_date > to_date:
            raise ValueError("start_after_end")
        limit = max_custom_range_days()
        if limit is not None and range_days(from_date, to_date) > limit:
            raise ValueError("range_too_large")
        start, end = from_date, to_date
    elif period in PRESET_PERIOD_DAYS:
        end = to_utc_date(now)
        start = end - timedelta(days=PRESET_PERIOD_DAYS[period] - 1)
    else:
        raise ValueError("invalid_period")

    if not compare:
        return InsightsPeriod(start=start, end=end)

    compare_end = start - timedelta(days=1)
    compare_start = compare_end - timedelta(days=range_days(start, end) - 1)
    return InsightsPeriod(start=start, end=end, compare_start=compare_start, compare_end=compare_end)
