import logging
import time
from dataclasses import dataclass

from django.utils import timezone
from rest_framework.response import Response
from rest_framework.views import APIView

from analytics.goals import compute_weekly_progress, normalize_goals
from analytics.insights import InsightFilters, build_athlete_insights
from analytics.insights_calc import calculate_weekly_time_series
from analytics.range_utils import InsightsPeriod, day_bounds, iso_week_start, to_utc_date
from analytics.recommendations import generate_recommendations
from analytics.serializers import GoalsQuerySerializer, InsightsQuerySerializer
from core.lifecycle import get_athlete
from core.models import Training
from core.utils.logging import safe_extra

logger = logging.getLogger(__name__)


def fetch_active_trainings(athlete_id: int, start, end) -> list:
    """Entrenamientos activos del atleta en [start, end] (fechas UTC, extremos inclusive)."""
    return list(
        Training.objects.active()
        .filter(athlete_id=athlete_id, created_at__range=day_bounds(start, end))
        .order_by("created_at", "id")
    )


@dataclass(frozen=True)
class InsightsRequest:
    athlete_id: int
    period: InsightsPeriod
    filters: InsightFilters
    trainings_current: list
    trainings_compare: list | None

    def build_payload(self) -> dict:
        return build_athlete_insights(
            trainings_current=self.trainings_current,
            trainings_compare=self.trainings_compare,
            period=(self.period.start, self.period.end),
            compare_period=(self.period.compare_start, self.period.compare_end) if self.period.has_compare else None,
            intensity_filter=self.filters.intensity,
            training_type_filter=self.filters.training_type,
        )


def resolve_insights_request(request, athlete_id: int) -> InsightsRequest:
    """
    Valida query params, verifica que el atleta exista (activo o no) y trae
    los entrenamientos del período (y del período de comparación).
    """
    now = timezone.now()
    query = InsightsQuerySerializer(data=request.query_params, context={"now": now})
    query.is_valid(raise_exception=True)
    data = query.validated_data

    get_athlete(athlete_id)

    period: InsightsPeriod = data["resolved_period"]
    current = fetch_active_trainings(athlete_id, period.start, period.end)
    compare = (
        fetch_active_trainings(athlete_id, period.compare_start, period.compare_end)
        if period.has_compare
        else None
    )
    return InsightsRequest(
        athlete_id=athlete_id,
        period=period,
        filters=InsightFilters(intensity=data["intensityFilter"], training_type=data["trainingTypeFilter"]),
        trainings_current=current,
        trainings_compare=compare,
    )


class AthleteInsightsView(APIView):
    """
    GET /api/analytics/athletes/<id>/insights/

    KPIs, distribuciones, serie semanal, insights y highlights del período.
    Cálculo síncrono por request (sin cache, sin tareas en background).
    """

    def get(self, request, athlete_id: int):
        started = time.perf_counter()
        ctx = resolve_insights_request(request, athlete_id)
        payload = ctx.build_payload()

        logger.info(
            "analytics.insights.computed",
            extra=safe_extra(
                {
                    "athlete_id": athlete_id,
                    "period_start": ctx.period.start.isoformat(),
                    "period_end": ctx.period.end.isoformat(),
                    "compare": ctx.period.has_compare,
                    "trainings_count": len(ctx.trainings_current),
                    "insights_count": len(payload["insights"]),
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                }
            ),
        )
        return Response(payload)


class AthleteRecommendationsView(APIView):
    """GET /api/analytics/athletes/<id>/insights/recommendations/ (mismos query params que insights)."""

    def get(self, request, athlete_id: int):
        ctx = resolve_insights_request(request, athlete_id)
        recommendations = generate_recommendations(ctx.build_payload()["insights"])
        return Response(recommendations.as_payload())


class AthleteGoalsView(APIView):
    """
    GET /api/analytics/athletes/<id>/insights/goals/?weeklyMinutesGoal=&weeklyTrainingsGoal=

    Progreso de la semana ISO actual (lunes UTC hasta hoy) contra metas semanales.
    Las metas las guarda el cliente; acá solo se sanean y se calcula el progreso.
    """

    def get(self, request, athlete_id: int):
        goals_query = GoalsQuerySerializer(data=request.query_params)
        goals_query.is_valid(raise_exception=True)
        goals = normalize_goals(goals_query.validated_data)

        get_athlete(athlete_id)

        today = to_utc_date(timezone.now())
        trainings = fetch_active_trainings(athlete_id, iso_week_start(today), today)
        progress = compute_weekly_progress(goals, calculate_weekly_time_series(trainings), today=today)

        return Response(
            {
                "goals": {
                    "weeklyMinutesGoal": goals.weekly_minutes_goal,
                    "weeklyTrainingsGoal": goals.weekly_trainings_goal,
                },
                "progress": progress.as_payload(),
            }
        )
