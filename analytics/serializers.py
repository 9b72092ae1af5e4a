from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework import serializers

from analytics.insights import ALL
from analytics.range_utils import (
    CUSTOM_PERIOD,
    PRESET_PERIOD_DAYS,
    max_custom_range_days,
    resolve_insights_period,
    to_utc_date,
)
from core.models import TRAINING_INTENSITY_VALUES

PERIOD_CHOICES = [*PRESET_PERIOD_DAYS.keys(), CUSTOM_PERIOD]
INTENSITY_FILTER_CHOICES = [ALL, *TRAINING_INTENSITY_VALUES]

PERIOD_ERROR_MESSAGES = {
    "custom_range_required": "Para el período personalizado se requieren fromDate y toDate.",
    "start_after_end": "fromDate no puede ser posterior a toDate.",
    "invalid_period": "Período inválido.",
}


class IsoDateField(serializers.DateField):
    """Acepta YYYY-MM-DD o un datetime ISO (se toma su fecha UTC)."""

    def to_internal_value(self, value):
        if isinstance(value, str) and "T" in value:
            parsed = parse_datetime(value.replace("Z", "+00:00"))
            if parsed is not None:
                return to_utc_date(parsed)
        return super().to_internal_value(value)


class InsightsQuerySerializer(serializers.Serializer):
    """
    Query params de /insights/.

    Resuelve el período en `validate()` (con `now` inyectado por contexto) y deja
    el resultado en `validated_data["resolved_period"]`.
    """

    period = serializers.ChoiceField(choices=PERIOD_CHOICES, default="30")
    fromDate = IsoDateField(required=False)
    toDate = IsoDateField(required=False)
    compare = serializers.BooleanField(default=False)
    intensityFilter = serializers.ChoiceField(choices=INTENSITY_FILTER_CHOICES, default=ALL)
    trainingTypeFilter = serializers.CharField(default=ALL, max_length=100, trim_whitespace=False)

    def validate(self, attrs):
        now = self.context.get("now") or timezone.now()
        try:
            attrs["resolved_period"] = resolve_insights_period(
                attrs["period"],
                attrs.get("fromDate"),
                attrs.get("toDate"),
                now=now,
                compare=attrs["compare"],
            )
        except ValueError as exc:
            code = str(exc)
            if code == "range_too_large":
                message = f"El rango máximo es de {max_custom_range_days()} días."
            else:
                message = PERIOD_ERROR_MESSAGES.get(code, PERIOD_ERROR_MESSAGES["invalid_period"])
            raise serializers.ValidationError({"period": message}) from exc
        return attrs


class GoalsQuerySerializer(serializers.Serializer):
    """Metas opcionales; el saneo (clamp/defaults) lo hace `analytics.goals.normalize_goals`."""

    weeklyMinutesGoal = serializers.CharField(required=False, allow_blank=True)
    weeklyTrainingsGoal = serializers.CharField(required=False, allow_blank=True)
