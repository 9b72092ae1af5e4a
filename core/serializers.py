from django.utils import timezone
from rest_framework import serializers

from core.models import TRAINING_DURATION_MAX_MIN, Athlete, Training, TrainingIntensity

NAME_MIN_LENGTH = 3
TYPE_MIN_LENGTH = 3
NOTES_MAX_LENGTH = 1000


# ==============================================================================
#  1. ATLETAS
# ==============================================================================

class AthleteSerializer(serializers.ModelSerializer):
    """
    Payload camelCase para el frontend.
    La unicidad de email la resuelve la base (IntegrityError -> 409), no DRF.
    """

    name = serializers.CharField(min_length=NAME_MIN_LENGTH, max_length=255, trim_whitespace=True)
    dateOfBirth = serializers.DateField(source="date_of_birth")
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    deletedAt = serializers.DateTimeField(source="deleted_at", read_only=True)

    class Meta:
        model = Athlete
        fields = ["id", "name", "email", "dateOfBirth", "createdAt", "updatedAt", "deletedAt"]
        extra_kwargs = {"email": {"validators": [], "max_length": 255}}

    def validate_email(self, value: str) -> str:
        return value.strip().lower()

    def validate_dateOfBirth(self, value):
        if value >= timezone.localdate():
            raise serializers.ValidationError("La fecha de nacimiento debe estar en el pasado.")
        return value


# ==============================================================================
#  2. ENTRENAMIENTOS
# ==============================================================================

class TrainingSerializer(serializers.ModelSerializer):
    athleteId = serializers.IntegerField(source="athlete_id", min_value=1)
    type = serializers.CharField(min_length=TYPE_MIN_LENGTH, max_length=100, trim_whitespace=True)
    durationMinutes = serializers.IntegerField(
        source="duration_minutes", min_value=1, max_value=TRAINING_DURATION_MAX_MIN
    )
    intensity = serializers.ChoiceField(choices=TrainingIntensity.choices)
    notes = serializers.CharField(
        max_length=NOTES_MAX_LENGTH, required=False, allow_null=True, allow_blank=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    deletedAt = serializers.DateTimeField(source="deleted_at", read_only=True)

    class Meta:
        model = Training
        fields = [
            "id", "athleteId", "type", "durationMinutes", "intensity", "notes",
            "createdAt", "updatedAt", "deletedAt",
        ]

    def validate_notes(self, value):
        # "" y None significan lo mismo: sin notas.
        return value or None


class TrainingUpdateSerializer(TrainingSerializer):
    """Un entrenamiento no cambia de atleta: athleteId es solo lectura al editar."""

    athleteId = serializers.IntegerField(source="athlete_id", read_only=True)
