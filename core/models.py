from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

# ==============================================================================
#  1. CONSTANTES DE NEGOCIO
# ==============================================================================

TRAINING_DURATION_MAX_MIN = 480  # 8 horas


class TrainingIntensity(models.TextChoices):
    LOW = "low", "Baja"
    MODERATE = "moderate", "Moderada"
    HIGH = "high", "Alta"


# Orden canónico (low -> high). Fuente única para distribuciones y filtros.
TRAINING_INTENSITY_VALUES = tuple(TrainingIntensity.values)


# ==============================================================================
#  2. BASE SOFT-DELETE
# ==============================================================================

class SoftDeleteQuerySet(models.QuerySet):
    def active(self):
        return self.filter(deleted_at__isnull=True)

    def inactive(self):
        return self.filter(deleted_at__isnull=False)


class SoftDeleteModel(models.Model):
    """
    Columnas base compartidas por atletas y entrenamientos.

    Estado:
    - Activo: deleted_at IS NULL
    - Inactivo: deleted_at con timestamp (soft-delete, reversible vía reactivación)

    Las transiciones viven en `core.lifecycle`; acá solo está el estado.
    """

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        abstract = True

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


# ==============================================================================
#  3. MODELOS PRINCIPALES
# ==============================================================================

class Athlete(SoftDeleteModel):
    name = models.CharField(max_length=255)
    # Único para TODOS los atletas (activos o desactivados).
    email = models.EmailField(max_length=255, unique=True)
    date_of_birth = models.DateField()

    class Meta:
        db_table = "athletes"
        ordering = ["-created_at", "-id"]
        verbose_name = "🏃 Atleta"
        verbose_name_plural = "🏃 Atletas"

    def __str__(self):
        return f"{self.name} <{self.email}>"


class Training(SoftDeleteModel):
    athlete = models.ForeignKey(Athlete, on_delete=models.CASCADE, related_name="trainings")

    # Texto libre ("Corrida", "Natación"...). Sin normalización a propósito.
    type = models.CharField(max_length=100)
    duration_minutes = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(TRAINING_DURATION_MAX_MIN)],
    )
    intensity = models.CharField(max_length=10, choices=TrainingIntensity.choices)
    notes = models.TextField(null=True, blank=True)

    class Meta:
        db_table = "trainings"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["athlete", "created_at"], name="training_athlete_created_idx"),
        ]
        verbose_name = "📅 Entrenamiento"
        verbose_name_plural = "📅 Entrenamientos"

    def __str__(self):
        return f"{self.created_at:%Y-%m-%d} - {self.type} ({self.duration_minutes} min, {self.intensity})"
