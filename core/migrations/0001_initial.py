import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Athlete",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("deleted_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(max_length=255, unique=True)),
                ("date_of_birth", models.DateField()),
            ],
            options={
                "verbose_name": "🏃 Atleta",
                "verbose_name_plural": "🏃 Atletas",
                "db_table": "athletes",
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Training",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("deleted_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("type", models.CharField(max_length=100)),
                (
                    "duration_minutes",
                    models.PositiveIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(480),
                        ]
                    ),
                ),
                (
                    "intensity",
                    models.CharField(
                        choices=[("low", "Baja"), ("moderate", "Moderada"), ("high", "Alta")],
                        max_length=10,
                    ),
                ),
                ("notes", models.TextField(blank=True, null=True)),
                (
                    "athlete",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="trainings",
                        to="core.athlete",
                    ),
                ),
            ],
            options={
                "verbose_name": "📅 Entrenamiento",
                "verbose_name_plural": "📅 Entrenamientos",
                "db_table": "trainings",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["athlete", "created_at"], name="training_athlete_created_idx"),
                ],
            },
        ),
    ]
