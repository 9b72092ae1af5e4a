from datetime import date, timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from core.models import Athlete, Training

ATHLETES = [
    ("Lucas Ferreira", "lucas.ferreira@runy.com", date(2004, 3, 15)),
    ("Ana Beatriz Costa", "ana.beatriz@runy.com", date(2002, 7, 22)),
    ("Carlos Eduardo Mendes", "carlos.mendes@runy.com", date(1988, 11, 8)),
    ("Mariana Oliveira", "mariana.oliveira@runy.com", date(1997, 1, 30)),
    ("Rafael Santos", "rafael.santos@runy.com", date(1990, 5, 14)),
]

# (índice de atleta, tipo, minutos, intensidad, notas)
TRAININGS = [
    (0, "Corrida Continua", 60, "moderate", "Ritmo de base sostenido"),
    (0, "Intervalado 400m", 45, "high", "8 x 400m con 90s de pausa"),
    (0, "Fondo Largo", 90, "low", "Fondo semanal a ritmo cómodo"),
    (1, "Trote Suave", 30, "low", "Foco en respiración y postura"),
    (1, "Fartlek", 40, "moderate", "Cambios libres de ritmo en el parque"),
    (1, "Corrida Progresiva", 35, "moderate", "Acelerar de a poco, fuerte los últimos 10 min"),
    (2, "Técnica de Carrera", 50, "moderate", "Pasada, cadencia y postura"),
    (2, "HIIT Corrida", 30, "high", "10 x 100m a máxima velocidad"),
    (2, "Regenerativo", 40, "low", "Recuperación activa post competencia"),
    (3, "Trail Run", 80, "high", "Subidas empinadas, 400m de desnivel acumulado"),
    (3, "Base Aeróbica", 55, "low", "Volumen aeróbico en terreno plano"),
    (3, "Fuerza en Carrera", 45, "moderate", "Fortalecimiento combinado con trote"),
    (4, "Velocidad", 35, "high", "6 x 200m sprint con pausa completa"),
    (4, "Corrida Aeróbica", 50, "low", None),
    (4, "Intervalado Corto", 40, "high", "10 x 100m, foco en la aceleración"),
]


class Command(BaseCommand):
    help = "Carga atletas y entrenamientos de ejemplo (idempotente: no hace nada si ya hay atletas)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--weeks",
            type=int,
            default=6,
            help="Semanas hacia atrás sobre las que se reparten los entrenamientos.",
        )

    def handle(self, *args, **options):
        if Athlete.objects.exists():
            self.stdout.write(self.style.WARNING("⚠️ Ya hay atletas cargados. Seed omitido."))
            return

        weeks = max(1, int(options["weeks"]))
        now = timezone.now()

        with transaction.atomic():
            athletes = [
                Athlete.objects.create(name=name, email=email, date_of_birth=dob)
                for name, email, dob in ATHLETES
            ]
            self.stdout.write(f"👥 {len(athletes)} atletas creados.")

            created = 0
            for week in range(weeks):
                for idx, (athlete_idx, type_, minutes, intensity, notes) in enumerate(TRAININGS):
                    # Repartimos en la semana: cada entrenamiento en un día distinto.
                    when = now - timedelta(weeks=week, days=idx % 7, hours=idx)
                    Training.objects.create(
                        athlete=athletes[athlete_idx],
                        type=type_,
                        # Variación semanal leve para que spike/tendencia tengan señal.
                        duration_minutes=min(480, minutes + (week % 3) * 5),
                        intensity=intensity,
                        notes=notes,
                        created_at=when,
                        updated_at=when,
                    )
                    created += 1

        self.stdout.write(self.style.SUCCESS(f"✅ Seed completo: {created} entrenamientos en {weeks} semanas."))
