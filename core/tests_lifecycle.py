from datetime import date
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.db import DatabaseError, IntegrityError, OperationalError
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework.exceptions import NotFound

from core import lifecycle
from core.errors import (
    DUPLICATE_EMAIL_MESSAGE,
    ConflictError,
    DatabaseConnectionError,
    InternalError,
    translate_db_errors,
)
from core.models import Athlete, Training
from core.utils.logging import safe_extra


class AthleteLifecycleTests(TestCase):
    def setUp(self):
        self.athlete = lifecycle.create_athlete(name="Lucas Ferreira", email="lucas@runy.test", date_of_birth=date(2004, 3, 15))

    def test_created_active(self):
        self.assertTrue(self.athlete.is_active)
        self.assertEqual(Athlete.objects.active().count(), 1)

    def test_soft_delete_twice_is_conflict(self):
        athlete = lifecycle.soft_delete_athlete(self.athlete.pk)
        self.assertFalse(athlete.is_active)
        self.assertEqual(Athlete.objects.inactive().count(), 1)
        with self.assertRaises(ConflictError):
            lifecycle.soft_delete_athlete(self.athlete.pk)

    def test_reactivate_active_is_conflict(self):
        with self.assertRaises(ConflictError):
            lifecycle.reactivate_athlete(self.athlete.pk)

    def test_update_ignores_unknown_fields(self):
        athlete = lifecycle.update_athlete(self.athlete.pk, name="Lucas F.", deleted_at=timezone.now())
        self.assertEqual(athlete.name, "Lucas F.")
        self.assertTrue(athlete.is_active)

    def test_duplicate_email_is_conflict(self):
        with self.assertRaisesMessage(ConflictError, DUPLICATE_EMAIL_MESSAGE):
            lifecycle.create_athlete(name="Otro Lucas", email="lucas@runy.test", date_of_birth=date(2000, 1, 1))

    def test_missing_athlete(self):
        with self.assertRaises(NotFound):
            lifecycle.soft_delete_athlete(999999)

    def test_conditional_update_reports_lost_race(self):
        # Otra transacción desactivó el atleta entre el chequeo y la escritura.
        Athlete.objects.filter(pk=self.athlete.pk).update(deleted_at=timezone.now())
        with self.assertRaises(ConflictError):
            lifecycle._conditional_update(
                Athlete, self.athlete.pk, active=True, conflict_message="x", deleted_at=timezone.now()
            )

    def test_transitions_are_logged(self):
        with self.assertLogs("core.lifecycle", level="INFO") as logs:
            lifecycle.soft_delete_athlete(self.athlete.pk)
            lifecycle.reactivate_athlete(self.athlete.pk)
        self.assertIn("athletes.soft_deleted", logs.output[0])
        self.assertIn("athletes.reactivated", logs.output[1])


class TrainingLifecycleTests(TestCase):
    def setUp(self):
        self.athlete = Athlete.objects.create(name="Ana Costa", email="ana@runy.test", date_of_birth=date(2002, 7, 22))
        self.training = lifecycle.create_training(
            athlete_id=self.athlete.pk, type="Fartlek", duration_minutes=40, intensity="moderate"
        )

    def deactivate_athlete(self):
        Athlete.objects.filter(pk=self.athlete.pk).update(deleted_at=timezone.now())

    def test_create_under_inactive_athlete_is_conflict(self):
        self.deactivate_athlete()
        with self.assertRaises(ConflictError):
            lifecycle.create_training(athlete_id=self.athlete.pk, type="Fartlek", duration_minutes=40, intensity="low")
        self.assertEqual(Training.objects.count(), 1)

    def test_soft_delete_ignores_athlete_state(self):
        self.deactivate_athlete()
        training = lifecycle.soft_delete_training(self.training.pk)
        self.assertFalse(training.is_active)

    def test_reactivate_requires_active_athlete(self):
        lifecycle.soft_delete_training(self.training.pk)
        self.deactivate_athlete()
        with self.assertRaises(ConflictError):
            lifecycle.reactivate_training(self.training.pk)
        self.assertFalse(Training.objects.get(pk=self.training.pk).is_active)

    def test_update_requires_both_active(self):
        training = lifecycle.update_training(self.training.pk, duration_minutes=50, athlete_id=999)
        self.assertEqual(training.duration_minutes, 50)
        self.assertEqual(training.athlete_id, self.athlete.pk)

        self.deactivate_athlete()
        with self.assertRaises(ConflictError):
            lifecycle.update_training(self.training.pk, duration_minutes=60)

    def test_get_training_any_state(self):
        lifecycle.soft_delete_training(self.training.pk)
        self.assertEqual(lifecycle.get_training(self.training.pk).pk, self.training.pk)
        with self.assertRaises(NotFound):
            lifecycle.get_training(999999)


class TranslateDbErrorsTests(SimpleTestCase):
    def test_unique_violation_becomes_conflict(self):
        with self.assertRaisesMessage(ConflictError, "duplicado"):
            with translate_db_errors("crear atleta", unique_message="duplicado"):
                raise IntegrityError("UNIQUE constraint failed: athletes.email")

    def test_other_integrity_error_is_internal(self):
        with self.assertRaises(InternalError):
            with translate_db_errors("crear atleta", unique_message="duplicado"):
                raise IntegrityError("NOT NULL constraint failed: athletes.name")

    def test_operational_error_is_unavailable(self):
        with self.assertRaises(DatabaseConnectionError):
            with translate_db_errors("listar atletas"):
                raise OperationalError("could not connect to server")

    def test_database_error_keeps_cause(self):
        cause = DatabaseError("boom")
        with self.assertRaises(InternalError) as ctx:
            with translate_db_errors("reactivar atleta"):
                raise cause
        self.assertEqual(str(ctx.exception.detail), "Fallo al reactivar atleta.")
        self.assertIs(ctx.exception.__cause__, cause)

    def test_api_exceptions_pass_through(self):
        with self.assertRaises(ConflictError):
            with translate_db_errors("x"):
                raise ConflictError("estado")


class ErrorEnvelopeTests(TestCase):
    def test_database_unavailable_maps_to_503(self):
        with mock.patch("core.views.lifecycle.get_athlete", side_effect=DatabaseConnectionError()):
            res = self.client.get("/api/athletes/1/")
        self.assertEqual(res.status_code, 503)
        self.assertEqual(res.json()["error"], "database_unavailable")

    def test_internal_error_message(self):
        err = InternalError("Fallo al listar entrenamientos.")
        with mock.patch("core.views.lifecycle.get_training", side_effect=err):
            with self.assertLogs("core.exception_handler", level="ERROR"):
                res = self.client.get("/api/trainings/1/")
        self.assertEqual(res.status_code, 500)
        self.assertEqual(
            res.json(),
            {"success": False, "error": "internal_error", "message": "Fallo al listar entrenamientos."},
        )


class RequestTimingMiddlewareTests(TestCase):
    def test_api_requests_are_logged(self):
        with self.assertLogs("core.middleware", level="INFO") as logs:
            self.client.get("/api/athletes/")
        self.assertIn("api.request.completed", logs.output[0])


class SafeExtraTests(SimpleTestCase):
    def test_reserved_keys_are_prefixed(self):
        out = safe_extra({"name": "x", "message": "y", "log_name": "z", "athlete_id": 1})
        self.assertEqual(out["log_name"], "x")
        self.assertEqual(out["log_message"], "y")
        self.assertEqual(out["log_name_1"], "z")
        self.assertEqual(out["athlete_id"], 1)

    def test_dates_are_iso(self):
        self.assertEqual(safe_extra({"day": date(2024, 1, 1)}), {"day": "2024-01-01"})
        self.assertEqual(safe_extra(None), {})


class SeedDataCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        out = StringIO()
        call_command("seed_data", "--weeks", "2", stdout=out)
        self.assertEqual(Athlete.objects.count(), 5)
        self.assertEqual(Training.objects.count(), 30)

        call_command("seed_data", stdout=out)
        self.assertEqual(Training.objects.count(), 30)
        self.assertIn("Seed omitido", out.getvalue())
