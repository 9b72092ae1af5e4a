from datetime import date, timedelta

from django.utils import timezone
from rest_framework.test import APITestCase

from core.errors import (
    ATHLETE_ALREADY_ACTIVE_MESSAGE,
    ATHLETE_ALREADY_INACTIVE_MESSAGE,
    ATHLETE_INACTIVE_EDIT_MESSAGE,
    DUPLICATE_EMAIL_MESSAGE,
    INACTIVE_ATHLETE_TRAININGS_MESSAGE,
)
from core.models import Athlete, Training


def athlete_payload(**overrides):
    data = {"name": "Carlos Mendes", "email": "carlos@runy.test", "dateOfBirth": "1988-11-08"}
    data.update(overrides)
    return data


class AthleteAPITests(APITestCase):
    def create_athlete(self, **overrides):
        res = self.client.post("/api/athletes/", athlete_payload(**overrides), format="json")
        self.assertEqual(res.status_code, 201, res.data)
        return res.data["data"]

    def test_create_returns_envelope_with_camel_case(self):
        data = self.create_athlete()
        self.assertEqual(data["name"], "Carlos Mendes")
        self.assertEqual(data["dateOfBirth"], "1988-11-08")
        self.assertIsNone(data["deletedAt"])
        self.assertIn("createdAt", data)

    def test_duplicate_email_is_conflict_even_if_inactive(self):
        athlete = self.create_athlete()
        self.client.delete(f"/api/athletes/{athlete['id']}/")

        res = self.client.post("/api/athletes/", athlete_payload(name="Otro Carlos", email="CARLOS@runy.test"), format="json")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data, {"success": False, "error": "conflict", "message": DUPLICATE_EMAIL_MESSAGE})

    def test_validation(self):
        tomorrow = (timezone.localdate() + timedelta(days=1)).isoformat()
        cases = [
            athlete_payload(name="Al"),
            athlete_payload(email="no-es-email"),
            athlete_payload(dateOfBirth=tomorrow),
            {"name": "Sin Email"},
        ]
        for payload in cases:
            with self.subTest(payload=payload):
                res = self.client.post("/api/athletes/", payload, format="json")
                self.assertEqual(res.status_code, 400)
                self.assertEqual(res.data["error"], "invalid")
                self.assertIn("details", res.data)

    def test_soft_delete_and_reactivate(self):
        athlete = self.create_athlete()
        url = f"/api/athletes/{athlete['id']}/"

        res = self.client.delete(url)
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["success"])
        self.assertIsNotNone(res.data["data"]["deletedAt"])

        res = self.client.delete(url)
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["message"], ATHLETE_ALREADY_INACTIVE_MESSAGE)

        res = self.client.post(f"{url}reactivate/")
        self.assertEqual(res.status_code, 200)
        self.assertIsNone(res.data["data"]["deletedAt"])

        res = self.client.post(f"{url}reactivate/")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["message"], ATHLETE_ALREADY_ACTIVE_MESSAGE)

    def test_update_rules(self):
        athlete = self.create_athlete()
        other = self.create_athlete(email="otra@runy.test", name="Otra Persona")
        url = f"/api/athletes/{athlete['id']}/"

        res = self.client.patch(url, {"name": "Carlos Eduardo Mendes"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["name"], "Carlos Eduardo Mendes")

        res = self.client.patch(url, {"email": other["email"]}, format="json")
        self.assertEqual(res.status_code, 409)

        self.client.delete(url)
        res = self.client.put(url, athlete_payload(name="Nombre Nuevo"), format="json")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["message"], ATHLETE_INACTIVE_EDIT_MESSAGE)

    def test_get_by_id_any_state_and_404(self):
        athlete = self.create_athlete()
        self.client.delete(f"/api/athletes/{athlete['id']}/")

        res = self.client.get(f"/api/athletes/{athlete['id']}/")
        self.assertEqual(res.status_code, 200)
        self.assertIsNotNone(res.data["deletedAt"])

        res = self.client.get("/api/athletes/999999/")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["error"], "not_found")
        self.assertEqual(self.client.delete("/api/athletes/999999/").status_code, 404)

    def test_list_excludes_inactive_unless_requested(self):
        ids = [self.create_athlete(email=f"a{i}@runy.test", name=f"Atleta {i}")["id"] for i in range(3)]
        self.client.delete(f"/api/athletes/{ids[0]}/")

        res = self.client.get("/api/athletes/")
        self.assertEqual(res.data["totalCount"], 2)
        self.assertNotIn(ids[0], [a["id"] for a in res.data["items"]])

        res = self.client.get("/api/athletes/", {"includeInactive": "true"})
        self.assertEqual(res.data["totalCount"], 3)

    def test_pagination_envelope(self):
        for i in range(12):
            Athlete.objects.create(name=f"Atleta {i}", email=f"p{i}@runy.test", date_of_birth=date(1990, 1, 1))

        res = self.client.get("/api/athletes/", {"page": 3, "limit": 5})
        self.assertEqual(len(res.data["items"]), 2)
        self.assertEqual(res.data["totalCount"], 12)
        self.assertEqual(res.data["currentPage"], 3)
        self.assertEqual(res.data["totalPages"], 3)
        self.assertFalse(res.data["hasNextPage"])
        self.assertTrue(res.data["hasPreviousPage"])

        res = self.client.get("/api/athletes/")
        self.assertEqual(len(res.data["items"]), 10)
        self.assertTrue(res.data["hasNextPage"])

        res = self.client.get("/api/athletes/", {"page": 9})
        self.assertEqual(res.data["items"], [])


class TrainingAPITests(APITestCase):
    def setUp(self):
        self.athlete = Athlete.objects.create(name="Mariana Oliveira", email="mariana@runy.test", date_of_birth=date(1997, 1, 30))

    def create_training(self, **overrides):
        data = {"athleteId": self.athlete.id, "type": "Trail Run", "durationMinutes": 80, "intensity": "high"}
        data.update(overrides)
        return self.client.post("/api/trainings/", data, format="json")

    def deactivate_athlete(self):
        Athlete.objects.filter(pk=self.athlete.pk).update(deleted_at=timezone.now())

    def test_create(self):
        res = self.create_training(notes="Subidas")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["data"]["athleteId"], self.athlete.id)
        self.assertEqual(res.data["data"]["durationMinutes"], 80)
        self.assertEqual(res.data["data"]["notes"], "Subidas")

    def test_create_validation(self):
        for overrides in ({"durationMinutes": 481}, {"durationMinutes": 0}, {"intensity": "extreme"}, {"type": "ab"}, {"notes": "x" * 1001}):
            with self.subTest(overrides=overrides):
                self.assertEqual(self.create_training(**overrides).status_code, 400)

    def test_create_under_unknown_or_inactive_athlete(self):
        self.assertEqual(self.create_training(athleteId=999999).status_code, 404)

        self.deactivate_athlete()
        res = self.create_training()
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["message"], INACTIVE_ATHLETE_TRAININGS_MESSAGE)

    def test_soft_delete_allowed_under_inactive_athlete_but_reactivate_is_not(self):
        training_id = self.create_training().data["data"]["id"]
        self.deactivate_athlete()

        res = self.client.delete(f"/api/trainings/{training_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertIsNotNone(res.data["data"]["deletedAt"])

        res = self.client.post(f"/api/trainings/{training_id}/reactivate/")
        self.assertEqual(res.status_code, 409)

    def test_state_conflicts(self):
        training_id = self.create_training().data["data"]["id"]
        url = f"/api/trainings/{training_id}/"

        self.assertEqual(self.client.post(f"{url}reactivate/").status_code, 409)
        self.assertEqual(self.client.delete(url).status_code, 200)
        self.assertEqual(self.client.delete(url).status_code, 409)
        self.assertEqual(self.client.patch(url, {"durationMinutes": 30}, format="json").status_code, 409)
        self.assertEqual(self.client.post(f"{url}reactivate/").status_code, 200)

    def test_update(self):
        other = Athlete.objects.create(name="Otro Atleta", email="otro@runy.test", date_of_birth=date(1990, 1, 1))
        training_id = self.create_training().data["data"]["id"]

        res = self.client.patch(
            f"/api/trainings/{training_id}/", {"durationMinutes": 30, "athleteId": other.id}, format="json"
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["durationMinutes"], 30)
        self.assertEqual(res.data["data"]["athleteId"], self.athlete.id)

        self.deactivate_athlete()
        res = self.client.patch(f"/api/trainings/{training_id}/", {"durationMinutes": 40}, format="json")
        self.assertEqual(res.status_code, 409)

    def test_list_by_athlete(self):
        first = self.create_training().data["data"]["id"]
        self.create_training(type="Base Aeróbica", intensity="low")
        self.client.delete(f"/api/trainings/{first}/")
        self.deactivate_athlete()

        url = f"/api/athletes/{self.athlete.id}/trainings/"
        res = self.client.get(url)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["totalCount"], 1)

        res = self.client.get(url, {"includeInactive": "true"})
        self.assertEqual(res.data["totalCount"], 2)

        self.assertEqual(self.client.get("/api/athletes/999999/trainings/").status_code, 404)

    def test_global_list_filters(self):
        other = Athlete.objects.create(name="Otro Atleta", email="otro@runy.test", date_of_birth=date(1990, 1, 1))
        self.create_training(intensity="high")
        self.create_training(intensity="low")
        Training.objects.create(athlete=other, type="Natación", duration_minutes=30, intensity="high")

        res = self.client.get("/api/trainings/", {"athlete": self.athlete.id})
        self.assertEqual(res.data["totalCount"], 2)

        res = self.client.get("/api/trainings/", {"intensity": "high"})
        self.assertEqual(res.data["totalCount"], 2)

        res = self.client.get("/api/trainings/", {"type": "natación"})
        self.assertEqual(res.data["totalCount"], 1)

    def test_get_by_id(self):
        training_id = self.create_training().data["data"]["id"]
        res = self.client.get(f"/api/trainings/{training_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["type"], "Trail Run")
        self.assertEqual(self.client.get("/api/trainings/999999/").status_code, 404)
