from datetime import date, timedelta

from django.test import override_settings
from django.utils import timezone
from rest_framework.test import APITestCase

from analytics.insights import NO_DATA_TITLE
from analytics.recommendations import DISCLAIMER
from core.models import Athlete, Training


class AthleteInsightsAPITests(APITestCase):
    def setUp(self):
        self.now = timezone.now()
        self.athlete = Athlete.objects.create(name="Lucas Ferreira", email="lucas@runy.test", date_of_birth=date(2004, 3, 15))
        self.url = f"/api/analytics/athletes/{self.athlete.id}/insights/"

    def add_training(self, days_ago, minutes=30, intensity="moderate", type_="Corrida", deleted=False):
        when = self.now - timedelta(days=days_ago)
        return Training.objects.create(
            athlete=self.athlete,
            type=type_,
            duration_minutes=minutes,
            intensity=intensity,
            created_at=when,
            updated_at=when,
            deleted_at=when if deleted else None,
        )

    def test_response_shape(self):
        self.add_training(1, 30, "moderate")
        self.add_training(2, 45, "high")

        res = self.client.get(self.url)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(set(res.data), {"period", "kpis", "distribution", "timeSeries", "insights", "highlights"})
        self.assertEqual(res.data["period"]["to"], self.now.date().isoformat())
        self.assertEqual(res.data["period"]["from"], (self.now.date() - timedelta(days=29)).isoformat())
        self.assertEqual(res.data["kpis"][0]["value"], 2)
        self.assertEqual(res.data["kpis"][2]["value"], 60 + 135)

    def test_only_active_trainings_in_period_are_counted(self):
        self.add_training(1)
        self.add_training(2, deleted=True)
        self.add_training(45)

        res = self.client.get(self.url, {"period": "30"})
        self.assertEqual(res.data["kpis"][0]["value"], 1)

    def test_empty_period(self):
        res = self.client.get(self.url, {"period": "7"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data["insights"]), 1)
        self.assertEqual(res.data["insights"][0]["title"], NO_DATA_TITLE)

    def test_inactive_athlete_is_still_readable(self):
        self.add_training(1)
        Athlete.objects.filter(pk=self.athlete.pk).update(deleted_at=self.now)

        res = self.client.get(self.url)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["kpis"][0]["value"], 1)

    def test_unknown_athlete_is_404(self):
        res = self.client.get("/api/analytics/athletes/999999/insights/")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["success"], False)
        self.assertEqual(res.data["error"], "not_found")

    def test_compare_adds_previous_period(self):
        self.add_training(1)
        self.add_training(10)

        res = self.client.get(self.url, {"period": "7", "compare": "true"})
        period = res.data["period"]
        self.assertEqual(period["compareTo"], (self.now.date() - timedelta(days=7)).isoformat())
        self.assertEqual(period["compareFrom"], (self.now.date() - timedelta(days=13)).isoformat())
        self.assertEqual(res.data["kpis"][0]["delta"], 0)
        self.assertEqual(res.data["kpis"][0]["trend"], "stable")

    def test_filters(self):
        self.add_training(1, intensity="high", type_="Corrida")
        self.add_training(2, intensity="low", type_="Corrida")
        self.add_training(3, intensity="high", type_="Natación")

        res = self.client.get(self.url, {"intensityFilter": "high", "trainingTypeFilter": "Corrida"})
        self.assertEqual(res.data["kpis"][0]["value"], 1)
        self.assertEqual(res.data["distribution"]["byType"], [{"type": "Corrida", "count": 1, "percentage": 100}])

    def test_custom_period(self):
        self.add_training(3)
        start = (self.now - timedelta(days=5)).date().isoformat()
        end = f"{self.now.date().isoformat()}T12:00:00Z"

        res = self.client.get(self.url, {"period": "custom", "fromDate": start, "toDate": end})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["period"], {"from": start, "to": self.now.date().isoformat()})
        self.assertEqual(res.data["kpis"][0]["value"], 1)

    def test_custom_period_validation(self):
        res = self.client.get(self.url, {"period": "custom", "fromDate": "2024-01-10"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"], "invalid")

        res = self.client.get(self.url, {"period": "custom", "fromDate": "2024-01-10", "toDate": "2024-01-01"})
        self.assertEqual(res.status_code, 400)
        self.assertIn("fromDate", res.data["message"])

    def test_long_custom_period_is_accepted(self):
        params = {"period": "custom", "fromDate": "2023-01-01", "toDate": "2024-12-31"}
        res = self.client.get(self.url, params)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["period"], {"from": "2023-01-01", "to": "2024-12-31"})

        with override_settings(INSIGHTS_MAX_CUSTOM_RANGE_DAYS=30):
            self.assertEqual(self.client.get(self.url, params).status_code, 400)

    def test_invalid_query_values(self):
        self.assertEqual(self.client.get(self.url, {"period": "14"}).status_code, 400)
        self.assertEqual(self.client.get(self.url, {"intensityFilter": "extreme"}).status_code, 400)

    def test_idempotent(self):
        for days_ago in (1, 4, 9, 15, 22):
            self.add_training(days_ago, 20 + days_ago, "high" if days_ago % 2 else "low")

        first = self.client.get(self.url, {"compare": "true"})
        second = self.client.get(self.url, {"compare": "true"})
        self.assertEqual(first.content, second.content)

    def test_computation_is_logged(self):
        with self.assertLogs("analytics.views", level="INFO") as logs:
            self.client.get(self.url)
        self.assertTrue(any("analytics.insights.computed" in line for line in logs.output))


class AthleteRecommendationsAPITests(APITestCase):
    def test_recommendations_for_same_query(self):
        athlete = Athlete.objects.create(name="Ana Costa", email="ana@runy.test", date_of_birth=date(2002, 7, 22))
        res = self.client.get(f"/api/analytics/athletes/{athlete.id}/insights/recommendations/", {"period": "7"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["disclaimer"], DISCLAIMER)
        self.assertEqual(len(res.data["items"]), 1)

    def test_unknown_athlete(self):
        res = self.client.get("/api/analytics/athletes/999999/insights/recommendations/")
        self.assertEqual(res.status_code, 404)


class AthleteGoalsAPITests(APITestCase):
    def test_progress_for_current_week(self):
        athlete = Athlete.objects.create(name="Rafael Santos", email="rafael@runy.test", date_of_birth=date(1990, 5, 14))
        Training.objects.create(athlete=athlete, type="Corrida", duration_minutes=75, intensity="low")

        res = self.client.get(
            f"/api/analytics/athletes/{athlete.id}/insights/goals/",
            {"weeklyMinutesGoal": "100", "weeklyTrainingsGoal": "99"},
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["goals"], {"weeklyMinutesGoal": 100, "weeklyTrainingsGoal": 14})
        self.assertEqual(res.data["progress"]["currentMinutes"], 75)
        self.assertEqual(res.data["progress"]["minutesProgress"], 75)
        self.assertFalse(res.data["progress"]["isComplete"])

    def test_defaults_and_unknown_athlete(self):
        athlete = Athlete.objects.create(name="Juliana Pereira", email="juliana@runy.test", date_of_birth=date(1995, 2, 28))
        res = self.client.get(f"/api/analytics/athletes/{athlete.id}/insights/goals/", {"weeklyMinutesGoal": "abc"})
        self.assertEqual(res.data["goals"], {"weeklyMinutesGoal": 150, "weeklyTrainingsGoal": 3})
        self.assertEqual(res.data["progress"]["currentTrainings"], 0)

        self.assertEqual(self.client.get("/api/analytics/athletes/999999/insights/goals/").status_code, 404)

    def test_non_finite_goal_falls_back_to_default(self):
        athlete = Athlete.objects.create(name="Paulo Souza", email="paulo@runy.test", date_of_birth=date(1993, 6, 1))
        res = self.client.get(
            f"/api/analytics/athletes/{athlete.id}/insights/goals/",
            {"weeklyMinutesGoal": "1e400", "weeklyTrainingsGoal": "inf"},
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["goals"], {"weeklyMinutesGoal": 150, "weeklyTrainingsGoal": 3})
