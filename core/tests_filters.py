"""
Tests de filtros de GET /api/trainings/ y del listado por atleta.
"""
from datetime import timedelta

import pytest
from django.utils import timezone

from core.models import Training


def make_training(athlete, days_ago, **kwargs):
    when = timezone.now() - timedelta(days=days_ago)
    data = {"type": "Corrida", "duration_minutes": 30, "intensity": "moderate"}
    data.update(kwargs)
    return Training.objects.create(athlete=athlete, created_at=when, updated_at=when, **data)


@pytest.mark.django_db
class TestTrainingFilters:
    def test_date_range_is_inclusive(self, api_client, athlete):
        make_training(athlete, 1)
        make_training(athlete, 10)
        make_training(athlete, 40)

        start = (timezone.now() - timedelta(days=10)).date().isoformat()
        end = timezone.now().date().isoformat()
        res = api_client.get("/api/trainings/", {"start_date": start, "end_date": end})

        assert res.status_code == 200
        assert res.data["totalCount"] == 2

    def test_inactive_trainings_need_include_inactive(self, api_client, athlete):
        make_training(athlete, 1)
        make_training(athlete, 2, deleted_at=timezone.now())

        assert api_client.get("/api/trainings/").data["totalCount"] == 1
        assert api_client.get("/api/trainings/", {"includeInactive": "true"}).data["totalCount"] == 2

    def test_invalid_intensity_filter_is_400(self, api_client, athlete):
        res = api_client.get("/api/trainings/", {"intensity": "extreme"})

        assert res.status_code == 400
        assert res.data["success"] is False
        assert res.data["error"] == "invalid"

    def test_newest_first(self, api_client, athlete):
        old = make_training(athlete, 5)
        new = make_training(athlete, 1)

        ids = [t["id"] for t in api_client.get(f"/api/athletes/{athlete.id}/trainings/").data["items"]]
        assert ids == [new.id, old.id]
