"""
Fixtures de pytest compartidas por los tests de core/analytics escritos como funciones.
"""
from datetime import date

import pytest
from rest_framework.test import APIClient


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def athlete(db):
    from core.models import Athlete

    return Athlete.objects.create(name="Beatriz Lima", email="beatriz@runy.test", date_of_birth=date(1999, 9, 9))
