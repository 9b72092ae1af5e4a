from django.urls import include, path
from rest_framework.routers import DefaultRouter

from core.views import AthleteViewSet, TrainingViewSet

# Creamos el router para la API REST estándar
router = DefaultRouter()

# ==============================================================================
#  RUTAS DEL NÚCLEO (CORE) - API ENDPOINTS
# ==============================================================================

# 1. Atletas (+ /reactivate/ y /trainings/)
router.register(r"athletes", AthleteViewSet, basename="athlete")

# 2. Entrenamientos (+ /reactivate/)
router.register(r"trainings", TrainingViewSet, basename="training")

urlpatterns = [
    # Ejemplo: /api/athletes/, /api/athletes/{id}/reactivate/, /api/trainings/
    path("", include(router.urls)),
]
