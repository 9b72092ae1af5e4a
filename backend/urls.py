# backend/urls.py

from django.contrib import admin
from django.urls import include, path

# --- Documentación (Swagger) ---
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

schema_view = get_schema_view(
    openapi.Info(
        title="Runy Training Insights API",
        default_version="v1",
        description="API para gestión de atletas, entrenamientos e insights de carga",
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    # 1. Panel de Administración de Django
    path("admin/", admin.site.urls),

    # 2. Atletas y entrenamientos (CRUD + ciclo de vida)
    path("api/", include("core.urls")),

    # 3. Insights, recomendaciones y metas
    path("api/analytics/", include("analytics.urls")),

    # 4. Documentación interactiva
    path("swagger/", schema_view.with_ui("swagger", cache_timeout=0), name="schema-swagger-ui"),
]
