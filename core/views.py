from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core import lifecycle
from core.filters import TrainingFilter
from core.models import Athlete, Training
from core.pagination import PageLimitPagination
from core.serializers import AthleteSerializer, TrainingSerializer, TrainingUpdateSerializer

TRUTHY = {"1", "true", "yes", "on"}


def include_inactive_requested(request) -> bool:
    return str(request.query_params.get("includeInactive", "")).strip().lower() in TRUTHY


def success(data, *, status_code=status.HTTP_200_OK) -> Response:
    """Envelope de mutaciones: {"success": true, "data": <entidad>}."""
    return Response({"success": True, "data": data}, status=status_code)


# ==============================================================================
#  API REST
# ==============================================================================

class AthleteViewSet(viewsets.ModelViewSet):
    """
    Gestión de Atletas.

    - list: solo activos salvo `includeInactive=true` (el total sigue el mismo filtro)
    - retrieve: cualquier estado
    - destroy: soft-delete (200 con envelope, nunca borrado físico)
    """

    serializer_class = AthleteSerializer
    pagination_class = PageLimitPagination
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        qs = Athlete.objects.all()
        if self.action == "list" and not include_inactive_requested(self.request):
            qs = qs.active()
        return qs.order_by("-created_at", "-id")

    def retrieve(self, request, pk=None):
        return Response(self.get_serializer(lifecycle.get_athlete(int(pk))).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        athlete = lifecycle.create_athlete(**serializer.validated_data)
        return success(self.get_serializer(athlete).data, status_code=status.HTTP_201_CREATED)

    def update(self, request, pk=None, partial=False):
        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        athlete = lifecycle.update_athlete(int(pk), **serializer.validated_data)
        return success(self.get_serializer(athlete).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    def destroy(self, request, pk=None):
        athlete = lifecycle.soft_delete_athlete(int(pk))
        return success(self.get_serializer(athlete).data)

    # Ruta: /api/athletes/{id}/reactivate/
    @action(detail=True, methods=["post"])
    def reactivate(self, request, pk=None):
        athlete = lifecycle.reactivate_athlete(int(pk))
        return success(self.get_serializer(athlete).data)

    # Ruta: /api/athletes/{id}/trainings/ (lectura histórica, atleta en cualquier estado)
    @action(detail=True, methods=["get"], serializer_class=TrainingSerializer)
    def trainings(self, request, pk=None):
        athlete = lifecycle.get_athlete(int(pk))
        qs = Training.objects.filter(athlete=athlete)
        if not include_inactive_requested(request):
            qs = qs.active()
        page = self.paginate_queryset(qs.order_by("-created_at", "-id"))
        return self.get_paginated_response(TrainingSerializer(page, many=True).data)


class TrainingViewSet(viewsets.ModelViewSet):
    """
    Entrenamientos.
    Filtros: athlete, intensity, type (exacto sin mayúsculas), start_date/end_date.
    """

    serializer_class = TrainingSerializer
    pagination_class = PageLimitPagination
    filterset_class = TrainingFilter
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        qs = Training.objects.all()
        if self.action == "list" and not include_inactive_requested(self.request):
            qs = qs.active()
        return qs.order_by("-created_at", "-id")

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return TrainingUpdateSerializer
        return TrainingSerializer

    def retrieve(self, request, pk=None):
        return Response(self.get_serializer(lifecycle.get_training(int(pk))).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        training = lifecycle.create_training(**serializer.validated_data)
        return success(TrainingSerializer(training).data, status_code=status.HTTP_201_CREATED)

    def update(self, request, pk=None, partial=False):
        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        training = lifecycle.update_training(int(pk), **serializer.validated_data)
        return success(TrainingSerializer(training).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    def destroy(self, request, pk=None):
        training = lifecycle.soft_delete_training(int(pk))
        return success(TrainingSerializer(training).data)

    @action(detail=True, methods=["post"])
    def reactivate(self, request, pk=None):
        training = lifecycle.reactivate_training(int(pk))
        return success(TrainingSerializer(training).data)
