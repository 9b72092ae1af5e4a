import math

from django.conf import settings
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class PageLimitPagination(PageNumberPagination):
    """
    Paginación `page`/`limit` con envelope propio.

    Respuesta:
        {items, totalCount, currentPage, totalPages, hasNextPage, hasPreviousPage}

    Una página fuera de rango devuelve `items: []` (no 404): el frontend
    navega con los flags y no necesita manejar errores de paginado.
    """

    page_query_param = "page"
    page_size_query_param = "limit"

    page_size = getattr(settings, "API_PAGE_SIZE", 10)
    max_page_size = getattr(settings, "API_MAX_PAGE_SIZE", 50)

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        self.page_size_value = self.get_page_size(request)
        self.current_page = self._requested_page(request)
        self.total_count = queryset.count()

        offset = (self.current_page - 1) * self.page_size_value
        return list(queryset[offset:offset + self.page_size_value])

    def _requested_page(self, request) -> int:
        raw = request.query_params.get(self.page_query_param)
        try:
            page = int(raw) if raw is not None else 1
        except (TypeError, ValueError):
            page = 1
        return max(page, 1)

    def get_paginated_response(self, data):
        total_pages = math.ceil(self.total_count / self.page_size_value) if self.total_count else 0
        return Response(
            {
                "items": data,
                "totalCount": self.total_count,
                "currentPage": self.current_page,
                "totalPages": total_pages,
                "hasNextPage": self.current_page < total_pages,
                "hasPreviousPage": self.current_page > 1,
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "items": schema,
                "totalCount": {"type": "integer"},
                "currentPage": {"type": "integer"},
                "totalPages": {"type": "integer"},
                "hasNextPage": {"type": "boolean"},
                "hasPreviousPage": {"type": "boolean"},
            },
        }
