import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

from core.utils.logging import safe_extra

logger = logging.getLogger(__name__)

INVALID_DATA_MESSAGE = "Datos inválidos."


def _first_message(detail) -> str:
    """Primer mensaje legible de un `detail` de DRF (str, lista o dict anidado)."""
    if isinstance(detail, dict):
        if "detail" in detail:
            return _first_message(detail["detail"])
        for value in detail.values():
            return _first_message(value)
        return INVALID_DATA_MESSAGE
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else INVALID_DATA_MESSAGE
    return str(detail)


def api_exception_handler(exc, context):
    """
    Envelope estable para errores: {"success": false, "error", "message", "details"?}.

    - 4xx: mensaje específico (el frontend lo muestra tal cual, ej. conflictos de estado).
    - 5xx: se loguea con stacktrace; el cliente recibe el mensaje de la operación.
    """
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        return None

    view = context.get("view")
    log_ctx = {
        "view": type(view).__name__ if view is not None else None,
        "status_code": response.status_code,
        "error_type": type(exc).__name__,
    }

    if response.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("api.error.server", exc_info=exc, extra=safe_extra(log_ctx))
    elif response.status_code == status.HTTP_409_CONFLICT:
        logger.info("api.error.conflict", extra=safe_extra({**log_ctx, "detail": str(exc.detail)}))

    if isinstance(exc, exceptions.ValidationError):
        error_code = "invalid"
    else:
        codes = exc.get_codes()
        error_code = codes if isinstance(codes, str) else exc.default_code

    payload = {
        "success": False,
        "error": error_code,
        "message": _first_message(response.data),
    }
    if isinstance(exc, exceptions.ValidationError):
        payload["details"] = response.data

    response.data = payload
    return response
