import logging
import time

from core.utils.logging import safe_extra

logger = logging.getLogger(__name__)


class RequestTimingMiddleware:
    """
    Middleware liviano que loguea cada request de la API con su duración.

    Solo mide rutas bajo /api/ (admin y swagger no interesan acá).
    Los errores ya los loguea el exception handler; este log es de telemetría.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith("/api/"):
            return self.get_response(request)

        started = time.perf_counter()
        response = self.get_response(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        logger.info(
            "api.request.completed",
            extra=safe_extra(
                {
                    "method": request.method,
                    "path": request.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                }
            ),
        )
        return response
