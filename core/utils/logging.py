from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

# logging.makeRecord levanta KeyError("Attempt to overwrite ... in LogRecord")
# si `extra` trae alguno de estos nombres.
RESERVED_LOGRECORD_ATTRS: frozenset[str] = frozenset(
    {
        "args", "asctime", "created", "exc_info", "exc_text", "filename", "funcName",
        "levelname", "levelno", "lineno", "message", "module", "msecs", "msg", "name",
        "pathname", "process", "processName", "relativeCreated", "stack_info",
        "taskName", "thread", "threadName",
    }
)


def safe_extra(extra: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Copia de `extra` apta para `logger.info(..., extra=...)`.

    - claves reservadas de LogRecord se renombran con prefijo `log_` (sin pisar otras)
    - fechas se pasan a ISO para que los handlers de texto las muestren legibles
    """
    if not extra:
        return {}

    out: dict[str, Any] = {}
    for raw_key, value in extra.items():
        key = str(raw_key)
        if key in RESERVED_LOGRECORD_ATTRS:
            key = f"log_{key}"
        base, n = key, 1
        while key in out:
            key = f"{base}_{n}"
            n += 1
        out[key] = value.isoformat() if isinstance(value, date) else value
    return out
