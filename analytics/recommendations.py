"""
Recomendaciones a partir de los insights ya calculados.

Tabla de prioridad determinística sobre pares (type, severity): mismas señales,
mismas recomendaciones y en el mismo orden. No es generación libre de texto.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

MAX_RECOMMENDATIONS = 3

DISCLAIMER = "Observación: recomendaciones informativas, sin carácter médico."

STABLE_PATTERN_MESSAGE = (
    "Patrón estable en el período. Mantené la consistencia y seguí la variación de carga semana a semana."
)

# (type, severidades que disparan, texto). El orden de la tupla ES la prioridad.
RECOMMENDATION_RULES: tuple[tuple[str, frozenset[str], str], ...] = (
    (
        "spike",
        frozenset({"warning", "critical"}),
        "Tuviste un aumento abrupto de carga. Intentá progresar de forma más gradual la próxima semana.",
    ),
    (
        "monotony",
        frozenset({"warning", "critical"}),
        "La carga semanal está poco variada. Considerá alternar tipo de entrenamiento e intensidad.",
    ),
    (
        "trend",
        frozenset({"warning"}),
        "La tendencia reciente indica una baja de volumen. Si tiene sentido, ajustá frecuencia o duración "
        "para retomar la consistencia.",
    ),
    (
        "consistency",
        frozenset({"info"}),
        "Buena consistencia en las últimas semanas. Mantené el ritmo y monitoreá las variaciones de carga.",
    ),
)


@dataclass(frozen=True)
class Recommendations:
    items: list[str] = field(default_factory=list)
    disclaimer: str = DISCLAIMER

    def as_payload(self) -> dict:
        return {"items": list(self.items), "disclaimer": self.disclaimer}


def generate_recommendations(insights: Iterable[dict]) -> Recommendations:
    signals = {(str(i.get("type")), str(i.get("severity"))) for i in insights}

    items: list[str] = []
    for type_, severities, text in RECOMMENDATION_RULES:
        if any((type_, severity) in signals for severity in severities) and text not in items:
            items.append(text)

    if not items:
        items = [STABLE_PATTERN_MESSAGE]
    return Recommendations(items=items[:MAX_RECOMMENDATIONS])
