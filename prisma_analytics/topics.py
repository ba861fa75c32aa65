"""
Topic catalogue: identifiers, display labels and chart assets.

Every topic is an educational-behaviour category. Each one has a
pre-rendered chart under assets/; an unknown topic falls back to
DEFAULT_IMAGE and a freshly reset page shows PLACEHOLDER_IMAGE.

Public API:
    TOPICS, TOPIC_LABELS, IMAGE_MAP
    image_for(topic)      → str
    resolve_asset(path)   → Path
"""

from pathlib import Path

ROOT_DIR = Path(__file__).parent.parent

TOPIC_LABELS: dict[str, str] = {
    "rotina":       "Rotina de estudos",
    "conexoes":     "Conexões e relacionamentos",
    "foco":         "Foco e atenção",
    "habitos":      "Hábitos",
    "motivacao":    "Motivação",
    "tecnologia":   "Uso de tecnologia",
    "bemestar":     "Bem-estar",
    "grupo":        "Trabalho em grupo",
    "metas":        "Metas e objetivos",
    "criatividade": "Criatividade",
}

TOPICS: tuple[str, ...] = tuple(TOPIC_LABELS)

IMAGE_MAP: dict[str, str] = {t: f"./assets/grafico_{t}.png" for t in TOPICS}

DEFAULT_IMAGE     = "./assets/FOA-JPG.jpg"
PLACEHOLDER_IMAGE = "./assets/placeholder.png"


def image_for(topic: str) -> str:
    return IMAGE_MAP.get(topic, DEFAULT_IMAGE)


def resolve_asset(path: str) -> Path:
    """Map a './assets/...' path onto the project checkout."""
    return ROOT_DIR / path.removeprefix("./")
