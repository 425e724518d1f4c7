"""
Exercise name → catalog video matching.

Routine generators emit technical Spanish names ("Press inclinado 30 grados
con mancuernas") that rarely equal catalog names. Lookup order:
1. manual mappings (substring of the normalized input)
2. normalized equality or containment either way
3. critical keyword shared with a catalog name
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Any, Dict, Iterable, List, Optional

from google.cloud import firestore

from fitai.config import EXERCISES_COLLECTION
from fitai.firestore_client import get_db

logger = logging.getLogger(__name__)

MANUAL_MAPPINGS = {
    "fondos en paralelas": "chest-dips",
    "jalones pronos": "back-lat-pulldown",
    "prensa 45": "legs-leg-press",
    "vuelos laterales": "shoulders-lateral-raise",
    "frontales sentado": "shoulders-front-raise",
    "extension de triceps": "triceps-pushdown",
    "martillo": "biceps-hammer-curl",
    "frances tumbado": "triceps-skull-crusher",
    "patada de triceps": "triceps-kickback",
    "sillon de cuadriceps": "legs-leg-extension",
    "camilla de femorales": "legs-leg-curl",
    "hip thrust": "legs-hip-thrust",
    "v-ups": "core-v-ups",
    "rueda abdominal": "core-ab-wheel",
    "encogimiento en polea": "core-cable-crunch",
    "giros rusos": "core-russian-twist",
    "elevacion de piernas": "core-leg-raises",
    "plancha": "core-plank",
    "crunch": "core-crunches",
}

CRITICAL_KEYWORDS = ["press", "remo", "curl", "extension", "sentadilla", "peso muerto", "aperturas"]

_DEGREES_RE = re.compile(r"[0-9]+ grados")
_LATERALITY_RE = re.compile(r"unilateral|bilateral")
_EQUIPMENT_RE = re.compile(r"con mancuernas|con barra|en polea|en smith|en maquina")
_SYMBOLS_RE = re.compile(r"[^a-z0-9 ]")


def normalize_text(text: Optional[str]) -> str:
    """Lowercase, strip accents, drop angles/laterality/equipment and symbols."""
    if not text:
        return ""
    clean = unicodedata.normalize("NFD", text.lower())
    clean = "".join(c for c in clean if not unicodedata.combining(c))
    clean = _DEGREES_RE.sub("", clean)
    clean = _LATERALITY_RE.sub("", clean)
    clean = _EQUIPMENT_RE.sub("", clean)
    clean = _SYMBOLS_RE.sub("", clean)
    return clean.strip()


class ExerciseVideoMatcher:
    """Match free-form exercise names against a catalog of {id, name, videoUrl}."""

    def __init__(self, catalog: Iterable[Dict[str, Any]]):
        self.catalog: List[Dict[str, Any]] = [e for e in catalog if e.get("videoUrl")]
        self._by_id = {e.get("id"): e for e in self.catalog}
        self._normalized = [(normalize_text(e.get("name")), e) for e in self.catalog]
        self._manual = [(normalize_text(k), v) for k, v in MANUAL_MAPPINGS.items()]

    def find(self, exercise_name: Optional[str]) -> Optional[Dict[str, Any]]:
        normalized = normalize_text(exercise_name)
        if not normalized:
            return None

        for key, exercise_id in self._manual:
            if key in normalized and exercise_id in self._by_id:
                return self._by_id[exercise_id]

        for name, exercise in self._normalized:
            if not name:
                continue
            if name == normalized or name in normalized or normalized in name:
                return exercise

        for keyword in CRITICAL_KEYWORDS:
            if keyword in normalized:
                for name, exercise in self._normalized:
                    if keyword in name:
                        return exercise
        return None

    def get_video(self, exercise_name: Optional[str]) -> Optional[str]:
        match = self.find(exercise_name)
        return match["videoUrl"] if match else None


def load_catalog(db: Optional[firestore.Client] = None) -> List[Dict[str, Any]]:
    """Read the exercises collection as {id, name, videoUrl} dicts."""
    db = db or get_db()
    catalog = []
    for doc in db.collection(EXERCISES_COLLECTION).stream():
        data = doc.to_dict() or {}
        catalog.append({"id": doc.id, "name": data.get("name", ""), "videoUrl": data.get("videoUrl")})
    logger.info("Loaded %d catalog exercises", len(catalog))
    return catalog


__all__ = [
    "normalize_text",
    "ExerciseVideoMatcher",
    "load_catalog",
    "MANUAL_MAPPINGS",
    "CRITICAL_KEYWORDS",
]
