"""
SurveyRegistry — Carga las definiciones de encuestas desde un YAML.

Formato del archivo (una entrada por survey_id):

    "2467":
      survey_name: "101A. Buy - Mobile - App - IT"
      percentage: "100"
      quarantine: "21"
      priority: 10
      display: invitation_app
      delay: "1500"

El registry no interpreta los campos: solo los entrega al SurveyEngine
via `as_configurations()`, que es quien los normaliza.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml


class SurveyRegistry:
    """
    Carga y expone las definiciones de encuestas desde registry.yaml.

    Singleton a nivel de módulo — usar get_survey_registry().
    """

    def __init__(self, registry_path: Optional[str] = None) -> None:
        if registry_path is None:
            from src.config import SURVEY_REGISTRY_PATH

            registry_path = SURVEY_REGISTRY_PATH
        self._path = Path(registry_path)
        self._surveys: dict[str, dict[str, Any]] = {}
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            raise FileNotFoundError(
                f"Survey registry no encontrado en: {self._path}\n"
                "Configurá SURVEY_REGISTRY_PATH o creá src/surveys/registry.yaml."
            )
        with open(self._path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if not data:
            raise ValueError("El registry de encuestas está vacío.")
        if not isinstance(data, dict):
            raise ValueError(
                "El registry de encuestas debe ser un mapping survey_id -> definición."
            )
        for survey_id, definition in data.items():
            self._surveys[str(survey_id)] = dict(definition or {})

    @property
    def path(self) -> Path:
        return self._path

    def get(self, survey_id: str) -> dict[str, Any]:
        """Retorna la definición cruda de `survey_id`."""
        sid = str(survey_id)
        if sid not in self._surveys:
            raise KeyError(
                f"Encuesta '{sid}' no encontrada en registry. "
                f"Disponibles: {list(self._surveys.keys())}"
            )
        return dict(self._surveys[sid])

    def as_configurations(self) -> dict[str, dict[str, Any]]:
        """Retorna {survey_id: definición} para SurveyEngine.set_survey_configurations."""
        return {sid: dict(definition) for sid, definition in self._surveys.items()}

    def list_surveys(self) -> list[dict]:
        """Retorna metadata de todas las encuestas para inspección."""
        return [
            {
                "survey_id": sid,
                "survey_name": definition.get("survey_name", ""),
                "priority": definition.get("priority"),
                "percentage": definition.get("percentage"),
            }
            for sid, definition in self._surveys.items()
        ]

    def __len__(self) -> int:
        return len(self._surveys)


# --------------------------------------------------------------------------
# Singleton a nivel de módulo
# --------------------------------------------------------------------------

_registry: Optional[SurveyRegistry] = None


def get_survey_registry() -> SurveyRegistry:
    """Retorna el singleton de SurveyRegistry, inicializándolo si es necesario."""
    global _registry
    if _registry is None:
        _registry = SurveyRegistry()
    return _registry
