"""
Engine Models — Modelos Pydantic del motor de selección de encuestas.

SurveyDefinition se normaliza una única vez al instalar el registry:
priority, percentage y quarantine_days quedan como enteros (o None si
no se pudieron interpretar) y la instancia es inmutable a partir de ahí.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .parsing import parse_int

_logger = logging.getLogger("survey.engine")


class SurveyEventType(str, Enum):
    """Eventos que emite el motor via el callback `on_event`."""
    MISSING_CONFIG = "survey_missing_config"
    CHOSEN = "survey_chosen"
    NONE_CHOSEN = "survey_none_chosen"
    QUARANTINED = "survey_quarantined"
    QUARANTINED_BLOCK = "survey_quarantined_block"
    QUARANTINE_SET_ON_SAMPLE = "survey_quarantine_set_on_sample"
    INCLUDED_BY_SAMPLING = "survey_included_by_sampling"
    EXCLUDED_QUARANTINED_USER_SAMPLING = "survey_excluded_quarantined_user_sampling"
    EXCLUDED_NOT_QUARANTINED_EVENT_SAMPLING = (
        "survey_excluded_not_quarantined_event_sampling"
    )


class SurveyDefinition(BaseModel):
    """
    Definición de una encuesta dentro del registry.

    El motor solo interpreta survey_id, priority, percentage y
    quarantine_days. El resto de los campos (survey_name, display, delay, ...)
    se conserva tal cual en `passthrough` para el renderer externo.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    survey_id: str
    # None = prioridad inválida, nunca compite
    priority: Optional[int] = None
    percentage: int = 0
    quarantine_days: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("quarantine_days", "quarantineDays", "quarantine"),
    )

    @field_validator("survey_id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> str:
        return str(value).strip()

    @field_validator("priority", "quarantine_days", mode="before")
    @classmethod
    def _lenient_int(cls, value: Any) -> Optional[int]:
        return parse_int(value)

    @field_validator("percentage", mode="before")
    @classmethod
    def _percentage(cls, value: Any) -> int:
        parsed = parse_int(value)
        return 0 if parsed is None else parsed

    @classmethod
    def from_mapping(cls, survey_id: str, data: Mapping[str, Any]) -> SurveyDefinition:
        """Construye la definición usando la key del registry si falta survey_id.

        Las keys se pasan a string: un YAML con `1: x` no debe romper la carga.
        """
        fields = {str(key): value for key, value in data.items()}
        if fields.get("survey_id") in (None, ""):
            fields["survey_id"] = survey_id
        return cls.model_validate(fields)

    @property
    def passthrough(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


_CONFIG_ALIASES = {
    "userSampling": "user_sampling",
    "quarantineKeyPrefix": "quarantine_key_prefix",
    "onEvent": "on_event",
}

_CALLBACK_FIELDS = ("on_event", "logger")


class EngineConfig(BaseModel):
    """Opciones estáticas del motor."""

    model_config = ConfigDict(frozen=True)

    # Si es True, una encuesta excluida por sampling también queda en cuarentena
    user_sampling: bool = False
    # Prefijo de las claves de cuarentena
    quarantine_key_prefix: str = "neb_"
    # (event_type, payload) -> None
    on_event: Optional[Callable[[str, dict], Any]] = None
    # (message) -> None
    logger: Optional[Callable[[str], Any]] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> EngineConfig:
        from src.config import QUARANTINE_KEY_PREFIX, SURVEY_USER_SAMPLING

        base = cls(
            user_sampling=SURVEY_USER_SAMPLING,
            quarantine_key_prefix=QUARANTINE_KEY_PREFIX,
        )
        return base.merge(overrides)

    def merge(self, partial: Mapping[str, Any]) -> EngineConfig:
        """Retorna una copia con las keys conocidas de `partial` aplicadas.

        Acepta tanto snake_case como los nombres camelCase históricos.
        Un callback que no es invocable se descarta con un warning y se
        conserva el valor anterior.
        """
        updates = {}
        for key, value in partial.items():
            name = _CONFIG_ALIASES.get(key, key)
            if name not in type(self).model_fields:
                continue
            if name in _CALLBACK_FIELDS and value is not None and not callable(value):
                _logger.warning("%s no es invocable (%r), se ignora", key, value)
                continue
            updates[name] = value
        return type(self).model_validate({**dict(self), **updates})
