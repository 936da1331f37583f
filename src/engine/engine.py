"""
SurveyEngine — Motor de selección de encuestas.

Principios de diseño:
  1. NUNCA propaga excepciones al caller desde choose_survey ni
     quarantine_survey. Los fallos degradan a "ninguna encuesta" o
     "no elegible" más un evento de diagnóstico.
  2. No decide qué encuestas aplican a cada página: los candidatos los
     arma un controller externo.
  3. Cada transición relevante emite un evento via `on_event`.

Flujo de choose_survey:
  candidatos → registry → cuarentena + sampling → mayor prioridad → evento
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from src.quarantine.store import QuarantineStore

from .events import EventEmitter
from .models import EngineConfig, SurveyDefinition, SurveyEventType
from .parsing import normalize_survey_ids, parse_int
from .sampler import SamplingPolicy

_logger = logging.getLogger("survey.engine")

# Menor que cualquier prioridad válida (se esperan prioridades >= 0)
_NO_PRIORITY = -1


class SurveyEngine:

    def __init__(
        self,
        config: Union[EngineConfig, Mapping[str, Any], None] = None,
        *,
        quarantine_store: Optional[QuarantineStore] = None,
        sampler: Optional[SamplingPolicy] = None,
    ) -> None:
        """
        Args:
            config:           EngineConfig o dict parcial de opciones.
            quarantine_store: Storage de cuarentenas (default: dos tiers en memoria).
            sampler:          Política de sampling (default: sorteo uniforme).
        """
        self._config = EngineConfig()
        self._emitter = EventEmitter()
        self._store = quarantine_store or QuarantineStore()
        self._sampler = sampler or SamplingPolicy()
        self._surveys: dict[str, SurveyDefinition] = {}

        if isinstance(config, EngineConfig):
            self._apply_config(config)
        else:
            self.set_config(config or {})

    # ------------------------------------------------------------------
    # Configuración
    # ------------------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def quarantine_store(self) -> QuarantineStore:
        return self._store

    @property
    def survey_configurations(self) -> Mapping[str, SurveyDefinition]:
        return dict(self._surveys)

    def set_config(self, partial: Any) -> SurveyEngine:
        """Aplica un merge superficial de opciones. Ignora input que no sea dict."""
        if isinstance(partial, Mapping):
            self._apply_config(self._config.merge(partial))
        return self

    def _apply_config(self, config: EngineConfig) -> None:
        self._config = config
        self._emitter = EventEmitter(on_event=config.on_event, logger=config.logger)

    def set_survey_configurations(self, configurations: Any) -> SurveyEngine:
        """
        Reemplaza el registry completo.

        Cada entrada se normaliza acá (prioridad, porcentaje y días de
        cuarentena a int) y queda inmutable. Entradas que no son dict ni
        SurveyDefinition, o que no validan, se descartan con un warning.
        """
        surveys: dict[str, SurveyDefinition] = {}
        if isinstance(configurations, Mapping):
            for key, value in configurations.items():
                sid = str(key).strip()
                if isinstance(value, SurveyDefinition):
                    surveys[sid] = value
                elif isinstance(value, Mapping):
                    try:
                        surveys[sid] = SurveyDefinition.from_mapping(sid, value)
                    except ValidationError as e:
                        _logger.warning("Configuración inválida para encuesta %s: %s", sid, e)
                else:
                    _logger.warning("Configuración inválida para encuesta %s, se ignora", sid)
        self._surveys = surveys
        return self

    # ------------------------------------------------------------------
    # API pública
    # ------------------------------------------------------------------

    def choose_survey(self, candidate_survey_ids: Any) -> Optional[SurveyDefinition]:
        """
        Elige la encuesta de mayor prioridad entre los candidatos que pasan
        cuarentena y sampling.

        Todos los candidatos resueltos se evalúan, aunque ya haya un ganador:
        el sampling puede dejar cuarentenas escritas para cada uno.

        Args:
            candidate_survey_ids: "1,2,3", una secuencia de ids o un id suelto.

        Returns:
            La SurveyDefinition elegida, o None.
        """
        ids = normalize_survey_ids(candidate_survey_ids)
        if not ids:
            return None

        max_priority = _NO_PRIORITY
        chosen: Optional[SurveyDefinition] = None

        for survey_id in ids:
            survey = self._surveys.get(survey_id)
            if survey is None:
                self._emitter.emit(SurveyEventType.MISSING_CONFIG, {"survey_id": survey_id})
                continue

            eligible = self._passes_storage_rules(survey)
            if eligible and survey.priority is not None and survey.priority > max_priority:
                chosen = survey
                max_priority = survey.priority

        if chosen is not None:
            self._emitter.emit(
                SurveyEventType.CHOSEN,
                {"survey_id": chosen.survey_id, "priority": chosen.priority},
            )
            return chosen

        self._emitter.emit(SurveyEventType.NONE_CHOSEN, {"candidates": ids})
        return None

    def quarantine_survey(self, survey_id: Any, days: Any = 0) -> None:
        """
        Pone una encuesta en cuarentena por `days` días, o por la sesión si
        `days` es 0/vacío. Útil para cuarentenar recién cuando la invitación
        se muestra, en vez de al pasar el sampling.
        """
        sid = str(survey_id).strip()
        key = self._quarantine_key(sid)
        parsed_days = parse_int(days) or 0

        if parsed_days > 0:
            self._store.write(key, parsed_days)
            self._emitter.emit(
                SurveyEventType.QUARANTINED,
                {"survey_id": sid, "days": parsed_days, "storage": "durable"},
            )
        else:
            self._store.write(key, 0)
            self._emitter.emit(
                SurveyEventType.QUARANTINED,
                {"survey_id": sid, "days": 0, "storage": "session"},
            )

    # ------------------------------------------------------------------
    # Lógica interna
    # ------------------------------------------------------------------

    def _quarantine_key(self, survey_id: str) -> str:
        return f"{self._config.quarantine_key_prefix}{survey_id}"

    def _quarantine_on_sample(self, survey: SurveyDefinition, key: str) -> bool:
        days = survey.quarantine_days
        if days is not None and days > 0:
            self._store.write(key, days)
            return True
        return False

    def _passes_storage_rules(self, survey: SurveyDefinition) -> bool:
        """Aplica cuarentena + sampling. Puede escribir cuarentena como efecto."""
        sid = survey.survey_id
        key = self._quarantine_key(sid)

        if self._store.is_quarantined(key):
            self._emitter.emit(SurveyEventType.QUARANTINED_BLOCK, {"survey_id": sid})
            self._emitter.log(f"SURVEY: survey {sid} is quarantined")
            return False

        percentage = survey.percentage

        if self._sampler.is_sampled_in(percentage):
            # La cuarentena se fija al pasar el sampling, no al mostrar la invitación
            if self._quarantine_on_sample(survey, key):
                self._emitter.emit(
                    SurveyEventType.QUARANTINE_SET_ON_SAMPLE,
                    {"survey_id": sid, "days": survey.quarantine_days},
                )
            self._emitter.emit(
                SurveyEventType.INCLUDED_BY_SAMPLING,
                {"survey_id": sid, "percentage": percentage},
            )
            return True

        if self._config.user_sampling:
            self._quarantine_on_sample(survey, key)
            self._emitter.emit(
                SurveyEventType.EXCLUDED_QUARANTINED_USER_SAMPLING,
                {"survey_id": sid, "percentage": percentage},
            )
            self._emitter.log(
                f"SURVEY: survey {sid} is excluded by sampling, and quarantined (user sampling)"
            )
            return False

        self._emitter.emit(
            SurveyEventType.EXCLUDED_NOT_QUARANTINED_EVENT_SAMPLING,
            {"survey_id": sid, "percentage": percentage},
        )
        self._emitter.log(
            f"SURVEY: survey {sid} is excluded by sampling, and not quarantined (event sampling)"
        )
        return False


# --------------------------------------------------------------------------
# Factory a nivel de módulo
# --------------------------------------------------------------------------


def _build_durable_backend():
    """
    Factory del tier durable que lee la configuración en runtime.
    Soporta QUARANTINE_BACKEND=sqlite (default), redis o memory.
    Con memory las cuarentenas se pierden al terminar el proceso.
    """
    from src.config import QUARANTINE_BACKEND, QUARANTINE_DB_PATH

    backend = (QUARANTINE_BACKEND or "sqlite").lower().strip()

    if backend == "redis":
        from src.quarantine.storage.redis_storage import RedisQuarantineBackend
        return RedisQuarantineBackend()

    if backend == "sqlite":
        from src.quarantine.storage.sqlite_storage import SQLiteQuarantineBackend
        return SQLiteQuarantineBackend(db_path=QUARANTINE_DB_PATH)

    from src.quarantine.storage.memory_storage import MemoryQuarantineBackend
    return MemoryQuarantineBackend()


def create_engine(**overrides: Any) -> SurveyEngine:
    """
    Construye un SurveyEngine con la configuración del entorno (.env).

    Los kwargs pisan las opciones de EngineConfig (user_sampling,
    quarantine_key_prefix, on_event, logger).
    """
    store = QuarantineStore(durable=_build_durable_backend())
    return SurveyEngine(EngineConfig.from_env(**overrides), quarantine_store=store)
