"""
src.engine — Motor de selección de encuestas.

Exports principales:
    SurveyEngine          → choose_survey() / quarantine_survey()
    create_engine()       → engine configurado desde .env
    EngineConfig          → opciones (user_sampling, prefijo, callbacks)
    SurveyDefinition      → definición normalizada de una encuesta
    SurveyEventType       → nombres de eventos emitidos
    SamplingPolicy        → sorteo de inclusión por porcentaje
    SurveyRegistry        → loader YAML, usar via get_survey_registry()
"""

from .engine import SurveyEngine, create_engine
from .events import EventEmitter
from .models import EngineConfig, SurveyDefinition, SurveyEventType
from .registry import SurveyRegistry, get_survey_registry
from .sampler import SamplingPolicy

__all__ = [
    "SurveyEngine",
    "create_engine",
    "EventEmitter",
    "EngineConfig",
    "SurveyDefinition",
    "SurveyEventType",
    "SurveyRegistry",
    "get_survey_registry",
    "SamplingPolicy",
]
