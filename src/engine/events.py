from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .models import SurveyEventType

_logger = logging.getLogger("survey.engine")
_events_logger = logging.getLogger("survey.events")


class EventEmitter:
    """Despacha eventos y mensajes de diagnóstico a los callbacks del caller.

    Los callbacks se invocan de forma síncrona. Si fallan, el error se
    registra y se descarta: la selección nunca depende del observador.
    """

    def __init__(
        self,
        on_event: Optional[Callable[[str, dict], Any]] = None,
        logger: Optional[Callable[[str], Any]] = None,
    ):
        self._on_event = on_event
        self._logger = logger

    def emit(self, event_type: SurveyEventType, payload: Optional[dict] = None) -> None:
        if self._on_event is None:
            return
        try:
            self._on_event(event_type.value, payload or {})
        except Exception as e:
            _events_logger.warning(
                "on_event callback failed for %s: %s", event_type.value, e
            )

    def log(self, message: str) -> None:
        _logger.debug(message)
        if self._logger is None:
            return
        try:
            self._logger(message)
        except Exception as e:
            _events_logger.warning("logger callback failed: %s", e)
