from __future__ import annotations

import logging


class LoggingObserver:
    """Observer para desarrollo: una línea de log por evento."""

    def __init__(self, logger_name: str = "survey.events", level: int = logging.INFO):
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def __call__(self, event_type: str, payload: dict) -> None:
        parts = [f"{key}={value}" for key, value in payload.items()]
        self._logger.log(self._level, "[SURVEY] %s %s", event_type, " ".join(parts))
