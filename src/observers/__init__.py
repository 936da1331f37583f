from typing import Optional

from src.observers.base import EventObserver
from src.observers.fanout import FanOutObserver
from src.observers.jsonfile import JsonFileObserver
from src.observers.logging_observer import LoggingObserver

__all__ = [
    "EventObserver",
    "FanOutObserver",
    "JsonFileObserver",
    "LoggingObserver",
    "build_observer",
]


def build_observer(
    exporter_name: Optional[str] = None,
    log_dir: Optional[str] = None,
) -> Optional[EventObserver]:
    """Retorna el observer configurado.

    Args:
        exporter_name: "logging", "jsonfile", "both" o "none". Si es None,
                       usa SURVEY_EVENT_EXPORTER de config.py.
        log_dir: Directorio de los JSONL. Si es None, usa SURVEY_EVENT_LOG_DIR.

    Returns:
        Un observer listo para pasar como `on_event`, o None.
    """
    if exporter_name is None or log_dir is None:
        from src.config import SURVEY_EVENT_EXPORTER, SURVEY_EVENT_LOG_DIR

        exporter_name = exporter_name or SURVEY_EVENT_EXPORTER
        log_dir = log_dir or SURVEY_EVENT_LOG_DIR

    name = exporter_name.lower().strip()
    if name == "none":
        return None
    if name == "jsonfile":
        return JsonFileObserver(log_dir=log_dir)
    if name == "both":
        return FanOutObserver([LoggingObserver(), JsonFileObserver(log_dir=log_dir)])
    return LoggingObserver()
