from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from src.observers.base import EventObserver

_logger = logging.getLogger("survey.observer.fanout")


class FanOutObserver:
    """Reenvía cada evento a todos los observers. Un fallo no corta al resto."""

    def __init__(self, observers: Iterable[EventObserver]):
        self._observers = list(observers)

    @property
    def observers(self) -> list[EventObserver]:
        return list(self._observers)

    def __call__(self, event_type: str, payload: dict) -> None:
        for observer in self._observers:
            try:
                observer(event_type, payload)
            except Exception as e:
                _logger.warning(
                    "Observer %s failed: %s",
                    type(observer).__name__,
                    e,
                )
