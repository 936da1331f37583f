from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EventObserver(Protocol):
    """Interfaz para recibir los eventos del SurveyEngine (callback on_event)."""

    def __call__(self, event_type: str, payload: dict) -> None: ...
