from __future__ import annotations

from .base import QuarantineBackend


class MemoryQuarantineBackend(QuarantineBackend):
    """Backend en memoria. Vive lo que vive el proceso (tier de sesión)."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str, expiry_ms: int | None = None) -> None:
        # El vencimiento viaja dentro del registro; el store lo evalúa al leer.
        self._items[key] = value

    def delete(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        """Vacía el backend (equivale a terminar la sesión)."""
        self._items.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
