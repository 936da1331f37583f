"""
QuarantineBackend — Interfaz abstracta para el almacenamiento clave-valor
de cuarentenas.

Strategy Pattern: el QuarantineStore habla con esta interfaz,
no con ninguna implementación concreta. Hay dos tiers (durable y de
sesión) y cada uno se resuelve con un backend distinto.
"""

from abc import ABC, abstractmethod
from typing import Optional


class QuarantineBackend(ABC):

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Retorna el registro serializado de `key`, o None si no existe."""
        ...

    @abstractmethod
    def set(self, key: str, value: str, expiry_ms: Optional[int] = None) -> None:
        """Guarda el registro serializado. `expiry_ms` es epoch en milisegundos."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Elimina el registro de `key` (no falla si no existe)."""
        ...
