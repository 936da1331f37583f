"""
src.quarantine — Persistencia de cuarentenas de encuestas.

Exports principales:
    QuarantineStore           → lectura/escritura en dos tiers con vencimiento lazy
    QuarantineRecord          → registro serializado {value, expiry?}
    QuarantineBackend         → interfaz de storage clave-valor
    MemoryQuarantineBackend   → backend en memoria (sesión / tests)
    RedisQuarantineBackend    → backend durable sobre Redis
    SQLiteQuarantineBackend   → backend durable sobre SQLite (default)
"""

from .models import MS_PER_DAY, QuarantineRecord
from .storage import (
    MemoryQuarantineBackend,
    QuarantineBackend,
    RedisQuarantineBackend,
    SQLiteQuarantineBackend,
)
from .store import QuarantineStore

__all__ = [
    "MS_PER_DAY",
    "QuarantineRecord",
    "QuarantineBackend",
    "MemoryQuarantineBackend",
    "RedisQuarantineBackend",
    "SQLiteQuarantineBackend",
    "QuarantineStore",
]
