from .base import QuarantineBackend
from .memory_storage import MemoryQuarantineBackend
from .redis_storage import RedisQuarantineBackend
from .sqlite_storage import SQLiteQuarantineBackend

__all__ = [
    "QuarantineBackend",
    "MemoryQuarantineBackend",
    "RedisQuarantineBackend",
    "SQLiteQuarantineBackend",
]
