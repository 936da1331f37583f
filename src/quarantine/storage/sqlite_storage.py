"""
SQLiteQuarantineBackend — Tier durable de cuarentenas sobre un archivo SQLite.

Características:
- Sobrevive entre procesos: es el backend durable por defecto
- WAL mode para que varios procesos lean mientras otro escribe
- Una fila por clave; `expiry_ms` se guarda también como columna para
  inspección, pero el vencimiento lo evalúa el QuarantineStore al leer
- Fallback graceful: errores de SQLite se loguean y degradan a
  "sin registro" / "no escrito"

Schema:
  quarantine → (key, value, expiry_ms)
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from .base import QuarantineBackend

_logger = logging.getLogger("quarantine.sqlite")

_DDL = """
CREATE TABLE IF NOT EXISTS quarantine (
    key        TEXT    PRIMARY KEY,
    value      TEXT    NOT NULL,
    expiry_ms  INTEGER
);
"""

_UPSERT = """
INSERT INTO quarantine (key, value, expiry_ms) VALUES (?, ?, ?)
ON CONFLICT(key) DO UPDATE SET
    value     = excluded.value,
    expiry_ms = excluded.expiry_ms
"""


class SQLiteQuarantineBackend(QuarantineBackend):

    def __init__(self, db_path: str = "data/quarantine.db") -> None:
        self._db_path = db_path
        self._db: Optional[sqlite3.Connection] = None

    def _connect(self) -> sqlite3.Connection:
        if self._db is None:
            if self._db_path != ":memory:":
                Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
            self._db = sqlite3.connect(self._db_path)
            self._db.execute("PRAGMA journal_mode = WAL;")
            self._db.executescript(_DDL)
            self._db.commit()
        return self._db

    @property
    def db_path(self) -> str:
        return self._db_path

    def get(self, key: str) -> Optional[str]:
        try:
            row = self._connect().execute(
                "SELECT value FROM quarantine WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            _logger.warning("Error en get(%s): %s", key, e)
            return None
        return row[0] if row else None

    def set(self, key: str, value: str, expiry_ms: Optional[int] = None) -> None:
        try:
            db = self._connect()
            db.execute(_UPSERT, (key, value, expiry_ms))
            db.commit()
        except sqlite3.Error as e:
            _logger.warning("Error en set(%s): %s", key, e)

    def delete(self, key: str) -> None:
        try:
            db = self._connect()
            db.execute("DELETE FROM quarantine WHERE key = ?", (key,))
            db.commit()
        except sqlite3.Error as e:
            _logger.warning("Error en delete(%s): %s", key, e)

    def close(self) -> None:
        """Cierra la conexión."""
        if self._db is not None:
            self._db.close()
            self._db = None
