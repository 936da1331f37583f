"""
QuarantineStore — Estado de cuarentena en dos tiers con vencimiento lazy.

  durable  → registros con `expiry`, sobreviven entre sesiones
  session  → registros sin `expiry`, se pierden al terminar la sesión

La lectura consulta primero el tier durable y después el de sesión.
Un registro vencido se borra del tier durable al leerlo; no hay barrido
en segundo plano. Un registro corrupto o un error del backend se tratan
como ausencia de cuarentena.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError

from .models import QuarantineRecord
from .storage.base import QuarantineBackend
from .storage.memory_storage import MemoryQuarantineBackend

_logger = logging.getLogger("quarantine.store")


def _now_ms() -> int:
    return int(time.time() * 1000)


class QuarantineStore:

    def __init__(
        self,
        durable: Optional[QuarantineBackend] = None,
        session: Optional[QuarantineBackend] = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """
        Args:
            durable: Backend para cuarentenas con vencimiento (default: memoria).
            session: Backend para cuarentenas de sesión (default: memoria).
            clock:   Función que devuelve el epoch actual en milisegundos.
        """
        self._durable = durable or MemoryQuarantineBackend()
        self._session = session or MemoryQuarantineBackend()
        self._clock = clock

    @property
    def durable(self) -> QuarantineBackend:
        return self._durable

    @property
    def session(self) -> QuarantineBackend:
        return self._session

    def write(self, key: str, days: int = 0) -> QuarantineRecord:
        """Guarda la cuarentena: durable si `days > 0`, de sesión si no."""
        record = QuarantineRecord.for_days(days, self._clock())
        backend = self._durable if record.is_durable else self._session
        try:
            backend.set(key, record.to_json(), record.expiry)
        except Exception as e:
            _logger.warning("Error guardando cuarentena %s: %s", key, e)
        return record

    def read(self, key: str) -> Optional[str]:
        """Retorna el valor guardado si hay cuarentena vigente, o None."""
        try:
            raw = self._durable.get(key) or self._session.get(key)
        except Exception as e:
            _logger.warning("Error leyendo cuarentena %s: %s", key, e)
            return None

        if not raw:
            return None

        try:
            record = QuarantineRecord.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Registro de cuarentena corrupto en %s, se ignora", key)
            return None

        if record.is_expired(self._clock()):
            try:
                self._durable.delete(key)
            except Exception as e:
                _logger.warning("Error borrando cuarentena vencida %s: %s", key, e)
            return None

        return record.value

    def is_quarantined(self, key: str) -> bool:
        return bool(self.read(key))
