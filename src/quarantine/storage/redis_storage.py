"""
RedisQuarantineBackend — Tier durable de cuarentenas sobre Redis.

Características:
- Las claves se guardan tal cual (el prefijo ya viene aplicado por el engine)
- Si el registro tiene vencimiento se escribe con PXAT, así Redis
  también libera la clave por su cuenta
- Fallback graceful: si Redis no está disponible, las lecturas devuelven
  None y las escrituras se descartan con un warning
"""

from __future__ import annotations

import logging
from typing import Optional

import redis
from redis.exceptions import RedisError

from .base import QuarantineBackend

_logger = logging.getLogger("quarantine.redis")


class RedisQuarantineBackend(QuarantineBackend):

    def __init__(self, client: Optional[redis.Redis] = None) -> None:
        """
        Args:
            client: Cliente Redis ya construido. Si es None se usa el
                    singleton de src.cache (configurado via REDIS_*).
        """
        self._client = client

    def _get_client(self) -> Optional[redis.Redis]:
        if self._client is None:
            from src.cache.redis_client import get_redis_client

            self._client = get_redis_client().client
        return self._client

    def get(self, key: str) -> Optional[str]:
        client = self._get_client()
        if client is None:
            return None

        try:
            value = client.get(key)
        except RedisError as e:
            _logger.warning("Error en get(%s): %s", key, e)
            return None

        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str, expiry_ms: Optional[int] = None) -> None:
        client = self._get_client()
        if client is None:
            _logger.warning("Redis no disponible, se descarta set(%s)", key)
            return

        try:
            if expiry_ms:
                client.set(key, value, pxat=expiry_ms)
            else:
                client.set(key, value)
        except RedisError as e:
            _logger.warning("Error en set(%s): %s", key, e)

    def delete(self, key: str) -> None:
        client = self._get_client()
        if client is None:
            return

        try:
            client.delete(key)
        except RedisError as e:
            _logger.warning("Error en delete(%s): %s", key, e)
