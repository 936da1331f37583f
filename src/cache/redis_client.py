"""
Redis Client - Conexión singleton a Redis.

Este módulo proporciona una conexión singleton síncrona a Redis con manejo
de errores. El motor de selección corre de forma síncrona,
así que el cliente también lo es.
"""

import logging
from typing import Optional

import redis
from redis.exceptions import ConnectionError, TimeoutError

_logger = logging.getLogger("cache.redis")


class RedisClient:
    """
    Cliente singleton para conexión a Redis.

    Attributes:
        _instance: Instancia singleton del cliente
        _client: Cliente Redis subyacente
        _initialized: Flag para controlar inicialización
    """

    _instance: Optional["RedisClient"] = None
    _client: Optional[redis.Redis] = None
    _initialized: bool = False

    def __new__(cls) -> "RedisClient":
        """Implementa el patrón singleton."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def initialize(self) -> None:
        """Inicializa la conexión a Redis si no existe."""
        if not self._initialized:
            self._connect()
            self._initialized = True

    def _connect(self) -> None:
        """Establece la conexión a Redis usando la configuración del entorno."""
        from src.config import REDIS_DB, REDIS_HOST, REDIS_PASSWORD, REDIS_PORT

        try:
            self._client = redis.Redis(
                host=REDIS_HOST,
                port=REDIS_PORT,
                password=REDIS_PASSWORD,
                db=REDIS_DB,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            # Verificar conexión
            self._client.ping()
            _logger.info("Conectado a %s:%s DB:%s", REDIS_HOST, REDIS_PORT, REDIS_DB)
        except (ConnectionError, TimeoutError) as e:
            _logger.warning("Error de conexión: %s", e)
            self._client = None

    @property
    def client(self) -> Optional[redis.Redis]:
        """Retorna el cliente Redis."""
        return self._client

    def is_connected(self) -> bool:
        """Verifica si hay conexión activa a Redis."""
        if self._client is None:
            return False
        try:
            self._client.ping()
            return True
        except (ConnectionError, TimeoutError):
            return False

    def close(self) -> None:
        """Cierra la conexión a Redis."""
        if self._client:
            self._client.close()
            self._client = None
            self._initialized = False


# Instancia global singleton
_redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """
    Obtiene la instancia singleton del cliente Redis.

    Returns:
        Instancia de RedisClient inicializada
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    if not _redis_client._initialized:
        _redis_client.initialize()
    return _redis_client
