"""
Módulo de conexión a Redis.

Proporciona el cliente singleton que usa el backend durable
de cuarentenas.
"""

from .redis_client import RedisClient, get_redis_client

__all__ = [
    "get_redis_client",
    "RedisClient",
]
