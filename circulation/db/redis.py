"""
Cliente Redis do cache do relógio simulado.

O Redis é opcional: sem cliente (testes, Redis fora do ar) o
``CacheService`` trata toda leitura como miss.
"""

from typing import Optional

import redis.asyncio as redis

from circulation.core.config import get_settings
from circulation.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

redis_client: Optional[redis.Redis] = None


async def init_redis() -> redis.Redis:
    """Cria o cliente global (a conexão é aberta sob demanda)."""
    global redis_client
    redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return redis_client


async def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
    redis_client = None


def get_redis_client() -> Optional[redis.Redis]:
    return redis_client


async def check_redis_connection() -> bool:
    """PING no Redis; False se não há cliente ou o servidor não responde."""
    if redis_client is None:
        return False
    try:
        return bool(await redis_client.ping())
    except Exception as e:
        logger.warning(f"Redis não respondeu ao PING: {e}")
        return False
