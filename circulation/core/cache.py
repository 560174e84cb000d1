"""
Cache Redis da data simulada.

Toda decisão de circulação pergunta "agora" ao relógio, e o relógio lê a
configuração ``simulated_date`` do banco. O valor fica alguns segundos no
Redis para poupar essa leitura a cada request.

O cache é fail-open: desabilitado (CACHE_ENABLED=false), sem cliente ou com
erro no Redis, toda leitura é um miss e o relógio vai ao banco. Quem altera
o relógio chama ``invalidate_simulated_date``.
"""

import json
from typing import Optional

import redis.asyncio as redis

from circulation.core.config import get_settings
from circulation.core.logging import get_logger
from circulation.db.redis import get_redis_client

logger = get_logger(__name__)
settings = get_settings()


class CacheService:
    """
    Leitura e escrita da data simulada no Redis.

    O valor é gravado como ``{"value": <ISO 8601 ou null>}`` para distinguir
    "relógio real em cache" (hit com None) de "nada em cache" (miss).
    """

    KEY_SIMULATED_DATE = "cache:clock:simulated_date"

    def __init__(self, ttl: Optional[int] = None):
        self.ttl = ttl or settings.CACHE_CLOCK_TTL_SECONDS

    def _client(self) -> Optional[redis.Redis]:
        if not settings.CACHE_ENABLED:
            return None
        return get_redis_client()

    async def get_simulated_date(self) -> tuple[bool, Optional[str]]:
        """
        Returns:
            Tupla (hit, valor ISO 8601 ou None)
        """
        client = self._client()
        if client is None:
            return False, None

        try:
            raw = await client.get(self.KEY_SIMULATED_DATE)
        except Exception as e:
            logger.warning(f"Cache do relógio indisponível (get): {e}")
            return False, None

        if raw is None:
            return False, None
        return True, json.loads(raw)["value"]

    async def set_simulated_date(self, value: Optional[str]) -> bool:
        """Grava o valor com TTL; False se não gravou."""
        client = self._client()
        if client is None:
            return False

        try:
            await client.setex(self.KEY_SIMULATED_DATE, self.ttl, json.dumps({"value": value}))
        except Exception as e:
            logger.warning(f"Cache do relógio indisponível (set): {e}")
            return False
        return True

    async def invalidate_simulated_date(self) -> bool:
        client = self._client()
        if client is None:
            return False

        try:
            await client.delete(self.KEY_SIMULATED_DATE)
        except Exception as e:
            logger.warning(f"Cache do relógio indisponível (delete): {e}")
            return False
        return True


cache_service = CacheService()
