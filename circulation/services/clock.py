"""
Relógio da aplicação.

Toda decisão de circulação pergunta "agora" a um ``Clock`` recebido por
injeção. Em produção é o ``SettingsClock``, que devolve a data simulada
configurada pelo administrador ou, na ausência dela, o relógio real.
Nos testes e no replay de auto-returns usa-se o ``FixedClock``.
"""

from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.cache import cache_service
from circulation.core.dates import parse_instant, to_naive_utc, utcnow
from circulation.core.logging import get_logger
from circulation.models.system_setting import SIMULATED_DATE_KEY
from circulation.repositories.system_setting import SystemSettingRepository

logger = get_logger(__name__)


class Clock:
    """Fonte única do instante corrente."""

    async def now(self) -> datetime:
        raise NotImplementedError

    async def is_simulating(self) -> bool:
        return False


class FixedClock(Clock):
    """Relógio parado em um instante fixo."""

    def __init__(self, instant: datetime):
        self.instant = to_naive_utc(instant)

    async def now(self) -> datetime:
        return self.instant

    def advance(self, **kwargs) -> None:
        """Avança o relógio (kwargs de ``timedelta``)."""
        self.instant = self.instant + timedelta(**kwargs)

    def __repr__(self) -> str:
        return f"<FixedClock {self.instant.isoformat()}>"


class SettingsClock(Clock):
    """
    Relógio que respeita a configuração ``simulated_date``.

    O valor é lido uma vez por instância (uma instância por request),
    passando pelo cache Redis quando disponível.
    """

    def __init__(self, db: AsyncSession, use_cache: bool = True):
        self.db = db
        self.use_cache = use_cache
        self.setting_repo = SystemSettingRepository(db)
        self._loaded = False
        self._simulated: datetime | None = None

    async def get_simulated(self) -> datetime | None:
        """Data simulada configurada, ou None se o relógio é o real."""
        if self._loaded:
            return self._simulated

        raw: str | None = None
        hit = False
        if self.use_cache:
            hit, raw = await cache_service.get_simulated_date()
        if not hit:
            raw = await self.setting_repo.get_value(SIMULATED_DATE_KEY)
            if self.use_cache:
                await cache_service.set_simulated_date(raw)

        self._simulated = parse_instant(raw) if raw else None
        self._loaded = True
        return self._simulated

    async def now(self) -> datetime:
        simulated = await self.get_simulated()
        return simulated if simulated is not None else utcnow()

    async def is_simulating(self) -> bool:
        return await self.get_simulated() is not None

    async def set(self, instant: datetime | None, actor_id: UUID | None = None) -> None:
        """
        Grava (ou limpa, com None) a data simulada.

        Falhas de escrita propagam; não há fallback para o relógio real.
        O commit é responsabilidade de quem chama.
        """
        value = to_naive_utc(instant).isoformat() if instant is not None else None
        await self.setting_repo.set_value(SIMULATED_DATE_KEY, value, updated_by=actor_id)
        await cache_service.invalidate_simulated_date()

        self._simulated = parse_instant(value) if value else None
        self._loaded = True
        logger.info(f"Data simulada alterada para {value or 'relógio real'} por {actor_id}")
