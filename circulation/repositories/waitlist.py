"""
Repository para operações de WaitlistEntry no banco de dados.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.enums import WaitlistStatus, OPEN_WAITLIST_STATUSES
from circulation.models.waitlist import WaitlistEntry
from circulation.repositories.base import BaseRepository

# Ordem única da fila: prioridade primeiro, depois ordem de chegada
RANK_ORDER = (WaitlistEntry.is_priority.desc(), WaitlistEntry.position.asc())


class WaitlistRepository(BaseRepository[WaitlistEntry]):
    """Repository para operações CRUD de WaitlistEntry."""

    def __init__(self, db: AsyncSession):
        super().__init__(WaitlistEntry, db)

    async def get_open_entry(
        self, user_id: UUID, book_id: UUID
    ) -> WaitlistEntry | None:
        """Entrada WAITING ou NOTIFIED do leitor para o livro."""
        result = await self.db.execute(
            select(WaitlistEntry)
            .where(
                WaitlistEntry.user_id == user_id,
                WaitlistEntry.book_id == book_id,
                WaitlistEntry.status.in_(OPEN_WAITLIST_STATUSES),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_ranked(
        self, book_id: UUID, *statuses: WaitlistStatus
    ) -> list[WaitlistEntry]:
        """
        Entradas do livro nos status informados, na ordem da fila.

        Sem status, considera apenas WAITING.
        """
        statuses = statuses or (WaitlistStatus.WAITING,)
        result = await self.db.execute(
            select(WaitlistEntry)
            .where(
                WaitlistEntry.book_id == book_id,
                WaitlistEntry.status.in_(statuses),
            )
            .order_by(*RANK_ORDER)
        )
        return list(result.scalars().all())

    async def get_max_position(self, book_id: UUID) -> int:
        """Maior position já usada no livro (0 se a fila nunca existiu)."""
        result = await self.db.execute(
            select(func.max(WaitlistEntry.position))
            .where(WaitlistEntry.book_id == book_id)
        )
        return result.scalar_one() or 0

    async def count_open(self, book_id: UUID) -> int:
        """Conta entradas WAITING ou NOTIFIED do livro."""
        result = await self.db.execute(
            select(func.count())
            .select_from(WaitlistEntry)
            .where(
                WaitlistEntry.book_id == book_id,
                WaitlistEntry.status.in_(OPEN_WAITLIST_STATUSES),
            )
        )
        return result.scalar_one()

    async def get_expired_offer_ids(self, now: datetime) -> list[UUID]:
        """IDs de entradas NOTIFIED cujo prazo de retirada já passou."""
        result = await self.db.execute(
            select(WaitlistEntry.id)
            .where(
                WaitlistEntry.status == WaitlistStatus.NOTIFIED,
                WaitlistEntry.expires_at.is_not(None),
                WaitlistEntry.expires_at < now,
            )
            .order_by(WaitlistEntry.expires_at)
        )
        return list(result.scalars().all())

    async def get_by_user(
        self, user_id: UUID, open_only: bool = True
    ) -> list[WaitlistEntry]:
        """Entradas do leitor, mais recentes primeiro."""
        stmt = select(WaitlistEntry).where(WaitlistEntry.user_id == user_id)
        if open_only:
            stmt = stmt.where(WaitlistEntry.status.in_(OPEN_WAITLIST_STATUSES))
        result = await self.db.execute(
            stmt.order_by(WaitlistEntry.created_at.desc())
        )
        return list(result.scalars().all())
