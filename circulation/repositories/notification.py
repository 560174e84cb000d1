"""
Repository para operações de Notification no banco de dados.
"""

from datetime import datetime
from typing import Iterable
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.enums import NotificationType
from circulation.models.notification import Notification
from circulation.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository para operações CRUD de Notification."""

    def __init__(self, db: AsyncSession):
        super().__init__(Notification, db)

    async def exists_for(
        self,
        user_id: UUID,
        book_id: UUID | None,
        notification_type: NotificationType,
    ) -> bool:
        """Verifica se já existe notificação (leitor, livro, tipo)."""
        stmt = select(Notification.id).where(
            Notification.user_id == user_id,
            Notification.type == notification_type,
        )
        if book_id is None:
            stmt = stmt.where(Notification.book_id.is_(None))
        else:
            stmt = stmt.where(Notification.book_id == book_id)

        result = await self.db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def list_by_user(
        self,
        user_id: UUID,
        unread_only: bool = False,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Notification], int]:
        """
        Notificações do leitor, mais recentes primeiro.

        Returns:
            Tupla (lista de notificações, total)
        """
        skip = (page - 1) * page_size

        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))

        count_result = await self.db.execute(
            select(func.count()).select_from(stmt.subquery())
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            stmt.order_by(Notification.created_at.desc())
            .offset(skip)
            .limit(page_size)
        )
        return list(result.scalars().all()), total

    async def count_unread(self, user_id: UUID) -> int:
        """Conta notificações não lidas do leitor."""
        result = await self.db.execute(
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        )
        return result.scalar_one()

    async def mark_all_read(self, user_id: UUID) -> int:
        """Marca todas as notificações do leitor como lidas."""
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def delete_by_types_since(
        self,
        types: Iterable[NotificationType],
        since: datetime,
    ) -> int:
        """
        Remove notificações dos tipos informados criadas a partir de ``since``.

        Returns:
            Quantidade de notificações removidas
        """
        result = await self.db.execute(
            delete(Notification)
            .where(
                Notification.type.in_(list(types)),
                Notification.created_at >= since,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
