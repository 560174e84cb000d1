"""
Repository para operações de Checkout no banco de dados.
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.checkout import Checkout
from circulation.models.enums import CheckoutStatus, OPEN_CHECKOUT_STATUSES
from circulation.repositories.base import BaseRepository


class CheckoutRepository(BaseRepository[Checkout]):
    """Repository para operações CRUD de Checkout."""

    def __init__(self, db: AsyncSession):
        super().__init__(Checkout, db)

    async def get_open_by_book(self, book_id: UUID) -> Checkout | None:
        """Empréstimo não devolvido do livro (no máximo um)."""
        result = await self.db.execute(
            select(Checkout)
            .where(
                Checkout.book_id == book_id,
                Checkout.status.in_(OPEN_CHECKOUT_STATUSES),
            )
            .order_by(Checkout.checked_out_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_open_by_user(self, user_id: UUID) -> list[Checkout]:
        """Empréstimos não devolvidos do leitor, mais antigos primeiro."""
        result = await self.db.execute(
            select(Checkout)
            .where(
                Checkout.user_id == user_id,
                Checkout.status.in_(OPEN_CHECKOUT_STATUSES),
            )
            .order_by(Checkout.due_date)
        )
        return list(result.scalars().all())

    async def get_open_by_user_and_book(
        self, user_id: UUID, book_id: UUID
    ) -> Checkout | None:
        """Empréstimo não devolvido do leitor para o livro."""
        result = await self.db.execute(
            select(Checkout)
            .where(
                Checkout.user_id == user_id,
                Checkout.book_id == book_id,
                Checkout.status.in_(OPEN_CHECKOUT_STATUSES),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_ids_by_status(self, *statuses: CheckoutStatus) -> list[UUID]:
        """IDs de empréstimos nos status informados, por vencimento."""
        result = await self.db.execute(
            select(Checkout.id)
            .where(Checkout.status.in_(statuses))
            .order_by(Checkout.due_date)
        )
        return list(result.scalars().all())

    async def search(
        self,
        status: CheckoutStatus | None = None,
        user_id: UUID | None = None,
        book_id: UUID | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Checkout], int]:
        """
        Lista empréstimos com filtros e paginação (visão administrativa).

        Returns:
            Tupla (lista de empréstimos, total)
        """
        skip = (page - 1) * page_size

        stmt = select(Checkout)
        if status:
            stmt = stmt.where(Checkout.status == status)
        if user_id:
            stmt = stmt.where(Checkout.user_id == user_id)
        if book_id:
            stmt = stmt.where(Checkout.book_id == book_id)

        count_result = await self.db.execute(
            select(func.count()).select_from(stmt.subquery())
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            stmt.order_by(Checkout.checked_out_at.desc())
            .offset(skip)
            .limit(page_size)
        )
        return list(result.scalars().all()), total
