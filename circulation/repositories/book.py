"""
Repository para operações de Book no banco de dados.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.book import Book
from circulation.models.enums import BookStatus, HOLD_STATUSES
from circulation.repositories.base import BaseRepository


class BookRepository(BaseRepository[Book]):
    """Repository para operações CRUD de Book."""

    def __init__(self, db: AsyncSession):
        super().__init__(Book, db)

    async def get_for_update(self, book_id: UUID) -> Book | None:
        """
        Busca livro bloqueando a linha até o fim da transação.

        Serializa transições concorrentes do mesmo livro (SELECT ... FOR UPDATE).
        populate_existing garante que o estado lido é o do banco após o lock.
        """
        result = await self.db.execute(
            select(Book)
            .where(Book.id == book_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_ids_with_expired_hold(self, now: datetime) -> list[UUID]:
        """IDs de livros em hold cuja fase atual terminou (hold_until <= now)."""
        result = await self.db.execute(
            select(Book.id)
            .where(
                Book.status.in_(HOLD_STATUSES),
                Book.hold_until.is_not(None),
                Book.hold_until <= now,
            )
            .order_by(Book.hold_until)
        )
        return list(result.scalars().all())

    async def search(
        self,
        query: str | None = None,
        status: BookStatus | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Book], int]:
        """
        Busca livros com filtros e paginação.

        Args:
            query: Texto buscado em título ou autor
            status: Filtro por status
            page: Número da página
            page_size: Tamanho da página

        Returns:
            Tupla (lista de livros, total)
        """
        skip = (page - 1) * page_size

        stmt = select(Book)
        if query:
            pattern = f"%{query}%"
            stmt = stmt.where(or_(Book.title.ilike(pattern), Book.author.ilike(pattern)))
        if status:
            stmt = stmt.where(Book.status == status)

        count_result = await self.db.execute(
            select(func.count()).select_from(stmt.subquery())
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            stmt.order_by(Book.title).offset(skip).limit(page_size)
        )
        return list(result.scalars().all()), total
