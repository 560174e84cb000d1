"""
Service para o acervo (Book).

O cadastro é simples; a parte relevante é ``get_book_detail``, que aplica a
transição de hold vencida antes de responder (avaliação lazy).
"""

from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.logging import get_logger
from circulation.models.book import Book
from circulation.models.enums import BookStatus
from circulation.models.user import User
from circulation.repositories.book import BookRepository
from circulation.repositories.checkout import CheckoutRepository
from circulation.repositories.waitlist import WaitlistRepository
from circulation.schemas.book import BookCreate, BookDetail, BookRead
from circulation.services.clock import Clock
from circulation.services.hold import HoldService, hold_end_dates
from circulation.services.waitlist import queue_position_of

logger = get_logger(__name__)


class BookService:
    """Service para operações do acervo."""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock
        self.book_repo = BookRepository(db)
        self.checkout_repo = CheckoutRepository(db)
        self.waitlist_repo = WaitlistRepository(db)
        self.holds = HoldService(db, clock)

    async def get_book(self, book_id: UUID) -> Book:
        """
        Busca livro por ID.

        Raises:
            HTTPException 404: Livro não encontrado
        """
        book = await self.book_repo.get_by_id(book_id)
        if not book:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Livro não encontrado",
            )
        return book

    async def create_book(self, data: BookCreate) -> Book:
        book = await self.book_repo.create(
            title=data.title,
            author=data.author,
            isbn=data.isbn,
            status=BookStatus.AVAILABLE,
            hold_until=None,
        )
        await self.db.commit()
        logger.info(f"Livro cadastrado: {book.title} ({book.id})")
        return book

    async def set_active(self, book_id: UUID, active: bool) -> Book:
        """
        Ativa ou desativa um livro.

        Desativar tira o livro de circulação (INACTIVE) e encerra o hold.
        Reativar devolve a CHECKED_OUT se há empréstimo em aberto, senão
        a AVAILABLE.

        Raises:
            HTTPException 404: Livro não encontrado
        """
        try:
            book = await self.book_repo.get_for_update(book_id)
            if not book:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Livro não encontrado",
                )

            if not active:
                await self.book_repo.update(book, status=BookStatus.INACTIVE, hold_until=None)
            elif book.status == BookStatus.INACTIVE:
                open_checkout = await self.checkout_repo.get_open_by_book(book.id)
                new_status = BookStatus.CHECKED_OUT if open_checkout else BookStatus.AVAILABLE
                await self.book_repo.update(book, status=new_status, hold_until=None)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Livro {book.id} agora {book.status.value}")
        return book

    async def list_books(
        self,
        query: str | None = None,
        status_filter: BookStatus | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Book], int]:
        """Lista livros com filtros e paginação."""
        return await self.book_repo.search(
            query=query,
            status=status_filter,
            page=page,
            page_size=page_size,
        )

    async def get_book_detail(self, book_id: UUID, user: User) -> BookDetail:
        """
        Detalhe do livro para o leitor, após aplicar a transição de hold.

        Raises:
            HTTPException 404: Livro não encontrado
        """
        await self.get_book(book_id)
        await self.holds.process_book(book_id)
        book = await self.get_book(book_id)

        allowed, reason = await self.holds.can_checkout(book, user)
        waiting = await self.waitlist_repo.get_ranked(book.id)
        waitlist_count = await self.waitlist_repo.count_open(book.id)

        position = None
        entry = await self.waitlist_repo.get_open_entry(user.id, book.id)
        if entry:
            position = queue_position_of(entry, waiting)

        return BookDetail(
            **BookRead.model_validate(book).model_dump(),
            can_checkout=allowed,
            reason=reason,
            waitlist_count=waitlist_count,
            waitlist_position=position,
            hold_ends=hold_end_dates(book),
        )
