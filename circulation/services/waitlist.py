"""
Service para lógica de negócio da lista de espera.

Regras de negócio:
    - Só é possível entrar na fila de um livro indisponível (não AVAILABLE
      e não INACTIVE)
    - Um leitor tem no máximo uma entrada aberta por livro
    - Leitores premium/librarian/admin entram com is_priority = True
    - A ordem da fila é sempre: prioridade primeiro, depois position
"""

from datetime import datetime, timedelta
from typing import Sequence
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.logging import get_logger
from circulation.core.policy import get_policy, is_priority_role
from circulation.models.enums import BookStatus, WaitlistStatus
from circulation.models.user import User
from circulation.models.waitlist import WaitlistEntry
from circulation.repositories.book import BookRepository
from circulation.repositories.checkout import CheckoutRepository
from circulation.repositories.waitlist import WaitlistRepository
from circulation.schemas.waitlist import ExpireEntriesResult, WaitlistEntryRead
from circulation.services.clock import Clock
from circulation.services.notification import NotificationService, templates

logger = get_logger(__name__)


def queue_position_of(entry: WaitlistEntry, ranked: Sequence[WaitlistEntry]) -> int | None:
    """Posição 1-based de ``entry`` na fila ordenada (None se ausente)."""
    for index, candidate in enumerate(ranked, start=1):
        if candidate.id == entry.id:
            return index
    return None


class WaitlistService:
    """Service para operações da lista de espera."""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock
        self.waitlist_repo = WaitlistRepository(db)
        self.book_repo = BookRepository(db)
        self.checkout_repo = CheckoutRepository(db)
        self.notifications = NotificationService(db)

    # ==========================================
    # Join / Leave
    # ==========================================

    async def join(self, user: User, book_id: UUID) -> WaitlistEntryRead:
        """
        Coloca o leitor na lista de espera de um livro.

        Raises:
            HTTPException 404: Livro não encontrado
            HTTPException 400: Livro disponível ou inativo
            HTTPException 400: Leitor já está na fila ou com o livro
        """
        try:
            book = await self.book_repo.get_for_update(book_id)
            if not book:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Livro não encontrado",
                )

            if book.status == BookStatus.AVAILABLE:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="O livro está disponível. Faça o empréstimo diretamente.",
                )
            if book.status == BookStatus.INACTIVE:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Livro indisponível para empréstimo",
                )

            existing = await self.waitlist_repo.get_open_entry(user.id, book_id)
            if existing:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Você já está na lista de espera deste livro",
                )

            open_checkout = await self.checkout_repo.get_open_by_user_and_book(
                user.id, book_id
            )
            if open_checkout:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Você já está com este livro emprestado",
                )

            position = await self.waitlist_repo.get_max_position(book_id) + 1
            entry = await self.waitlist_repo.create(
                book=book,
                user=user,
                status=WaitlistStatus.WAITING,
                position=position,
                is_priority=is_priority_role(user.role),
            )

            queue_position = await self.queue_position(entry)
            await self.notifications.notify(
                user.id,
                templates.waitlist_joined(book.title, queue_position),
                book_id=book.id,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Usuário {user.id} entrou na fila do livro {book_id} "
            f"(posição {queue_position}, prioridade={entry.is_priority})"
        )
        return WaitlistEntryRead.from_entry(entry, queue_position)

    async def leave(self, user: User, book_id: UUID) -> WaitlistEntry:
        """
        Remove o leitor da lista de espera (entrada -> CANCELLED).

        Se o livro está em hold e a fila ficou vazia, ele volta a AVAILABLE.

        Raises:
            HTTPException 404: Leitor não está na fila deste livro
        """
        try:
            book = await self.book_repo.get_for_update(book_id)
            entry = await self.waitlist_repo.get_open_entry(user.id, book_id)
            if not entry:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Você não está na lista de espera deste livro",
                )

            await self.waitlist_repo.update(entry, status=WaitlistStatus.CANCELLED)

            if book and book.is_on_hold:
                remaining = await self.waitlist_repo.count_open(book_id)
                if remaining == 0:
                    await self.book_repo.update(
                        book,
                        status=BookStatus.AVAILABLE,
                        hold_until=None,
                    )
                    logger.info(f"Livro {book_id} liberado: fila vazia após saída")

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        return entry

    # ==========================================
    # Consultas
    # ==========================================

    async def queue_position(self, entry: WaitlistEntry) -> int | None:
        """Posição 1-based da entrada entre as entradas WAITING do livro."""
        ranked = await self.waitlist_repo.get_ranked(entry.book_id)
        return queue_position_of(entry, ranked)

    async def get_user_entries(self, user_id: UUID) -> list[WaitlistEntryRead]:
        """Entradas abertas do leitor com a posição atual em cada fila."""
        entries = await self.waitlist_repo.get_by_user(user_id)
        result = []
        for entry in entries:
            position = None
            if entry.status == WaitlistStatus.WAITING:
                position = await self.queue_position(entry)
            result.append(WaitlistEntryRead.from_entry(entry, position))
        return result

    # ==========================================
    # Ofertas
    # ==========================================

    async def offer(
        self,
        entries: Sequence[WaitlistEntry],
        now: datetime,
    ) -> None:
        """
        Marca entradas como NOTIFIED com prazo de retirada por tier.

        Não envia notificações nem faz commit.
        """
        for entry in entries:
            policy = get_policy(entry.user.role)
            entry.status = WaitlistStatus.NOTIFIED
            entry.notified_at = now
            entry.expires_at = now + timedelta(hours=policy.hold_claim_hours)
        await self.db.flush()

    async def revert_offers(self, book_id: UUID) -> int:
        """Volta as entradas NOTIFIED do livro para WAITING (sem commit)."""
        notified = await self.waitlist_repo.get_ranked(book_id, WaitlistStatus.NOTIFIED)
        for entry in notified:
            entry.status = WaitlistStatus.WAITING
            entry.notified_at = None
            entry.expires_at = None
        await self.db.flush()
        return len(notified)

    async def expire_entries(self) -> ExpireEntriesResult:
        """
        Expira ofertas NOTIFIED cujo prazo de retirada passou.

        Cada entrada é processada em sua própria transação; o status do
        livro não é alterado aqui (é responsabilidade das transições de hold).
        """
        now = await self.clock.now()
        entry_ids = await self.waitlist_repo.get_expired_offer_ids(now)

        processed = 0
        for entry_id in entry_ids:
            try:
                entry = await self.waitlist_repo.get_by_id(entry_id)
                if entry is None or entry.status != WaitlistStatus.NOTIFIED:
                    continue

                await self.waitlist_repo.update(entry, status=WaitlistStatus.EXPIRED)
                await self.notifications.notify(
                    entry.user_id,
                    templates.waitlist_expired(entry.book.title),
                    book_id=entry.book_id,
                )
                await self.db.commit()
                processed += 1
            except Exception:
                await self.db.rollback()
                logger.exception(f"Falha ao expirar entrada {entry_id} da lista de espera")

        if processed:
            logger.info(f"{processed} oferta(s) da lista de espera expirada(s)")
        return ExpireEntriesResult(
            processed=processed,
            message=f"{processed} entrada(s) expirada(s)",
        )
