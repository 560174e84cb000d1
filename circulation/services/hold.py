"""
Processador de transições de hold.

Máquina de estados de um livro devolvido com fila:

    CHECKED_OUT -> ON_HOLD_PREMIUM -> ON_HOLD_WAITLIST -> AVAILABLE

As transições são avaliadas sob demanda (ao abrir o livro ou o dashboard,
e pela simulação de datas), nunca por timer. Cada avaliação é idempotente:
um livro cujo hold ainda não venceu não é alterado.

Concorrência: a linha do livro é bloqueada (SELECT ... FOR UPDATE) e o
estado é reavaliado depois do lock, então duas requisições que observam o
mesmo hold vencido aplicam a transição uma única vez.
"""

from datetime import datetime, timedelta
from enum import Enum
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.config import get_settings
from circulation.core.logging import get_logger
from circulation.core.policy import is_priority_role
from circulation.models.book import Book
from circulation.models.enums import BookStatus
from circulation.models.user import User
from circulation.repositories.book import BookRepository
from circulation.repositories.waitlist import WaitlistRepository
from circulation.schemas.book import HoldEndDates, HoldProcessResult
from circulation.services.clock import Clock
from circulation.services.notification import (
    NotificationService,
    format_datetime,
    templates,
)
from circulation.services.waitlist import WaitlistService

logger = get_logger(__name__)
settings = get_settings()


class HoldTransition(str, Enum):
    """Resultado de uma avaliação de hold."""
    PREMIUM_TO_WAITLIST = "premium_to_waitlist"
    PREMIUM_TO_AVAILABLE = "premium_to_available"
    WAITLIST_TO_AVAILABLE = "waitlist_to_available"


def hold_end_dates(book: Book) -> HoldEndDates | None:
    """
    Fim de cada fase do hold atual do livro.

    Returns:
        None se o livro não está em hold
    """
    if not book.is_on_hold or book.hold_until is None:
        return None

    if book.status == BookStatus.ON_HOLD_PREMIUM:
        return HoldEndDates(
            premium_ends=book.hold_until,
            waitlist_ends=book.hold_until + timedelta(hours=settings.WAITLIST_HOLD_HOURS),
        )
    return HoldEndDates(premium_ends=None, waitlist_ends=book.hold_until)


class HoldService:
    """Service das transições de hold e da elegibilidade para empréstimo."""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock
        self.book_repo = BookRepository(db)
        self.waitlist_repo = WaitlistRepository(db)
        self.waitlist = WaitlistService(db, clock)
        self.notifications = NotificationService(db)

    # ==========================================
    # Devolução -> próxima fase
    # ==========================================

    async def promote_after_return(self, book: Book, now: datetime) -> bool:
        """
        Decide o próximo status de um livro recém-devolvido.

        - Fila vazia: AVAILABLE
        - Primeiro da fila é prioritário: ON_HOLD_PREMIUM por
          PREMIUM_HOLD_HOURS; todos os prioritários em espera são avisados
          (as entradas continuam WAITING)
        - Nenhum prioritário na fila: abre direto a fase ON_HOLD_WAITLIST

        O livro já deve estar bloqueado pelo chamador. Não faz commit.

        Returns:
            True se algum leitor da fila foi avisado
        """
        waiting = await self.waitlist_repo.get_ranked(book.id)

        if not waiting:
            await self.book_repo.update(book, status=BookStatus.AVAILABLE, hold_until=None)
            return False

        if waiting[0].is_priority:
            hold_until = now + timedelta(hours=settings.PREMIUM_HOLD_HOURS)
            await self.book_repo.update(
                book,
                status=BookStatus.ON_HOLD_PREMIUM,
                hold_until=hold_until,
            )
            for entry in waiting:
                if entry.is_priority:
                    await self.notifications.notify(
                        entry.user_id,
                        templates.waitlist_available(book.title, hold_until),
                        book_id=book.id,
                    )
            logger.info(f"Livro {book.id} em hold premium até {hold_until.isoformat()}")
            return True

        await self._open_waitlist_phase(book, waiting, now, notify_priority=True)
        return True

    async def _open_waitlist_phase(
        self,
        book: Book,
        waiting: list,
        now: datetime,
        notify_priority: bool,
    ) -> None:
        """Oferta o livro a toda a fila e passa para ON_HOLD_WAITLIST."""
        await self.waitlist.offer(waiting, now)
        hold_until = now + timedelta(hours=settings.WAITLIST_HOLD_HOURS)
        await self.book_repo.update(
            book,
            status=BookStatus.ON_HOLD_WAITLIST,
            hold_until=hold_until,
        )

        for entry in waiting:
            # Prioritários já foram avisados quando a fase premium começou
            if entry.is_priority and not notify_priority:
                continue
            await self.notifications.notify(
                entry.user_id,
                templates.waitlist_available(book.title, entry.expires_at),
                book_id=book.id,
            )
        logger.info(
            f"Livro {book.id} em hold da lista de espera até {hold_until.isoformat()} "
            f"({len(waiting)} leitor(es) avisado(s))"
        )

    # ==========================================
    # Transições lazy
    # ==========================================

    async def advance(self, book: Book, now: datetime) -> HoldTransition | None:
        """
        Aplica a transição de hold vencida, se houver. Não faz commit.

        - ON_HOLD_PREMIUM vencido com fila: todas as entradas WAITING viram
          NOTIFIED (prazo por tier); só os não prioritários são avisados
        - ON_HOLD_PREMIUM vencido sem fila: AVAILABLE
        - ON_HOLD_WAITLIST vencido: AVAILABLE, independente de ofertas
          ainda abertas
        """
        if not book.is_on_hold or book.hold_until is None or book.hold_until > now:
            return None

        if book.status == BookStatus.ON_HOLD_PREMIUM:
            waiting = await self.waitlist_repo.get_ranked(book.id)
            if waiting:
                await self._open_waitlist_phase(book, waiting, now, notify_priority=False)
                return HoldTransition.PREMIUM_TO_WAITLIST

            await self.book_repo.update(book, status=BookStatus.AVAILABLE, hold_until=None)
            logger.info(f"Livro {book.id} disponível: hold premium venceu sem fila")
            return HoldTransition.PREMIUM_TO_AVAILABLE

        await self.book_repo.update(book, status=BookStatus.AVAILABLE, hold_until=None)
        logger.info(f"Livro {book.id} disponível: hold da lista de espera venceu")
        return HoldTransition.WAITLIST_TO_AVAILABLE

    async def process_book(self, book_id: UUID) -> HoldTransition | None:
        """Avalia o hold de um livro em transação própria."""
        now = await self.clock.now()
        try:
            book = await self.book_repo.get_for_update(book_id)
            if book is None:
                await self.db.rollback()
                return None
            transition = await self.advance(book, now)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return transition

    async def process_all(self) -> HoldProcessResult:
        """
        Avalia todos os livros com hold vencido no instante do relógio.

        Uma falha em um livro é registrada e não interrompe os demais.
        """
        now = await self.clock.now()
        book_ids = await self.book_repo.get_ids_with_expired_hold(now)

        result = HoldProcessResult()
        for book_id in book_ids:
            try:
                transition = await self.process_book(book_id)
            except Exception:
                logger.exception(f"Falha na transição de hold do livro {book_id}")
                result.failed += 1
                continue

            if transition is not None:
                counter = transition.value
                setattr(result, counter, getattr(result, counter) + 1)

        return result

    # ==========================================
    # Elegibilidade
    # ==========================================

    async def can_checkout(self, book: Book, user: User) -> tuple[bool, str | None]:
        """
        Verifica se o leitor pode retirar o livro no estado atual.

        Returns:
            Tupla (permitido, motivo se não permitido)
        """
        if book.status == BookStatus.AVAILABLE:
            return True, None
        if book.status == BookStatus.CHECKED_OUT:
            return False, "Livro emprestado no momento"
        if book.status == BookStatus.INACTIVE:
            return False, "Livro indisponível para empréstimo"

        entry = await self.waitlist_repo.get_open_entry(user.id, book.id)
        ends = hold_end_dates(book)

        if book.status == BookStatus.ON_HOLD_PREMIUM:
            if entry and is_priority_role(user.role):
                return True, None
            if entry:
                return False, (
                    "Reservado para leitores prioritários até "
                    f"{format_datetime(ends.premium_ends)}"
                )
            return False, "Reservado para leitores da lista de espera"

        if entry:
            return True, None
        return False, (
            "Reservado para leitores da lista de espera até "
            f"{format_datetime(ends.waitlist_ends)}"
        )
