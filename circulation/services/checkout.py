"""
Service para lógica de negócio de empréstimos (Checkout).

Regras de negócio:
    - Prazo e multa dependem do tier do leitor (ver core.policy)
    - Leitor com empréstimo atrasado não pode retirar outro livro
    - Leitor não pode exceder o limite de empréstimos do tier
    - Livro em hold só pode ser retirado por quem está na fila
      (ver HoldService.can_checkout)
    - Multa: dias_atraso * taxa diária, calculada sob demanda

Cada operação é uma única transação: empréstimo, status do livro, fila e
notificações são gravados juntos ou nenhum deles é.
"""

from datetime import datetime, timedelta
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.config import get_settings
from circulation.core.dates import days_between, is_due_soon, is_overdue
from circulation.core.logging import get_logger
from circulation.core.policy import get_policy, is_staff_role
from circulation.models.checkout import Checkout
from circulation.models.enums import (
    BookStatus,
    CheckoutStatus,
    NotificationType,
    WaitlistStatus,
)
from circulation.models.user import User
from circulation.repositories.book import BookRepository
from circulation.repositories.checkout import CheckoutRepository
from circulation.repositories.notification import NotificationRepository
from circulation.repositories.waitlist import WaitlistRepository
from circulation.schemas.checkout import CheckoutDetail, CheckoutReturn
from circulation.services.clock import Clock
from circulation.services.hold import HoldService
from circulation.services.notification import NotificationService, templates
from circulation.services.waitlist import WaitlistService

logger = get_logger(__name__)
settings = get_settings()


class CheckoutService:
    """Service para operações de empréstimo."""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock
        self.checkout_repo = CheckoutRepository(db)
        self.book_repo = BookRepository(db)
        self.waitlist_repo = WaitlistRepository(db)
        self.notification_repo = NotificationRepository(db)
        self.holds = HoldService(db, clock)
        self.waitlist = WaitlistService(db, clock)
        self.notifications = NotificationService(db)

    def _detail(self, checkout: Checkout, now: datetime) -> CheckoutDetail:
        return CheckoutDetail.from_checkout(
            checkout,
            now,
            due_soon_threshold=settings.DUE_SOON_THRESHOLD_DAYS,
        )

    # ==========================================
    # Create Checkout
    # ==========================================

    async def create_checkout(self, user: User, book_id: UUID) -> CheckoutDetail:
        """
        Cria um novo empréstimo.

        Fluxo:
            1. Bloqueia o livro e aplica transição de hold vencida
            2. Verifica elegibilidade (status do livro e fila)
            3. Verifica atrasos e limite do tier
            4. Cria o empréstimo com due_date = now + loan_days
            5. Marca a entrada da fila como CLAIMED e devolve as demais
               ofertas para WAITING
            6. Livro -> CHECKED_OUT

        Raises:
            HTTPException 404: Livro não encontrado
            HTTPException 400: Livro não elegível para o leitor
            HTTPException 400: Leitor com empréstimo atrasado
            HTTPException 400: Limite de empréstimos atingido
        """
        now = await self.clock.now()
        policy = get_policy(user.role)

        try:
            book = await self.book_repo.get_for_update(book_id)
            if not book:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Livro não encontrado",
                )

            await self.holds.advance(book, now)

            allowed, reason = await self.holds.can_checkout(book, user)
            if not allowed:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=reason,
                )

            if await self.checkout_repo.get_open_by_book(book.id):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Livro emprestado no momento",
                )

            open_checkouts = await self.checkout_repo.get_open_by_user(user.id)
            blocking = [
                c for c in open_checkouts
                if c.status == CheckoutStatus.OVERDUE or is_overdue(c.due_date, now)
            ]
            if blocking:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Você possui {len(blocking)} empréstimo(s) em atraso. "
                           f"Devolva antes de retirar outro livro.",
                )

            if len(open_checkouts) >= policy.checkout_limit:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Limite de {policy.checkout_limit} empréstimos simultâneos atingido",
                )

            due_date = now + timedelta(days=policy.loan_days)
            checkout = await self.checkout_repo.create(
                user=user,
                book=book,
                status=CheckoutStatus.ACTIVE,
                checked_out_at=now,
                due_date=due_date,
                returned_at=None,
            )

            entry = await self.waitlist_repo.get_open_entry(user.id, book.id)
            if entry:
                await self.waitlist_repo.update(entry, status=WaitlistStatus.CLAIMED)
            await self.waitlist.revert_offers(book.id)

            await self.book_repo.update(book, status=BookStatus.CHECKED_OUT, hold_until=None)

            await self.notifications.notify(
                user.id,
                templates.checkout_confirmed(book.title, due_date),
                book_id=book.id,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Empréstimo {checkout.id} criado: livro {book.id} para usuário {user.id} "
            f"até {due_date.isoformat()}"
        )
        return self._detail(checkout, now)

    # ==========================================
    # Return Checkout
    # ==========================================

    async def complete_return(
        self,
        checkout: Checkout,
        returned_at: datetime,
    ) -> tuple[BookStatus, bool]:
        """
        Devolve o empréstimo e promove a fila do livro. Não faz commit.

        Returns:
            Tupla (novo status do livro, algum leitor da fila foi avisado)

        Raises:
            HTTPException 400: Empréstimo já devolvido
        """
        book = await self.book_repo.get_for_update(checkout.book_id)

        # Estado relido após o lock do livro
        await self.db.refresh(checkout, attribute_names=["status", "returned_at"])
        if checkout.status == CheckoutStatus.RETURNED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Este empréstimo já foi devolvido",
            )

        await self.checkout_repo.update(
            checkout,
            status=CheckoutStatus.RETURNED,
            returned_at=returned_at,
        )

        waitlist_notified = False
        if book.status == BookStatus.INACTIVE:
            logger.info(f"Livro {book.id} inativo: devolução sem promoção da fila")
        else:
            waitlist_notified = await self.holds.promote_after_return(book, returned_at)

        await self.notifications.notify(
            checkout.user_id,
            templates.book_returned(book.title),
            book_id=book.id,
        )
        return book.status, waitlist_notified

    async def return_checkout(self, checkout_id: UUID, actor: User) -> CheckoutReturn:
        """
        Processa a devolução de um empréstimo.

        Raises:
            HTTPException 404: Empréstimo não encontrado
            HTTPException 403: Empréstimo de outro leitor
            HTTPException 400: Empréstimo já foi devolvido
        """
        checkout = await self.checkout_repo.get_by_id(checkout_id)
        if not checkout:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Empréstimo não encontrado",
            )

        if checkout.user_id != actor.id and not is_staff_role(actor.role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Este empréstimo não pertence a você",
            )

        now = await self.clock.now()
        try:
            book_status, waitlist_notified = await self.complete_return(checkout, now)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        detail = self._detail(checkout, now)
        if detail.late_fee > 0:
            message = (
                f"Livro devolvido com {detail.days_overdue} dia(s) de atraso. "
                f"Multa: ${detail.late_fee:.2f}"
            )
        else:
            message = "Livro devolvido com sucesso. Sem multa."

        logger.info(f"Empréstimo {checkout.id} devolvido; livro agora {book_status.value}")
        return CheckoutReturn(
            checkout=detail,
            late_fee=detail.late_fee,
            book_status=book_status,
            waitlist_notified=waitlist_notified,
            message=message,
        )

    # ==========================================
    # Admin Overrides
    # ==========================================

    async def admin_action(
        self,
        checkout_id: UUID,
        action: str,
        actor: User,
        extend_days: int = 7,
    ) -> CheckoutDetail:
        """
        Ações manuais da equipe sobre um empréstimo.

        Ações:
            - return: mesma devolução do leitor
            - extend: due_date += extend_days; OVERDUE que deixa de estar
              atrasado volta a ACTIVE
            - mark_overdue: status -> OVERDUE e aviso ao leitor

        Raises:
            HTTPException 404: Empréstimo não encontrado
            HTTPException 400: Empréstimo já devolvido ou ação desconhecida
        """
        checkout = await self.checkout_repo.get_by_id(checkout_id)
        if not checkout:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Empréstimo não encontrado",
            )

        if action == "return":
            result = await self.return_checkout(checkout_id, actor)
            return result.checkout

        if checkout.status == CheckoutStatus.RETURNED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Este empréstimo já foi devolvido",
            )

        now = await self.clock.now()
        try:
            if action == "extend":
                new_due_date = checkout.due_date + timedelta(days=extend_days)
                new_status = checkout.status
                if new_status == CheckoutStatus.OVERDUE and not is_overdue(new_due_date, now):
                    new_status = CheckoutStatus.ACTIVE
                await self.checkout_repo.update(
                    checkout,
                    due_date=new_due_date,
                    status=new_status,
                )
            elif action == "mark_overdue":
                await self.checkout_repo.update(checkout, status=CheckoutStatus.OVERDUE)
                already = await self.notification_repo.exists_for(
                    checkout.user_id, checkout.book_id, NotificationType.OVERDUE
                )
                if not already:
                    await self.notifications.notify(
                        checkout.user_id,
                        templates.overdue(checkout.book.title),
                        book_id=checkout.book_id,
                    )
            else:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Ação desconhecida: {action}",
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Ação '{action}' aplicada ao empréstimo {checkout.id} por {actor.id}")
        return self._detail(checkout, now)

    # ==========================================
    # Vencimentos (overdue / due soon)
    # ==========================================

    async def generate_due_notifications(self, now: datetime) -> int:
        """
        Avisa atrasos e vencimentos próximos dos empréstimos ACTIVE.

        - Atrasado: status -> OVERDUE e aviso "overdue", se ainda não houver
          um para (leitor, livro)
        - Vence em breve: aviso "due_soon", se ainda não houver um

        Idempotente: repetir o mesmo instante não duplica avisos. Cada
        empréstimo é processado em transação própria.

        Returns:
            Quantidade de notificações geradas
        """
        checkout_ids = await self.checkout_repo.get_ids_by_status(CheckoutStatus.ACTIVE)
        generated = 0

        for checkout_id in checkout_ids:
            try:
                checkout = await self.checkout_repo.get_by_id(checkout_id)
                if checkout is None or checkout.status != CheckoutStatus.ACTIVE:
                    continue

                created = False
                if is_overdue(checkout.due_date, now):
                    await self.checkout_repo.update(checkout, status=CheckoutStatus.OVERDUE)
                    already = await self.notification_repo.exists_for(
                        checkout.user_id, checkout.book_id, NotificationType.OVERDUE
                    )
                    if not already:
                        created = await self.notifications.notify(
                            checkout.user_id,
                            templates.overdue(checkout.book.title),
                            book_id=checkout.book_id,
                        ) is not None
                elif is_due_soon(checkout.due_date, now, settings.DUE_SOON_THRESHOLD_DAYS):
                    already = await self.notification_repo.exists_for(
                        checkout.user_id, checkout.book_id, NotificationType.DUE_SOON
                    )
                    if not already:
                        days_left = days_between(now, checkout.due_date)
                        created = await self.notifications.notify(
                            checkout.user_id,
                            templates.due_soon(checkout.book.title, days_left),
                            book_id=checkout.book_id,
                        ) is not None

                await self.db.commit()
                if created:
                    generated += 1
            except Exception:
                await self.db.rollback()
                logger.exception(f"Falha ao avaliar vencimento do empréstimo {checkout_id}")

        return generated

    # ==========================================
    # Get / List Checkouts
    # ==========================================

    async def get_user_checkouts(self, user_id: UUID) -> list[CheckoutDetail]:
        """Empréstimos abertos do leitor com indicadores no instante do relógio."""
        now = await self.clock.now()
        checkouts = await self.checkout_repo.get_open_by_user(user_id)
        return [self._detail(checkout, now) for checkout in checkouts]

    async def list_checkouts(
        self,
        status_filter: CheckoutStatus | None = None,
        user_id: UUID | None = None,
        book_id: UUID | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[CheckoutDetail], int]:
        """
        Lista empréstimos com filtros e paginação (visão da equipe).

        Returns:
            Tupla (lista de CheckoutDetail, total)
        """
        now = await self.clock.now()
        checkouts, total = await self.checkout_repo.search(
            status=status_filter,
            user_id=user_id,
            book_id=book_id,
            page=page,
            page_size=page_size,
        )
        return [self._detail(checkout, now) for checkout in checkouts], total

