"""
Controlador da simulação de datas.

Permite à equipe mover o relógio para frente ou para trás e reaplicar (ou
desfazer) as consequências derivadas do tempo: avisos de vencimento,
empréstimos atrasados, devoluções automáticas agendadas e transições de hold.

Cada entidade é processada em transação própria: uma falha em um
empréstimo ou livro é registrada e não interrompe os demais. Os contadores
refletem apenas os itens processados com sucesso.
"""

from datetime import datetime
from typing import Any, Callable
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.cache import cache_service
from circulation.core.dates import parse_instant, to_naive_utc, utcnow
from circulation.core.logging import get_logger
from circulation.models.enums import (
    BookStatus,
    CheckoutStatus,
    OPEN_CHECKOUT_STATUSES,
    SIMULATED_NOTIFICATION_TYPES,
)
from circulation.models.system_setting import (
    AUTO_RETURN_CHECKOUTS_KEY,
    SIMULATION_STARTED_AT_KEY,
)
from circulation.models.user import User
from circulation.repositories.book import BookRepository
from circulation.repositories.checkout import CheckoutRepository
from circulation.repositories.notification import NotificationRepository
from circulation.repositories.system_setting import SystemSettingRepository
from circulation.schemas.simulation import (
    AutoReturnConfigRead,
    SimulatedDateResult,
    SimulatedDateStatus,
    SimulationClearResult,
)
from circulation.services.checkout import CheckoutService
from circulation.services.clock import FixedClock, SettingsClock
from circulation.services.hold import HoldService
from circulation.services.waitlist import WaitlistService

logger = get_logger(__name__)


class SimulationService:
    """Service da simulação de datas e dos auto-returns."""

    def __init__(self, db: AsyncSession, clock: SettingsClock):
        self.db = db
        self.clock = clock
        self.setting_repo = SystemSettingRepository(db)
        self.checkout_repo = CheckoutRepository(db)
        self.book_repo = BookRepository(db)
        self.notification_repo = NotificationRepository(db)
        self.waitlist = WaitlistService(db, clock)

    # ==========================================
    # Relógio
    # ==========================================

    async def get_status(self) -> SimulatedDateStatus:
        simulated = await self.clock.get_simulated()
        return SimulatedDateStatus(
            simulated_date=simulated,
            is_simulating=simulated is not None,
            real_date=utcnow(),
        )

    async def set_date(
        self,
        instant: datetime | None,
        actor: User,
    ) -> SimulatedDateResult:
        """
        Move o relógio simulado e reaplica as consequências.

        Ordem:
            1. Grava o relógio (e o início da simulação, se é a primeira)
            2. Desfaz auto-returns agendados para depois de ``instant``
            3. Reaplica auto-returns com return_date <= ``instant``, datados
               em return_date
            4. Gera avisos de atraso/vencimento próximo
            5. Aplica transições de hold no novo instante

        ``instant`` None equivale a ``clear``.
        """
        if instant is None:
            cleared = await self.clear(actor)
            return SimulatedDateResult(
                simulated_date=None,
                is_simulating=False,
                auto_returns_reverted=cleared.auto_returns_reverted,
                notifications_deleted=cleared.notifications_deleted,
            )

        actor_id = actor.id
        instant = to_naive_utc(instant)
        try:
            if not await self.clock.is_simulating():
                await self.setting_repo.set_value(
                    SIMULATION_STARTED_AT_KEY,
                    utcnow().isoformat(),
                    updated_by=actor_id,
                )
            await self.clock.set(instant, actor_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await cache_service.invalidate_simulated_date()

        reverted = await self.revert_auto_returns(lambda return_date: instant < return_date)
        processed = await self.replay_auto_returns(instant)

        checkouts = CheckoutService(self.db, self.clock)
        generated = await checkouts.generate_due_notifications(instant)

        transitions = await HoldService(self.db, self.clock).process_all()

        logger.info(
            f"Simulação em {instant.isoformat()}: {generated} aviso(s), "
            f"{processed} auto-return(s), {reverted} revertido(s), "
            f"{transitions.total} transição(ões) de hold"
        )
        return SimulatedDateResult(
            simulated_date=instant,
            is_simulating=True,
            notifications_generated=generated,
            auto_returns_processed=processed,
            auto_returns_reverted=reverted,
        )

    async def clear(self, actor: User) -> SimulationClearResult:
        """
        Volta ao relógio real e desfaz a janela simulada.

        - Auto-returns aplicados voltam ao status original (o livro volta a
          CHECKED_OUT e as ofertas da fila voltam a WAITING)
        - Empréstimos OVERDUE (inclusive os restaurados acima) voltam a ACTIVE
        - Notificações dos tipos simulados criadas desde o início da
          simulação são removidas

        As configurações de auto-return são mantidas.
        """
        actor_id = actor.id
        started_raw = await self.setting_repo.get_value(SIMULATION_STARTED_AT_KEY)

        try:
            await self.clock.set(None, actor_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await cache_service.invalidate_simulated_date()

        # Auto-returns primeiro: o status original restaurado pode ser OVERDUE
        reverted = await self.revert_auto_returns(lambda return_date: True)

        for checkout_id in await self.checkout_repo.get_ids_by_status(CheckoutStatus.OVERDUE):
            try:
                checkout = await self.checkout_repo.get_by_id(checkout_id)
                if checkout is None or checkout.status != CheckoutStatus.OVERDUE:
                    continue
                await self.checkout_repo.update(checkout, status=CheckoutStatus.ACTIVE)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                logger.exception(f"Falha ao reverter atraso do empréstimo {checkout_id}")

        deleted = 0
        try:
            if started_raw:
                deleted = await self.notification_repo.delete_by_types_since(
                    SIMULATED_NOTIFICATION_TYPES,
                    parse_instant(started_raw),
                )
            await self.setting_repo.set_value(
                SIMULATION_STARTED_AT_KEY,
                None,
                updated_by=actor_id,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception("Falha ao remover notificações da simulação")
            deleted = 0

        logger.info(
            f"Simulação encerrada por {actor_id}: {deleted} notificação(ões) "
            f"removida(s), {reverted} auto-return(s) revertido(s)"
        )
        return SimulationClearResult(
            notifications_deleted=deleted,
            auto_returns_reverted=reverted,
        )

    # ==========================================
    # Auto-returns: replay / revert
    # ==========================================

    async def replay_auto_returns(self, instant: datetime) -> int:
        """
        Devolve os empréstimos agendados com return_date <= ``instant``.

        A devolução é a mesma do leitor (inclusive promoção da fila),
        datada em return_date.
        """
        processed = 0
        for config in await self.get_configs():
            return_date = parse_instant(config["return_date"])
            if instant < return_date:
                continue

            checkout_id = UUID(config["checkout_id"])
            try:
                checkout = await self.checkout_repo.get_by_id(checkout_id)
                if checkout is None or checkout.status == CheckoutStatus.RETURNED:
                    continue

                replay = CheckoutService(self.db, FixedClock(return_date))
                await replay.complete_return(checkout, return_date)
                await self.db.commit()
                processed += 1
                logger.info(f"Auto-return do empréstimo {checkout_id} em {return_date.isoformat()}")
            except Exception:
                await self.db.rollback()
                logger.exception(f"Falha no auto-return do empréstimo {checkout_id}")

        return processed

    async def revert_auto_returns(
        self,
        should_revert: Callable[[datetime], bool],
    ) -> int:
        """
        Desfaz auto-returns aplicados cujo return_date satisfaz ``should_revert``.

        Só é revertido o empréstimo devolvido exatamente em return_date (ou
        seja, pelo próprio auto-return). A reversão é ignorada se o livro já
        tem outro empréstimo em aberto.
        """
        reverted = 0
        for config in await self.get_configs():
            return_date = parse_instant(config["return_date"])
            if not should_revert(return_date):
                continue

            checkout_id = UUID(config["checkout_id"])
            try:
                checkout = await self.checkout_repo.get_by_id(checkout_id)
                if (
                    checkout is None
                    or checkout.status != CheckoutStatus.RETURNED
                    or checkout.returned_at != return_date
                ):
                    continue

                book = await self.book_repo.get_for_update(checkout.book_id)
                other = await self.checkout_repo.get_open_by_book(checkout.book_id)
                if other is not None:
                    logger.warning(
                        f"Auto-return {checkout_id} não revertido: livro {checkout.book_id} "
                        f"já está no empréstimo {other.id}"
                    )
                    await self.db.rollback()
                    continue

                await self.checkout_repo.update(
                    checkout,
                    status=CheckoutStatus(config["original_status"]),
                    returned_at=None,
                )
                await self.book_repo.update(
                    book,
                    status=BookStatus.CHECKED_OUT,
                    hold_until=None,
                )
                await self.waitlist.revert_offers(book.id)
                await self.db.commit()
                reverted += 1
                logger.info(f"Auto-return do empréstimo {checkout_id} revertido")
            except Exception:
                await self.db.rollback()
                logger.exception(f"Falha ao reverter auto-return do empréstimo {checkout_id}")

        return reverted

    # ==========================================
    # Auto-returns: configuração
    # ==========================================

    async def get_configs(self) -> list[dict[str, Any]]:
        return list(await self.setting_repo.get_value(AUTO_RETURN_CHECKOUTS_KEY, []))

    async def list_configs(self) -> list[AutoReturnConfigRead]:
        """Configurações com status/vencimento do empréstimo e título do livro."""
        result = []
        for config in await self.get_configs():
            checkout = await self.checkout_repo.get_by_id(UUID(config["checkout_id"]))
            result.append(
                AutoReturnConfigRead(
                    checkout_id=config["checkout_id"],
                    book_id=config["book_id"],
                    return_date=parse_instant(config["return_date"]),
                    original_status=config["original_status"],
                    checkout_status=checkout.status if checkout else None,
                    due_date=checkout.due_date if checkout else None,
                    book_title=checkout.book.title if checkout else None,
                )
            )
        return result

    async def upsert_config(
        self,
        checkout_id: UUID,
        return_date: datetime,
        actor: User,
    ) -> AutoReturnConfigRead:
        """
        Agenda (ou reagenda) a devolução automática de um empréstimo.

        O status original é capturado agora e restaurado quando o
        auto-return é desfeito.

        Raises:
            HTTPException 404: Empréstimo não encontrado
            HTTPException 400: Empréstimo já devolvido
        """
        checkout = await self.checkout_repo.get_by_id(checkout_id)
        if not checkout:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Empréstimo não encontrado",
            )
        if checkout.status not in OPEN_CHECKOUT_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Só é possível agendar devolução de empréstimo em aberto",
            )

        return_date = to_naive_utc(return_date)
        new_config = {
            "checkout_id": str(checkout.id),
            "book_id": str(checkout.book_id),
            "return_date": return_date.isoformat(),
            "original_status": checkout.status.value,
        }
        configs = [c for c in await self.get_configs() if c["checkout_id"] != str(checkout.id)]
        configs.append(new_config)

        try:
            await self.setting_repo.set_value(AUTO_RETURN_CHECKOUTS_KEY, configs, updated_by=actor.id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        return AutoReturnConfigRead(
            checkout_id=checkout.id,
            book_id=checkout.book_id,
            return_date=return_date,
            original_status=checkout.status,
            checkout_status=checkout.status,
            due_date=checkout.due_date,
            book_title=checkout.book.title,
        )

    async def remove_config(self, checkout_id: UUID, actor: User) -> None:
        """
        Remove o agendamento de um empréstimo.

        Raises:
            HTTPException 404: Empréstimo sem auto-return configurado
        """
        configs = await self.get_configs()
        remaining = [c for c in configs if c["checkout_id"] != str(checkout_id)]
        if len(remaining) == len(configs):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Auto-return não configurado para este empréstimo",
            )

        try:
            await self.setting_repo.set_value(AUTO_RETURN_CHECKOUTS_KEY, remaining, updated_by=actor.id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
