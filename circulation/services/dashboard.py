"""
Service do dashboard do leitor.

Carregar o dashboard é um dos gatilhos da avaliação lazy: antes de montar o
resumo, aplica as transições de hold vencidas e expira ofertas da fila.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.user import User
from circulation.repositories.notification import NotificationRepository
from circulation.schemas.dashboard import DashboardSummary
from circulation.services.checkout import CheckoutService
from circulation.services.clock import Clock
from circulation.services.hold import HoldService
from circulation.services.waitlist import WaitlistService


class DashboardService:
    """Monta o resumo do leitor."""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock
        self.holds = HoldService(db, clock)
        self.waitlist = WaitlistService(db, clock)
        self.checkouts = CheckoutService(db, clock)
        self.notification_repo = NotificationRepository(db)

    async def get_summary(self, user: User) -> DashboardSummary:
        user_id = user.id
        transitions = await self.holds.process_all()
        expired = await self.waitlist.expire_entries()

        checkouts = await self.checkouts.get_user_checkouts(user_id)
        entries = await self.waitlist.get_user_entries(user_id)
        unread = await self.notification_repo.count_unread(user_id)

        return DashboardSummary(
            checkouts=checkouts,
            waitlist=entries,
            unread_notifications=unread,
            total_late_fees=sum((c.late_fee for c in checkouts), Decimal("0")),
            transitions=transitions,
            entries_expired=expired.processed,
        )
