"""
Schema do resumo exibido no dashboard do leitor.
"""

from decimal import Decimal

from circulation.schemas.base import BaseSchema
from circulation.schemas.book import HoldProcessResult
from circulation.schemas.checkout import CheckoutDetail
from circulation.schemas.waitlist import WaitlistEntryRead


class DashboardSummary(BaseSchema):
    """
    Resumo do leitor após as transições lazy.

    Attributes:
        checkouts: Empréstimos abertos com indicadores atuais
        waitlist: Entradas abertas na lista de espera
        unread_notifications: Notificações não lidas
        total_late_fees: Soma das multas acumuladas
        transitions: Transições de hold aplicadas nesta carga
        entries_expired: Ofertas da lista de espera expiradas nesta carga
    """
    checkouts: list[CheckoutDetail]
    waitlist: list[WaitlistEntryRead]
    unread_notifications: int
    total_late_fees: Decimal
    transitions: HoldProcessResult
    entries_expired: int
