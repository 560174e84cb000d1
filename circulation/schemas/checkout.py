"""
Schemas Pydantic para Checkout (empréstimo).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field

from circulation.core.dates import days_overdue, is_due_soon, is_overdue, calculate_late_fee
from circulation.core.policy import get_policy
from circulation.models.checkout import Checkout
from circulation.models.enums import BookStatus, CheckoutStatus
from circulation.schemas.base import BaseSchema


class CheckoutCreate(BaseSchema):
    """Schema para criar empréstimo."""
    book_id: UUID = Field(..., description="ID do livro")


class CheckoutDetail(BaseSchema):
    """
    Empréstimo com indicadores calculados no instante do relógio.

    Campos calculados:
        is_overdue: Atrasado (a partir do dia seguinte ao vencimento)
        is_due_soon: Vence nos próximos dias
        days_overdue: Dias em atraso
        late_fee: Multa acumulada (não persistida)
    """
    id: UUID
    user_id: UUID
    user_name: str
    book_id: UUID
    book_title: str
    status: CheckoutStatus
    checked_out_at: datetime
    due_date: datetime
    returned_at: datetime | None
    is_overdue: bool
    is_due_soon: bool
    days_overdue: int
    late_fee: Decimal

    @classmethod
    def from_checkout(
        cls,
        checkout: Checkout,
        now: datetime,
        due_soon_threshold: int = 2,
    ) -> "CheckoutDetail":
        """Cria detail a partir do model, avaliando datas contra ``now``."""
        # Devolvidos são avaliados na data da devolução
        reference = checkout.returned_at or now
        fee_per_day = get_policy(checkout.user.role).late_fee_per_day
        overdue = is_overdue(checkout.due_date, reference)

        return cls(
            id=checkout.id,
            user_id=checkout.user_id,
            user_name=checkout.user.name,
            book_id=checkout.book_id,
            book_title=checkout.book.title,
            status=checkout.status,
            checked_out_at=checkout.checked_out_at,
            due_date=checkout.due_date,
            returned_at=checkout.returned_at,
            is_overdue=overdue,
            is_due_soon=(
                checkout.returned_at is None
                and not overdue
                and is_due_soon(checkout.due_date, now, due_soon_threshold)
            ),
            days_overdue=days_overdue(checkout.due_date, reference),
            late_fee=calculate_late_fee(checkout.due_date, reference, fee_per_day),
        )


class CheckoutReturn(BaseSchema):
    """Resposta de devolução."""
    checkout: CheckoutDetail
    late_fee: Decimal
    book_status: BookStatus
    waitlist_notified: bool
    message: str


class AdminCheckoutAction(BaseSchema):
    """Ação administrativa sobre um empréstimo."""
    action: str = Field(..., examples=["extend"], description="return, extend ou mark_overdue")
    extend_days: int = Field(7, ge=1, le=365)
