"""
Schemas Pydantic para a simulação de datas e os auto-returns.
"""

from datetime import datetime
from uuid import UUID

from circulation.models.enums import CheckoutStatus
from circulation.schemas.base import BaseSchema


class SimulatedDateStatus(BaseSchema):
    """Estado do relógio."""
    simulated_date: datetime | None
    is_simulating: bool
    real_date: datetime


class SimulatedDateSet(BaseSchema):
    """Define a data simulada (null volta ao relógio real)."""
    date: str | None = None


class SimulatedDateResult(BaseSchema):
    """Resultado de avançar (ou recuar) o relógio simulado."""
    simulated_date: datetime | None
    is_simulating: bool
    notifications_generated: int = 0
    auto_returns_processed: int = 0
    auto_returns_reverted: int = 0
    notifications_deleted: int = 0


class SimulationClearResult(BaseSchema):
    """Resultado de desfazer a simulação."""
    notifications_deleted: int
    auto_returns_reverted: int


class AutoReturnConfigCreate(BaseSchema):
    """Agenda a devolução automática de um empréstimo."""
    checkout_id: UUID
    return_date: datetime


class AutoReturnConfigRead(BaseSchema):
    """
    Configuração de auto-return enriquecida com o estado do empréstimo.

    checkout_status/due_date/book_title ficam None se o empréstimo
    não existe mais.
    """
    checkout_id: UUID
    book_id: UUID
    return_date: datetime
    original_status: CheckoutStatus
    checkout_status: CheckoutStatus | None = None
    due_date: datetime | None = None
    book_title: str | None = None


class AutoReturnConfigList(BaseSchema):
    configs: list[AutoReturnConfigRead]
