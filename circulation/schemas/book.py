"""
Schemas Pydantic para Book.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from circulation.models.enums import BookStatus
from circulation.schemas.base import BaseSchema, TimestampSchema


class BookCreate(BaseSchema):
    """Schema para cadastro de livro no acervo."""
    title: str = Field(..., min_length=1, max_length=500, examples=["Dom Casmurro"])
    author: str = Field(..., min_length=1, max_length=255, examples=["Machado de Assis"])
    isbn: str | None = Field(None, max_length=20, examples=["9788535910667"])


class BookStatusUpdate(BaseSchema):
    """Ativa (``available``) ou desativa (``inactive``) um livro."""
    active: bool


class BookRead(TimestampSchema):
    """Schema para leitura de livro."""
    id: UUID
    title: str
    author: str
    isbn: str | None
    status: BookStatus
    hold_until: datetime | None


class HoldEndDates(BaseSchema):
    """
    Fim de cada fase do hold atual.

    premium_ends é None quando o livro já está na fase de lista de espera.
    """
    premium_ends: datetime | None
    waitlist_ends: datetime


class BookDetail(BookRead):
    """
    Livro com a visão do leitor autenticado.

    Campos:
        can_checkout: Leitor pode retirar o livro agora
        reason: Motivo quando não pode
        waitlist_count: Entradas abertas na fila
        waitlist_position: Posição do leitor na fila (se estiver nela)
        hold_ends: Fim das fases de hold (se o livro estiver em hold)
    """
    can_checkout: bool
    reason: str | None = None
    waitlist_count: int
    waitlist_position: int | None = None
    hold_ends: HoldEndDates | None = None


class HoldProcessResult(BaseSchema):
    """Contagem das transições aplicadas em uma varredura de holds."""
    premium_to_waitlist: int = 0
    premium_to_available: int = 0
    waitlist_to_available: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return (
            self.premium_to_waitlist
            + self.premium_to_available
            + self.waitlist_to_available
        )
