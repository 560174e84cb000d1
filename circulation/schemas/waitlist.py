"""
Schemas Pydantic para a lista de espera.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from circulation.models.enums import WaitlistStatus
from circulation.models.waitlist import WaitlistEntry
from circulation.schemas.base import BaseSchema


class WaitlistJoin(BaseSchema):
    """Schema para entrar na lista de espera."""
    book_id: UUID = Field(..., description="ID do livro")


class WaitlistEntryRead(BaseSchema):
    """Entrada na lista de espera com a posição atual na fila."""
    id: UUID
    book_id: UUID
    book_title: str
    status: WaitlistStatus
    position: int
    is_priority: bool
    queue_position: int | None
    notified_at: datetime | None
    expires_at: datetime | None
    created_at: datetime

    @classmethod
    def from_entry(
        cls,
        entry: WaitlistEntry,
        queue_position: int | None = None,
    ) -> "WaitlistEntryRead":
        return cls(
            id=entry.id,
            book_id=entry.book_id,
            book_title=entry.book.title,
            status=entry.status,
            position=entry.position,
            is_priority=entry.is_priority,
            queue_position=queue_position,
            notified_at=entry.notified_at,
            expires_at=entry.expires_at,
            created_at=entry.created_at,
        )


class ExpireEntriesResult(BaseSchema):
    """Resultado da expiração de ofertas vencidas."""
    processed: int
    message: str
