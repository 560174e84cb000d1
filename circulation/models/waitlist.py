"""
Model de entrada na lista de espera de um livro.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from circulation.db.session import Base
from circulation.models.base import UUIDMixin, TimestampMixin
from circulation.models.enums import WaitlistStatus, OPEN_WAITLIST_STATUSES

if TYPE_CHECKING:
    from circulation.models.user import User
    from circulation.models.book import Book


class WaitlistEntry(Base, UUIDMixin, TimestampMixin):
    """
    Entrada de um leitor na fila de um livro indisponível.

    Ordenação da fila (para um mesmo livro):
        1. is_priority = True antes de is_priority = False
        2. Dentro da mesma classe, menor position primeiro

    Attributes:
        id: UUID único da entrada
        book_id: FK para o livro
        user_id: FK para o leitor
        status: WAITING, NOTIFIED, CLAIMED, EXPIRED ou CANCELLED
        position: Ordem de chegada entre as entradas do livro
        is_priority: Leitor premium/librarian/admin no momento da entrada
        notified_at: Quando o livro foi oferecido ao leitor
        expires_at: Prazo para retirar o livro após a oferta
    """
    __tablename__ = "waitlist_entries"

    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[WaitlistStatus] = mapped_column(
        SQLEnum(WaitlistStatus, name="waitlist_status"),
        nullable=False,
        default=WaitlistStatus.WAITING,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    is_priority: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    notified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(),
        nullable=True,
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(),
        nullable=True,
    )

    # Relationships
    user: Mapped["User"] = relationship("User", lazy="selectin")
    book: Mapped["Book"] = relationship("Book", lazy="selectin")

    __table_args__ = (
        # Fila ordenada de um livro
        Index(
            "ix_waitlist_book_rank",
            "book_id",
            "status",
            "is_priority",
            "position",
        ),
        Index("ix_waitlist_user_status", "user_id", "status"),
        # Ofertas que podem expirar
        Index("ix_waitlist_status_expires", "status", "expires_at"),
    )

    def __repr__(self) -> str:
        return f"<WaitlistEntry {self.id} - {self.status.value} #{self.position}>"

    @property
    def is_open(self) -> bool:
        """Retorna True se a entrada ainda está na fila (WAITING ou NOTIFIED)."""
        return self.status in OPEN_WAITLIST_STATUSES
