"""
Model de empréstimo (checkout) de livros.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from circulation.db.session import Base
from circulation.models.base import UUIDMixin, TimestampMixin
from circulation.models.enums import CheckoutStatus, OPEN_CHECKOUT_STATUSES

if TYPE_CHECKING:
    from circulation.models.user import User
    from circulation.models.book import Book


class Checkout(Base, UUIDMixin, TimestampMixin):
    """
    Empréstimo de um livro para um leitor.

    Regras de negócio:
        - Prazo depende do tier (standard: 14 dias, premium/staff: 17 dias)
        - Multa por atraso: $0,25/dia, calculada sob demanda
        - Nunca é removido; termina com status RETURNED

    Invariante: returned_at preenchido se e somente se status é RETURNED.

    Attributes:
        id: UUID único do empréstimo
        user_id: FK para o leitor
        book_id: FK para o livro
        status: ACTIVE, OVERDUE ou RETURNED
        checked_out_at: Data/hora do empréstimo
        due_date: Data de devolução prevista
        returned_at: Data/hora da devolução efetiva
    """
    __tablename__ = "checkouts"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("books.id", ondelete="RESTRICT"),
        nullable=False,
    )
    status: Mapped[CheckoutStatus] = mapped_column(
        SQLEnum(CheckoutStatus, name="checkout_status"),
        nullable=False,
        default=CheckoutStatus.ACTIVE,
    )
    checked_out_at: Mapped[datetime] = mapped_column(
        DateTime(),
        nullable=False,
    )
    due_date: Mapped[datetime] = mapped_column(
        DateTime(),
        nullable=False,
    )
    returned_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(),
        nullable=True,
    )

    # Relationships
    user: Mapped["User"] = relationship("User", lazy="selectin")
    book: Mapped["Book"] = relationship("Book", lazy="selectin")

    __table_args__ = (
        Index("ix_checkouts_user_status", "user_id", "status"),
        Index("ix_checkouts_book_status", "book_id", "status"),
        Index("ix_checkouts_status_due_date", "status", "due_date"),
    )

    def __repr__(self) -> str:
        return f"<Checkout {self.id} - {self.status.value}>"

    @property
    def is_open(self) -> bool:
        """Retorna True se o empréstimo ainda não foi devolvido."""
        return self.status in OPEN_CHECKOUT_STATUSES
