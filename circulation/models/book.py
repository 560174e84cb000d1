"""
Model de livro do acervo.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from circulation.db.session import Base
from circulation.models.base import UUIDMixin, TimestampMixin
from circulation.models.enums import BookStatus, HOLD_STATUSES


class Book(Base, UUIDMixin, TimestampMixin):
    """
    Livro do acervo e seu estado de circulação.

    Invariantes:
        - hold_until preenchido se e somente se status é ON_HOLD_PREMIUM
          ou ON_HOLD_WAITLIST
        - no máximo um empréstimo não devolvido por livro

    Attributes:
        id: UUID único do livro
        title: Título
        author: Nome do autor
        isbn: ISBN (opcional)
        status: Estado no ciclo de vida
        hold_until: Fim da fase de hold atual
    """
    __tablename__ = "books"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    status: Mapped[BookStatus] = mapped_column(
        SQLEnum(BookStatus, name="book_status"),
        nullable=False,
        default=BookStatus.AVAILABLE,
    )
    hold_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(),
        nullable=True,
    )

    __table_args__ = (
        # Varredura lazy de holds vencidos
        Index("ix_books_status_hold_until", "status", "hold_until"),
    )

    def __repr__(self) -> str:
        return f"<Book {self.title} - {self.status.value}>"

    @property
    def is_on_hold(self) -> bool:
        """Retorna True se o livro está em alguma fase de hold."""
        return self.status in HOLD_STATUSES
