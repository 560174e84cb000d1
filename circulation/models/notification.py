"""
Model de notificação para o leitor.
"""

import uuid
from typing import Optional

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from circulation.db.session import Base
from circulation.models.base import UUIDMixin, TimestampMixin
from circulation.models.enums import NotificationType


class Notification(Base, UUIDMixin, TimestampMixin):
    """
    Registro de um evento exibido ao leitor.

    Só é criada como efeito colateral de transições; é removida em massa
    apenas quando a simulação de datas é desfeita.

    Attributes:
        id: UUID único
        user_id: FK para o destinatário
        book_id: Livro relacionado (opcional)
        type: Tipo do evento
        title: Título curto
        message: Texto exibido
        is_read: Marcada como lida pelo leitor
    """
    __tablename__ = "notifications"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    book_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("books.id", ondelete="SET NULL"),
        nullable=True,
    )
    type: Mapped[NotificationType] = mapped_column(
        SQLEnum(NotificationType, name="notification_type"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        # Verificação de existência (idempotência da simulação)
        Index("ix_notifications_user_book_type", "user_id", "book_id", "type"),
        Index("ix_notifications_type_created", "type", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification {self.type.value} -> {self.user_id}>"
