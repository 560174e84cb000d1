"""
Schemas Pydantic para Notification.
"""

from datetime import datetime
from uuid import UUID

from circulation.models.enums import NotificationType
from circulation.schemas.base import BaseSchema, PaginatedResponse


class NotificationRead(BaseSchema):
    """Schema para leitura de notificação."""
    id: UUID
    type: NotificationType
    title: str
    message: str
    book_id: UUID | None
    is_read: bool
    created_at: datetime


class NotificationList(PaginatedResponse[NotificationRead]):
    """Página de notificações com o total de não lidas."""
    unread_count: int


class ReadAllResponse(BaseSchema):
    """Resposta de marcar todas como lidas."""
    updated: int
