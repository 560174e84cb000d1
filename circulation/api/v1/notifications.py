"""
Endpoints da caixa de notificações do leitor.

Contratos:
    - GET /notifications: Lista notificações (mais recentes primeiro)
    - PATCH /notifications/{id}/read: Marca como lida
    - POST /notifications/read-all: Marca todas como lidas
"""

from uuid import UUID

from fastapi import APIRouter, Query

from circulation.core.deps import CurrentUser, DbSession
from circulation.schemas.notification import NotificationList, NotificationRead, ReadAllResponse
from circulation.services.notification import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=NotificationList,
    summary="Listar notificações",
)
async def list_notifications(
    db: DbSession,
    current_user: CurrentUser,
    unread_only: bool = Query(False, description="Apenas não lidas"),
    page: int = Query(1, ge=1, description="Número da página"),
    page_size: int = Query(20, ge=1, le=100, description="Itens por página"),
) -> NotificationList:
    service = NotificationService(db)
    notifications, total, unread = await service.list_notifications(
        current_user.id,
        unread_only=unread_only,
        page=page,
        page_size=page_size,
    )
    pages = (total + page_size - 1) // page_size
    return NotificationList(
        items=[NotificationRead.model_validate(n) for n in notifications],
        total=total,
        page=page,
        page_size=page_size,
        pages=pages,
        unread_count=unread,
    )


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationRead,
    summary="Marcar como lida",
)
async def mark_notification_read(
    notification_id: UUID,
    db: DbSession,
    current_user: CurrentUser,
) -> NotificationRead:
    service = NotificationService(db)
    notification = await service.mark_read(notification_id, current_user.id)
    return NotificationRead.model_validate(notification)


@router.post(
    "/read-all",
    response_model=ReadAllResponse,
    summary="Marcar todas como lidas",
)
async def mark_all_read(
    db: DbSession,
    current_user: CurrentUser,
) -> ReadAllResponse:
    service = NotificationService(db)
    updated = await service.mark_all_read(current_user.id)
    return ReadAllResponse(updated=updated)
