"""
Service de notificações (emissor + caixa de entrada do leitor).

A emissão é fire-and-forget: roda em um SAVEPOINT dentro da transação da
operação principal e, se falhar, apenas registra o erro. Uma falha de
notificação nunca desfaz um empréstimo, devolução ou transição de hold.
"""

from datetime import datetime
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.logging import get_logger
from circulation.models.enums import NotificationType
from circulation.models.notification import Notification
from circulation.repositories.notification import NotificationRepository

logger = get_logger(__name__)


def format_date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


def format_datetime(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M")


class NotificationTemplates:
    """Textos das notificações: cada método retorna (tipo, título, mensagem)."""

    @staticmethod
    def checkout_confirmed(book_title: str, due_date: datetime):
        return (
            NotificationType.CHECKOUT_CONFIRMED,
            "Empréstimo confirmado",
            f'Você retirou "{book_title}". Devolução até {format_date(due_date)}.',
        )

    @staticmethod
    def due_soon(book_title: str, days_left: int):
        if days_left == 0:
            when = "vence hoje"
        elif days_left == 1:
            when = "vence em 1 dia"
        else:
            when = f"vence em {days_left} dias"
        return (
            NotificationType.DUE_SOON,
            "Devolução próxima",
            f'"{book_title}" {when}. Devolva no prazo para evitar multa.',
        )

    @staticmethod
    def overdue(book_title: str):
        return (
            NotificationType.OVERDUE,
            "Empréstimo atrasado",
            f'"{book_title}" está atrasado. Devolva o quanto antes.',
        )

    @staticmethod
    def waitlist_joined(book_title: str, position: int):
        return (
            NotificationType.WAITLIST_JOINED,
            "Você entrou na lista de espera",
            f'Você é o #{position} na lista de espera de "{book_title}". '
            f"Avisaremos quando estiver disponível.",
        )

    @staticmethod
    def waitlist_available(book_title: str, claim_until: datetime):
        return (
            NotificationType.WAITLIST_AVAILABLE,
            "Livro disponível!",
            f'"{book_title}" está disponível para você. '
            f"Retire até {format_datetime(claim_until)} antes que seja oferecido ao próximo da fila.",
        )

    @staticmethod
    def waitlist_expired(book_title: str):
        return (
            NotificationType.WAITLIST_EXPIRED,
            "Prazo de retirada expirado",
            f'O prazo para retirar "{book_title}" terminou. '
            f"Verifique a disponibilidade ou entre novamente na lista de espera.",
        )

    @staticmethod
    def book_returned(book_title: str):
        return (
            NotificationType.BOOK_RETURNED,
            "Livro devolvido",
            f'A devolução de "{book_title}" foi registrada. Obrigado!',
        )


templates = NotificationTemplates()


class NotificationService:
    """Service para emissão e leitura de notificações."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notification_repo = NotificationRepository(db)

    async def create_notification(
        self,
        user_id: UUID,
        notification_type: NotificationType,
        title: str,
        message: str,
        book_id: UUID | None = None,
    ) -> Notification | None:
        """
        Persiste uma notificação sem nunca propagar erro.

        Returns:
            Notification criada, ou None se a gravação falhou
        """
        try:
            async with self.db.begin_nested():
                notification = Notification(
                    user_id=user_id,
                    book_id=book_id,
                    type=notification_type,
                    title=title,
                    message=message,
                    is_read=False,
                )
                self.db.add(notification)
        except Exception as e:
            logger.warning(
                f"Falha ao criar notificação {notification_type.value} "
                f"para usuário {user_id}: {e}"
            )
            return None
        return notification

    async def notify(self, user_id: UUID, template: tuple, book_id: UUID | None = None):
        """Atalho para emitir a partir de um template."""
        notification_type, title, message = template
        return await self.create_notification(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            book_id=book_id,
        )

    # ==========================================
    # Caixa de entrada
    # ==========================================

    async def list_notifications(
        self,
        user_id: UUID,
        unread_only: bool = False,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Notification], int, int]:
        """
        Lista notificações do leitor.

        Returns:
            Tupla (notificações, total, não lidas)
        """
        notifications, total = await self.notification_repo.list_by_user(
            user_id,
            unread_only=unread_only,
            page=page,
            page_size=page_size,
        )
        unread = await self.notification_repo.count_unread(user_id)
        return notifications, total, unread

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        """
        Marca uma notificação como lida.

        Raises:
            HTTPException 404: Notificação não encontrada
            HTTPException 403: Notificação de outro leitor
        """
        notification = await self.notification_repo.get_by_id(notification_id)
        if not notification:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Notificação não encontrada",
            )
        if notification.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Esta notificação não pertence a você",
            )

        notification.is_read = True
        await self.db.commit()
        return notification

    async def mark_all_read(self, user_id: UUID) -> int:
        """Marca todas as notificações do leitor como lidas."""
        count = await self.notification_repo.mark_all_read(user_id)
        await self.db.commit()
        return count
