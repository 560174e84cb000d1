"""
Enums utilizados nos models da aplicação.
"""

import enum


class UserRole(str, enum.Enum):
    """
    Roles de usuário no sistema.

    A role também define o tier do leitor (ver core.policy).
    """
    STANDARD = "standard"
    PREMIUM = "premium"
    LIBRARIAN = "librarian"
    ADMIN = "admin"


class BookStatus(str, enum.Enum):
    """
    Status de um livro no ciclo de vida de circulação.

    Fluxo típico:
        AVAILABLE -> CHECKED_OUT -> AVAILABLE (sem fila)
        CHECKED_OUT -> ON_HOLD_PREMIUM -> ON_HOLD_WAITLIST -> AVAILABLE
        qualquer -> INACTIVE (ação administrativa)
    """
    AVAILABLE = "available"
    CHECKED_OUT = "checked_out"
    ON_HOLD_PREMIUM = "on_hold_premium"
    ON_HOLD_WAITLIST = "on_hold_waitlist"
    INACTIVE = "inactive"


HOLD_STATUSES = (BookStatus.ON_HOLD_PREMIUM, BookStatus.ON_HOLD_WAITLIST)


class CheckoutStatus(str, enum.Enum):
    """Status de um empréstimo."""
    ACTIVE = "active"
    OVERDUE = "overdue"
    RETURNED = "returned"


OPEN_CHECKOUT_STATUSES = (CheckoutStatus.ACTIVE, CheckoutStatus.OVERDUE)


class WaitlistStatus(str, enum.Enum):
    """
    Status de uma entrada na lista de espera.

    Fluxo típico:
        WAITING -> NOTIFIED -> CLAIMED (retirou o livro)
        WAITING -> NOTIFIED -> EXPIRED (não retirou a tempo)
        NOTIFIED -> WAITING (revertido pela simulação ou por outro leitor)
        WAITING/NOTIFIED -> CANCELLED (saiu da fila)
    """
    WAITING = "waiting"
    NOTIFIED = "notified"
    CLAIMED = "claimed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


OPEN_WAITLIST_STATUSES = (WaitlistStatus.WAITING, WaitlistStatus.NOTIFIED)


class NotificationType(str, enum.Enum):
    """Tipos de notificação emitidos pelo motor de circulação."""
    CHECKOUT_CONFIRMED = "checkout_confirmed"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    WAITLIST_JOINED = "waitlist_joined"
    WAITLIST_AVAILABLE = "waitlist_available"
    WAITLIST_EXPIRED = "waitlist_expired"
    BOOK_RETURNED = "book_returned"


# Tipos gerados (e removidos) pela simulação de datas
SIMULATED_NOTIFICATION_TYPES = (
    NotificationType.DUE_SOON,
    NotificationType.OVERDUE,
    NotificationType.BOOK_RETURNED,
    NotificationType.WAITLIST_AVAILABLE,
)
