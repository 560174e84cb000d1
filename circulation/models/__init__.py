"""
Models SQLAlchemy da aplicação.

Importar todos os models aqui para que o Alembic detecte as mudanças.
"""

from circulation.models.enums import (
    UserRole,
    BookStatus,
    CheckoutStatus,
    WaitlistStatus,
    NotificationType,
)
from circulation.models.user import User
from circulation.models.book import Book
from circulation.models.checkout import Checkout
from circulation.models.waitlist import WaitlistEntry
from circulation.models.notification import Notification
from circulation.models.system_setting import SystemSetting

__all__ = [
    "UserRole",
    "BookStatus",
    "CheckoutStatus",
    "WaitlistStatus",
    "NotificationType",
    "User",
    "Book",
    "Checkout",
    "WaitlistEntry",
    "Notification",
    "SystemSetting",
]
