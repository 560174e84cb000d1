"""
Módulo de repositórios - acesso a dados.
"""

from circulation.repositories.base import BaseRepository
from circulation.repositories.user import UserRepository
from circulation.repositories.book import BookRepository
from circulation.repositories.checkout import CheckoutRepository
from circulation.repositories.waitlist import WaitlistRepository
from circulation.repositories.notification import NotificationRepository
from circulation.repositories.system_setting import SystemSettingRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "BookRepository",
    "CheckoutRepository",
    "WaitlistRepository",
    "NotificationRepository",
    "SystemSettingRepository",
]
