"""
Services da aplicação - regras de negócio do ciclo de vida dos livros.
"""

from circulation.services.clock import Clock, FixedClock, SettingsClock
from circulation.services.notification import NotificationService
from circulation.services.waitlist import WaitlistService
from circulation.services.hold import HoldService
from circulation.services.checkout import CheckoutService
from circulation.services.book import BookService
from circulation.services.simulation import SimulationService
from circulation.services.dashboard import DashboardService

__all__ = [
    "Clock",
    "FixedClock",
    "SettingsClock",
    "NotificationService",
    "WaitlistService",
    "HoldService",
    "CheckoutService",
    "BookService",
    "SimulationService",
    "DashboardService",
]
