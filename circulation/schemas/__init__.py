"""
Schemas Pydantic da aplicação.
"""

from circulation.schemas.base import (
    BaseSchema,
    MessageResponse,
    PaginatedResponse,
    TimestampSchema,
)
from circulation.schemas.health import HealthResponse
from circulation.schemas.book import (
    BookCreate,
    BookDetail,
    BookRead,
    BookStatusUpdate,
    HoldEndDates,
    HoldProcessResult,
)
from circulation.schemas.checkout import (
    AdminCheckoutAction,
    CheckoutCreate,
    CheckoutDetail,
    CheckoutReturn,
)
from circulation.schemas.waitlist import (
    ExpireEntriesResult,
    WaitlistEntryRead,
    WaitlistJoin,
)
from circulation.schemas.notification import (
    NotificationList,
    NotificationRead,
    ReadAllResponse,
)
from circulation.schemas.simulation import (
    AutoReturnConfigCreate,
    AutoReturnConfigList,
    AutoReturnConfigRead,
    SimulatedDateResult,
    SimulatedDateSet,
    SimulatedDateStatus,
    SimulationClearResult,
)
from circulation.schemas.dashboard import DashboardSummary

__all__ = [
    # Base
    "BaseSchema",
    "MessageResponse",
    "PaginatedResponse",
    "TimestampSchema",
    # Health
    "HealthResponse",
    # Book
    "BookCreate",
    "BookDetail",
    "BookRead",
    "BookStatusUpdate",
    "HoldEndDates",
    "HoldProcessResult",
    # Checkout
    "AdminCheckoutAction",
    "CheckoutCreate",
    "CheckoutDetail",
    "CheckoutReturn",
    # Waitlist
    "ExpireEntriesResult",
    "WaitlistEntryRead",
    "WaitlistJoin",
    # Notification
    "NotificationList",
    "NotificationRead",
    "ReadAllResponse",
    # Simulation
    "AutoReturnConfigCreate",
    "AutoReturnConfigList",
    "AutoReturnConfigRead",
    "SimulatedDateResult",
    "SimulatedDateSet",
    "SimulatedDateStatus",
    "SimulationClearResult",
    # Dashboard
    "DashboardSummary",
]
