"""
Router principal da API v1.

Inclui todos os routers de endpoints.
"""

from fastapi import APIRouter

from circulation.api.v1.admin import router as admin_router
from circulation.api.v1.books import router as books_router
from circulation.api.v1.checkouts import router as checkouts_router
from circulation.api.v1.dashboard import router as dashboard_router
from circulation.api.v1.notifications import router as notifications_router
from circulation.api.v1.waitlist import router as waitlist_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(books_router)
api_router.include_router(checkouts_router)
api_router.include_router(waitlist_router)
api_router.include_router(notifications_router)
api_router.include_router(dashboard_router)
api_router.include_router(admin_router)
