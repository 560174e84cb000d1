"""
Endpoint do dashboard do leitor.

Carregar o dashboard aplica as transições de hold vencidas e expira as
ofertas da lista de espera antes de montar o resumo.
"""

from fastapi import APIRouter

from circulation.core.deps import AppClock, CurrentUser, DbSession
from circulation.schemas.dashboard import DashboardSummary
from circulation.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get(
    "",
    response_model=DashboardSummary,
    summary="Resumo do leitor",
)
async def get_dashboard(
    db: DbSession,
    clock: AppClock,
    current_user: CurrentUser,
) -> DashboardSummary:
    service = DashboardService(db, clock)
    return await service.get_summary(current_user)
