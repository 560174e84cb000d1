"""
Endpoints administrativos (equipe da biblioteca).

Contratos:
    - GET /admin/simulated-date: Estado do relógio
    - POST /admin/simulated-date: Move o relógio simulado (null = limpar)
    - DELETE /admin/simulated-date: Volta ao relógio real e desfaz a simulação
    - GET/POST/DELETE /admin/auto-returns: Devoluções automáticas agendadas
    - GET /admin/checkouts: Lista empréstimos
    - PATCH /admin/checkouts/{id}: Ações manuais (return, extend, mark_overdue)

Autorização:
    - Todos os endpoints requerem LIBRARIAN ou ADMIN

Status codes:
    - 200: Sucesso
    - 400: Data inválida ou ação não permitida
    - 401: Não autenticado
    - 403: Sem permissão
    - 404: Empréstimo não encontrado
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from circulation.core.dates import parse_instant
from circulation.core.deps import AppClock, DbSession, StaffUser
from circulation.models.enums import CheckoutStatus
from circulation.schemas.base import MessageResponse, PaginatedResponse
from circulation.schemas.checkout import AdminCheckoutAction, CheckoutDetail
from circulation.schemas.simulation import (
    AutoReturnConfigCreate,
    AutoReturnConfigList,
    AutoReturnConfigRead,
    SimulatedDateResult,
    SimulatedDateSet,
    SimulatedDateStatus,
    SimulationClearResult,
)
from circulation.services.checkout import CheckoutService
from circulation.services.simulation import SimulationService

router = APIRouter(prefix="/admin", tags=["Admin"])


# ==========================================
# Simulated date
# ==========================================

@router.get(
    "/simulated-date",
    response_model=SimulatedDateStatus,
    summary="Estado do relógio",
)
async def get_simulated_date(
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
) -> SimulatedDateStatus:
    service = SimulationService(db, clock)
    return await service.get_status()


@router.post(
    "/simulated-date",
    response_model=SimulatedDateResult,
    summary="Definir data simulada",
    description=(
        "Move o relógio e reaplica avisos, atrasos, auto-returns e transições de hold. "
        "``date: null`` volta ao relógio real. **Requer LIBRARIAN ou ADMIN.**"
    ),
)
async def set_simulated_date(
    data: SimulatedDateSet,
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
) -> SimulatedDateResult:
    """
    Raises:
        400: Data em formato inválido
    """
    instant = None
    if data.date:
        try:
            instant = parse_instant(data.date)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Formato de data inválido (use ISO 8601)",
            )

    service = SimulationService(db, clock)
    return await service.set_date(instant, staff)


@router.delete(
    "/simulated-date",
    response_model=SimulationClearResult,
    summary="Limpar simulação",
    description=(
        "Volta ao relógio real, reverte auto-returns e atrasos e remove as "
        "notificações geradas na janela simulada. **Requer LIBRARIAN ou ADMIN.**"
    ),
)
async def clear_simulated_date(
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
) -> SimulationClearResult:
    service = SimulationService(db, clock)
    return await service.clear(staff)


# ==========================================
# Auto-returns
# ==========================================

@router.get(
    "/auto-returns",
    response_model=AutoReturnConfigList,
    summary="Listar auto-returns",
)
async def list_auto_returns(
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
) -> AutoReturnConfigList:
    service = SimulationService(db, clock)
    return AutoReturnConfigList(configs=await service.list_configs())


@router.post(
    "/auto-returns",
    response_model=AutoReturnConfigRead,
    summary="Agendar auto-return",
)
async def upsert_auto_return(
    data: AutoReturnConfigCreate,
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
) -> AutoReturnConfigRead:
    """
    Raises:
        400: Empréstimo já devolvido
        404: Empréstimo não encontrado
    """
    service = SimulationService(db, clock)
    return await service.upsert_config(data.checkout_id, data.return_date, staff)


@router.delete(
    "/auto-returns",
    response_model=MessageResponse,
    summary="Remover auto-return",
)
async def delete_auto_return(
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
    checkout_id: UUID = Query(..., description="Empréstimo agendado"),
) -> MessageResponse:
    service = SimulationService(db, clock)
    await service.remove_config(checkout_id, staff)
    return MessageResponse(message="Auto-return removido")


# ==========================================
# Checkouts
# ==========================================

@router.get(
    "/checkouts",
    response_model=PaginatedResponse[CheckoutDetail],
    summary="Listar empréstimos",
)
async def list_checkouts(
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
    status_filter: CheckoutStatus | None = Query(None, alias="status", description="Filtrar por status"),
    user_id: UUID | None = Query(None, description="Filtrar por leitor"),
    book_id: UUID | None = Query(None, description="Filtrar por livro"),
    page: int = Query(1, ge=1, description="Número da página"),
    page_size: int = Query(20, ge=1, le=100, description="Itens por página"),
) -> PaginatedResponse[CheckoutDetail]:
    service = CheckoutService(db, clock)
    items, total = await service.list_checkouts(
        status_filter=status_filter,
        user_id=user_id,
        book_id=book_id,
        page=page,
        page_size=page_size,
    )
    return PaginatedResponse.create(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
    )


@router.patch(
    "/checkouts/{checkout_id}",
    response_model=CheckoutDetail,
    summary="Ação manual sobre empréstimo",
    description="``return``, ``extend`` (extend_days, padrão 7) ou ``mark_overdue``.",
)
async def update_checkout(
    checkout_id: UUID,
    data: AdminCheckoutAction,
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
) -> CheckoutDetail:
    service = CheckoutService(db, clock)
    return await service.admin_action(
        checkout_id,
        data.action,
        staff,
        extend_days=data.extend_days,
    )
