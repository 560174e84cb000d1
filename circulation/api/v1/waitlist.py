"""
Endpoints da lista de espera.

Contratos:
    - POST /waitlist: Entra na fila de um livro indisponível
    - DELETE /waitlist/{book_id}: Sai da fila
    - GET /waitlist/my: Entradas abertas do leitor
    - POST /waitlist/expire: Expira ofertas vencidas (equipe)
"""

from uuid import UUID

from fastapi import APIRouter, status

from circulation.core.deps import AppClock, CurrentUser, DbSession, StaffUser
from circulation.schemas.base import MessageResponse
from circulation.schemas.waitlist import ExpireEntriesResult, WaitlistEntryRead, WaitlistJoin
from circulation.services.waitlist import WaitlistService

router = APIRouter(prefix="/waitlist", tags=["Waitlist"])


@router.post(
    "",
    response_model=WaitlistEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Entrar na lista de espera",
)
async def join_waitlist(
    data: WaitlistJoin,
    db: DbSession,
    clock: AppClock,
    current_user: CurrentUser,
) -> WaitlistEntryRead:
    """
    Coloca o leitor na fila do livro.

    Raises:
        400: Livro disponível/inativo ou leitor já na fila
        404: Livro não encontrado
    """
    service = WaitlistService(db, clock)
    return await service.join(current_user, data.book_id)


@router.get(
    "/my",
    response_model=list[WaitlistEntryRead],
    summary="Minhas filas",
)
async def my_waitlist(
    db: DbSession,
    clock: AppClock,
    current_user: CurrentUser,
) -> list[WaitlistEntryRead]:
    service = WaitlistService(db, clock)
    return await service.get_user_entries(current_user.id)


@router.post(
    "/expire",
    response_model=ExpireEntriesResult,
    summary="Expirar ofertas vencidas",
    description="Marca como EXPIRED as ofertas não retiradas no prazo. **Requer LIBRARIAN ou ADMIN.**",
)
async def expire_waitlist(
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
) -> ExpireEntriesResult:
    service = WaitlistService(db, clock)
    return await service.expire_entries()


@router.delete(
    "/{book_id}",
    response_model=MessageResponse,
    summary="Sair da lista de espera",
)
async def leave_waitlist(
    book_id: UUID,
    db: DbSession,
    clock: AppClock,
    current_user: CurrentUser,
) -> MessageResponse:
    """
    Raises:
        404: Leitor não está na fila do livro
    """
    service = WaitlistService(db, clock)
    await service.leave(current_user, book_id)
    return MessageResponse(message="Você saiu da lista de espera")
