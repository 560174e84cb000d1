"""
Endpoints de Empréstimos (Checkout).

Contratos:
    - POST /checkouts: Retira um livro (leitor autenticado)
    - GET /checkouts/my: Empréstimos abertos do leitor
    - PATCH /checkouts/{id}/return: Devolve livro (dono ou equipe)

Status codes:
    - 200: Sucesso
    - 201: Criado com sucesso
    - 400: Regra de negócio violada
    - 401: Não autenticado
    - 403: Empréstimo de outro leitor
    - 404: Livro ou empréstimo não encontrado
"""

from uuid import UUID

from fastapi import APIRouter, status

from circulation.core.deps import AppClock, CurrentUser, DbSession
from circulation.schemas.checkout import CheckoutCreate, CheckoutDetail, CheckoutReturn
from circulation.services.checkout import CheckoutService

router = APIRouter(prefix="/checkouts", tags=["Checkouts"])


@router.post(
    "",
    response_model=CheckoutDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Retirar livro",
    description="Cria um empréstimo. Prazo e limite dependem do tier do leitor.",
)
async def create_checkout(
    data: CheckoutCreate,
    db: DbSession,
    clock: AppClock,
    current_user: CurrentUser,
) -> CheckoutDetail:
    """
    Cria novo empréstimo para o leitor autenticado.

    Raises:
        400: Livro não elegível, empréstimo atrasado ou limite atingido
        404: Livro não encontrado
    """
    service = CheckoutService(db, clock)
    return await service.create_checkout(current_user, data.book_id)


@router.get(
    "/my",
    response_model=list[CheckoutDetail],
    summary="Meus empréstimos",
    description="Empréstimos abertos do leitor, com atraso e multa calculados agora.",
)
async def my_checkouts(
    db: DbSession,
    clock: AppClock,
    current_user: CurrentUser,
) -> list[CheckoutDetail]:
    service = CheckoutService(db, clock)
    return await service.get_user_checkouts(current_user.id)


@router.patch(
    "/{checkout_id}/return",
    response_model=CheckoutReturn,
    summary="Devolver livro",
    description="Devolve o livro e promove a lista de espera. Dono do empréstimo ou equipe.",
)
async def return_checkout(
    checkout_id: UUID,
    db: DbSession,
    clock: AppClock,
    current_user: CurrentUser,
) -> CheckoutReturn:
    """
    Processa devolução.

    Raises:
        400: Empréstimo já devolvido
        403: Empréstimo de outro leitor
        404: Empréstimo não encontrado
    """
    service = CheckoutService(db, clock)
    return await service.return_checkout(checkout_id, current_user)
