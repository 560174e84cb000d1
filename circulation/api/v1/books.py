"""
Endpoints do acervo (Book).

Contratos:
    - GET /books: Lista livros com filtros
    - GET /books/{id}: Detalhe do livro (aplica transição de hold vencida)
    - POST /books: Cadastra livro (equipe)
    - PATCH /books/{id}/status: Ativa/desativa livro (equipe)

Status codes:
    - 200: Sucesso
    - 201: Criado com sucesso
    - 401: Não autenticado
    - 403: Sem permissão
    - 404: Livro não encontrado
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from circulation.core.deps import AppClock, CurrentUser, DbSession, StaffUser
from circulation.models.enums import BookStatus
from circulation.schemas.base import PaginatedResponse
from circulation.schemas.book import BookCreate, BookDetail, BookRead, BookStatusUpdate
from circulation.services.book import BookService

router = APIRouter(prefix="/books", tags=["Books"])


@router.get(
    "",
    response_model=PaginatedResponse[BookRead],
    summary="Listar livros",
)
async def list_books(
    db: DbSession,
    clock: AppClock,
    current_user: CurrentUser,
    q: str | None = Query(None, description="Busca por título ou autor"),
    status_filter: BookStatus | None = Query(None, alias="status", description="Filtrar por status"),
    page: int = Query(1, ge=1, description="Número da página"),
    page_size: int = Query(20, ge=1, le=100, description="Itens por página"),
) -> PaginatedResponse[BookRead]:
    service = BookService(db, clock)
    books, total = await service.list_books(
        query=q,
        status_filter=status_filter,
        page=page,
        page_size=page_size,
    )
    return PaginatedResponse.create(
        items=[BookRead.model_validate(book) for book in books],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/{book_id}",
    response_model=BookDetail,
    summary="Detalhe do livro",
    description="Aplica a transição de hold vencida e informa se o leitor pode retirar o livro.",
)
async def get_book(
    book_id: UUID,
    db: DbSession,
    clock: AppClock,
    current_user: CurrentUser,
) -> BookDetail:
    service = BookService(db, clock)
    return await service.get_book_detail(book_id, current_user)


@router.post(
    "",
    response_model=BookRead,
    status_code=status.HTTP_201_CREATED,
    summary="Cadastrar livro",
    description="Cadastra um livro no acervo. **Requer LIBRARIAN ou ADMIN.**",
)
async def create_book(
    data: BookCreate,
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
) -> BookRead:
    service = BookService(db, clock)
    book = await service.create_book(data)
    return BookRead.model_validate(book)


@router.patch(
    "/{book_id}/status",
    response_model=BookRead,
    summary="Ativar/desativar livro",
    description="Tira o livro de circulação ou o devolve a ela. **Requer LIBRARIAN ou ADMIN.**",
)
async def update_book_status(
    book_id: UUID,
    data: BookStatusUpdate,
    db: DbSession,
    clock: AppClock,
    staff: StaffUser,
) -> BookRead:
    service = BookService(db, clock)
    book = await service.set_active(book_id, data.active)
    return BookRead.model_validate(book)
