"""
Schemas base da API.

Campos Python ficam em snake_case; o JSON sai em camelCase
(``dueDate``, ``isSimulating``) e as entradas aceitam as duas formas.
"""

from datetime import datetime
from math import ceil
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TimestampSchema(BaseSchema):
    """Campos created_at/updated_at dos models com TimestampMixin."""
    created_at: datetime
    updated_at: datetime


class PaginatedResponse(BaseSchema, Generic[T]):
    """
    Página de resultados.

    Uso:
        @router.get("/checkouts", response_model=PaginatedResponse[CheckoutDetail])
    """
    items: List[T]
    total: int
    page: int
    page_size: int
    pages: int

    @classmethod
    def create(cls, items: List[T], total: int, page: int, page_size: int):
        return cls(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            pages=ceil(total / page_size) if page_size else 0,
        )


class MessageResponse(BaseSchema):
    """Resposta com uma mensagem para o usuário."""
    message: str
