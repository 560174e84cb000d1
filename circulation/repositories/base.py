"""
Repository base com operações CRUD genéricas.

Os repositories nunca fazem commit: apenas ``flush``. A transação pertence
ao service, que faz commit uma única vez ao final de cada operação.
"""

from typing import Any, Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.db.session import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Repository base com operações CRUD.

    Fornece métodos genéricos para:
    - get_by_id: Buscar por ID
    - create: Criar registro
    - update: Atualizar registro
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def get_by_id(self, id: UUID) -> ModelType | None:
        """Busca registro por ID."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> ModelType:
        """Cria novo registro (flush, sem commit)."""
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.flush()
        return instance

    async def update(
        self,
        instance: ModelType,
        **kwargs: Any,
    ) -> ModelType:
        """
        Atualiza registro existente.

        Diferente de um PATCH parcial, valores None são aplicados: as
        transições de estado precisam limpar colunas (hold_until, returned_at).
        """
        for key, value in kwargs.items():
            setattr(instance, key, value)
        await self.db.flush()
        return instance
