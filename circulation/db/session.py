"""
Engine e sessões async do SQLAlchemy.

Regra de transação da aplicação: repositórios só fazem ``flush``; quem
faz ``commit``/``rollback`` são os services, uma vez por operação (ou uma
vez por entidade nas varreduras em lote).
"""

from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from circulation.core.config import get_settings

settings = get_settings()


def engine_options(database_url: str) -> dict[str, Any]:
    """Pool configurado só para PostgreSQL; SQLite local fica com o padrão."""
    if make_url(database_url).get_backend_name() == "sqlite":
        return {}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **engine_options(settings.DATABASE_URL),
)

# expire_on_commit=False: objetos continuam legíveis após o commit do service
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Base declarativa dos models."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency: uma sessão por request, compartilhada com o relógio."""
    async with async_session_factory() as session:
        yield session


async def check_database_connection() -> tuple[bool, str | None]:
    """
    Executa ``SELECT 1`` no banco.

    Returns:
        Tupla (sucesso, mensagem_erro)
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        return False, str(e)
    return True, None
