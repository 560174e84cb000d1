"""
Fixtures compartilhadas para testes.

Os testes usam SQLite em memória (aiosqlite) com um banco novo por teste.
O driver pysqlite precisa de ajuda para emitir BEGIN/SAVEPOINT corretamente;
sem isso as notificações (que rodam em SAVEPOINT) não funcionam.
"""

import uuid
from datetime import datetime
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import circulation.models  # noqa: F401  registra as tabelas no metadata
from circulation.core.security import create_access_token
from circulation.db.session import Base, get_db
from circulation.main import app
from circulation.models.book import Book
from circulation.models.enums import BookStatus, UserRole
from circulation.models.user import User
from circulation.services.clock import FixedClock

# Instante de referência dos testes (segunda-feira, 10h UTC)
T0 = datetime(2025, 1, 6, 10, 0)


# ==========================================
# Event loop configuration
# ==========================================

@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


# ==========================================
# Database fixtures
# ==========================================

def _enable_sqlite_transactions(engine) -> None:
    """Deixa o SQLAlchemy controlar BEGIN (necessário para SAVEPOINT)."""

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture
async def test_engine():
    """
    Engine de teste com SQLite em memória.

    StaticPool mantém uma única conexão, então todas as sessões do teste
    enxergam o mesmo banco.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    _enable_sqlite_transactions(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Sessão de banco para testes de service."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    """Relógio parado em T0; os testes avançam com ``clock.advance``."""
    return FixedClock(T0)


# ==========================================
# Factories
# ==========================================

@pytest.fixture
def make_user(db):
    """Cria leitores com a role informada."""

    async def _make_user(role: UserRole = UserRole.STANDARD, name: str | None = None) -> User:
        user = User(
            name=name or f"Leitor {uuid.uuid4().hex[:6]}",
            email=f"user_{uuid.uuid4().hex[:8]}@test.com",
            role=role,
        )
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest.fixture
def make_book(db):
    """Cadastra livros no acervo."""

    async def _make_book(
        title: str | None = None,
        status: BookStatus = BookStatus.AVAILABLE,
    ) -> Book:
        book = Book(
            title=title or f"Livro {uuid.uuid4().hex[:6]}",
            author="Autor de Teste",
            status=status,
        )
        db.add(book)
        await db.commit()
        return book

    return _make_book


# ==========================================
# HTTP Client fixtures
# ==========================================

@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Cliente HTTP assíncrono para testes.

    Substitui a dependency get_db para usar o banco de teste.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==========================================
# Auth fixtures
# ==========================================

@pytest.fixture
def auth_headers():
    """Headers Bearer para um usuário já cadastrado."""

    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers
