"""
Script de seed para criar dados de demonstração no banco.

Uso:
    python -m circulation.db.seed

Cria um leitor por tier (standard, premium, librarian, admin) e alguns
livros, e imprime um bearer token de desenvolvimento para cada leitor.
A autenticação real é feita por um serviço externo.
"""

import asyncio
import logging

from circulation.core.config import get_settings
from circulation.core.logging import get_logger
from circulation.core.security import create_access_token
from circulation.db.session import async_session_factory
from circulation.models.book import Book
from circulation.models.enums import BookStatus, UserRole
from circulation.models.user import User
from circulation.repositories.book import BookRepository
from circulation.repositories.user import UserRepository

logger = get_logger(__name__)
settings = get_settings()

DEMO_USERS = [
    ("Administrador", settings.ADMIN_EMAIL, UserRole.ADMIN),
    ("Bibliotecária", "librarian@circulation.dev", UserRole.LIBRARIAN),
    ("Leitora Premium", "premium@circulation.dev", UserRole.PREMIUM),
    ("Leitor Standard", "standard@circulation.dev", UserRole.STANDARD),
]

DEMO_BOOKS = [
    ("Dom Casmurro", "Machado de Assis", "9788535910667"),
    ("Memórias Póstumas de Brás Cubas", "Machado de Assis", "9788535911220"),
    ("Grande Sertão: Veredas", "João Guimarães Rosa", "9788535908466"),
    ("A Hora da Estrela", "Clarice Lispector", "9788532508126"),
    ("Vidas Secas", "Graciliano Ramos", "9788501067340"),
]


async def create_users() -> list[User]:
    """Cria os leitores de demonstração que ainda não existem."""
    users = []
    async with async_session_factory() as db:
        user_repo = UserRepository(db)
        for name, email, role in DEMO_USERS:
            user = await user_repo.get_by_email(email)
            if user:
                logger.info(f"Usuário já existe: {email}")
            else:
                user = await user_repo.create(name=name, email=email, role=role)
                logger.info(f"Usuário criado: {email} ({role.value})")
            users.append(user)
        await db.commit()
    return users


async def create_books() -> None:
    """Cadastra os livros de demonstração se o acervo estiver vazio."""
    async with async_session_factory() as db:
        _, total = await BookRepository(db).search(page_size=1)
        if total:
            logger.info("Acervo já possui livros; seed de livros ignorado")
            return

        for title, author, isbn in DEMO_BOOKS:
            db.add(Book(title=title, author=author, isbn=isbn, status=BookStatus.AVAILABLE))
        await db.commit()
        logger.info(f"{len(DEMO_BOOKS)} livros cadastrados")


async def main() -> None:
    """Executa todos os seeds."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("Executando seeds...")
    users = await create_users()
    await create_books()

    logger.info("Tokens de desenvolvimento:")
    for user in users:
        logger.info(f"  {user.role.value:<10} {user.email}: {create_access_token(user.id)}")
    logger.info("Seeds concluídos!")


if __name__ == "__main__":
    asyncio.run(main())
