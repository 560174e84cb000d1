"""
Dependencies FastAPI para autenticação, autorização e relógio.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.policy import is_staff_role
from circulation.core.security import get_token_subject
from circulation.db.session import get_db
from circulation.models.user import User
from circulation.repositories.user import UserRepository
from circulation.services.clock import SettingsClock

# Scheme Bearer para extrair token do header Authorization
security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Dependency que retorna o usuário autenticado.

    Extrai o token JWT do header Authorization, decodifica e
    busca o usuário no banco.

    Raises:
        HTTPException 401: Token inválido, expirado ou usuário não encontrado
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Token inválido ou expirado",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user_id = get_token_subject(credentials.credentials)
    if user_id is None:
        raise credentials_exception

    user = await UserRepository(db).get_by_id(user_id)

    if user is None:
        raise credentials_exception

    return user


async def require_staff(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Dependency que exige role ADMIN ou LIBRARIAN.

    Raises:
        HTTPException 403: Usuário não é da equipe da biblioteca
    """
    if not is_staff_role(current_user.role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito a administradores e bibliotecários",
        )
    return current_user


async def get_clock(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SettingsClock:
    """Dependency que fornece o relógio (real ou simulado) do request."""
    return SettingsClock(db)


# Type aliases para uso nos endpoints
CurrentUser = Annotated[User, Depends(get_current_user)]
StaffUser = Annotated[User, Depends(require_staff)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
AppClock = Annotated[SettingsClock, Depends(get_clock)]
