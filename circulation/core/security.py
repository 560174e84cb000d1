"""
Utilitários de segurança: emissão e validação de tokens JWT.

A autenticação (login, sessão) é responsabilidade de um serviço externo.
Esta API apenas valida o bearer token e identifica o usuário pelo ``sub``.
``create_access_token`` existe para o seed de desenvolvimento e os testes.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from circulation.core.config import get_settings
from circulation.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


def create_access_token(
    user_id: UUID | str,
    extra_data: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Cria token JWT para um usuário.

    Args:
        user_id: ID do usuário (vai no claim ``sub``)
        extra_data: Dados adicionais para incluir no payload
        expires_delta: Tempo de expiração customizado

    Returns:
        Token JWT assinado
    """
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRES_MINUTES)
    )

    payload = {
        "sub": str(user_id),
        "exp": expire,
        "iat": issued_at,
    }

    if extra_data:
        payload.update(extra_data)

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decodifica e valida token JWT.

    Args:
        token: Token JWT

    Returns:
        Payload do token ou None se inválido/expirado
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as e:
        logger.debug(f"Token rejeitado: {type(e).__name__}")
        return None


def get_token_subject(token: str) -> UUID | None:
    """
    Extrai o ID do usuário de um token válido.

    Returns:
        UUID do usuário ou None se o token for inválido
    """
    payload = decode_token(token)
    if payload is None:
        return None

    subject = payload.get("sub")
    if subject is None:
        return None

    try:
        return UUID(subject)
    except ValueError:
        return None
