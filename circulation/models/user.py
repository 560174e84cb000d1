"""
Model de usuário (leitor) do sistema.

A autenticação é feita por um serviço externo; aqui ficam apenas os dados
necessários às regras de circulação, em especial a role (tier).
"""

from sqlalchemy import String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from circulation.db.session import Base
from circulation.models.base import UUIDMixin, TimestampMixin
from circulation.models.enums import UserRole


class User(Base, UUIDMixin, TimestampMixin):
    """
    Leitor da biblioteca.

    Attributes:
        id: UUID único do usuário
        name: Nome completo
        email: Email único
        role: STANDARD, PREMIUM, LIBRARIAN ou ADMIN
    """
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.STANDARD,
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"
