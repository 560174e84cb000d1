"""
Model de configuração global (chave/valor) do sistema.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from circulation.core.dates import utcnow
from circulation.db.session import Base

# Chaves conhecidas
SIMULATED_DATE_KEY = "simulated_date"
SIMULATION_STARTED_AT_KEY = "simulation_started_at"
AUTO_RETURN_CHECKOUTS_KEY = "auto_return_checkouts"


class SystemSetting(Base):
    """
    Configuração global do processo.

    Attributes:
        key: Nome da configuração
        value: Valor em JSON (ISO 8601 para datas, lista para auto-returns)
        updated_at: Última alteração
        updated_by: Usuário que alterou
    """
    __tablename__ = "system_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<SystemSetting {self.key}={self.value!r}>"
