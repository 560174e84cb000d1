"""
Repository para a tabela chave/valor de configurações do sistema.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.system_setting import SystemSetting


class SystemSettingRepository:
    """Leitura e escrita de configurações globais por chave."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, key: str) -> SystemSetting | None:
        return await self.db.get(SystemSetting, key)

    async def get_value(self, key: str, default: Any = None) -> Any:
        """Valor da configuração ou ``default`` se ausente/nulo."""
        setting = await self.get(key)
        if setting is None or setting.value is None:
            return default
        return setting.value

    async def set_value(
        self,
        key: str,
        value: Any,
        updated_by: UUID | None = None,
    ) -> SystemSetting:
        """
        Cria ou substitui o valor da configuração.

        O valor JSON é sempre substituído por um objeto novo; mutações
        in-place não são detectadas pelo SQLAlchemy.
        """
        setting = await self.get(key)
        if setting is None:
            setting = SystemSetting(key=key, value=value, updated_by=updated_by)
            self.db.add(setting)
        else:
            setting.value = value
            setting.updated_by = updated_by
        await self.db.flush()
        return setting
