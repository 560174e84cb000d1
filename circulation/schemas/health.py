"""
Schema do healthcheck.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    """
    Estado da aplicação e das dependências.

    ``status`` depende só do banco; Redis fora do ar aparece em ``cache``
    mas não degrada a aplicação.
    """

    status: Literal["healthy", "degraded"]
    app_name: str
    environment: str
    database: Literal["up", "down"]
    cache: Literal["up", "down"]

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "status": "healthy",
                    "app_name": "Circulation API",
                    "environment": "development",
                    "database": "up",
                    "cache": "down",
                }
            ]
        }
    )
