"""
Configuração de logging da aplicação.

Um único handler em stdout, nível definido por LOG_LEVEL. Falhas de efeitos
colaterais (notificações, passos da simulação, cache) são registradas aqui
em vez de propagadas, então o formato inclui o nome do logger para
identificar o módulo de origem.
"""

import logging
import sys
from typing import Optional

from circulation.core.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers de terceiros mantidos em WARNING
QUIET_LOGGERS = (
    "uvicorn.access",
    "sqlalchemy.engine",
    "aiosqlite",
)


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configura o logging da aplicação (chamado no startup).

    Args:
        level: Nível de logging. Se não fornecido, usa LOG_LEVEL do .env
    """
    settings = get_settings()
    log_level = (level or settings.LOG_LEVEL).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove handlers existentes para evitar duplicação em reload
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configurado com nível: {log_level}")


def get_logger(name: str) -> logging.Logger:
    """Retorna o logger do módulo (geralmente ``__name__``)."""
    return logging.getLogger(name)
