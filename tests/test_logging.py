"""
Testes da configuração de logging.
"""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from circulation.core import cache, security
from circulation.core.cache import CacheService
from circulation.core.logging import LOG_FORMAT, get_logger, setup_logging
from circulation.db import redis, seed
from circulation.services import (
    book,
    checkout,
    clock,
    hold,
    notification,
    simulation,
    waitlist,
)


@pytest.fixture
def root_logger():
    """Restaura handlers e nível do root logger após o teste."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoggers:
    """Loggers nomeados por módulo."""

    def test_get_logger_returns_named_logger(self):
        assert get_logger("circulation.teste") is logging.getLogger("circulation.teste")

    @pytest.mark.parametrize(
        "module",
        [
            cache,
            security,
            redis,
            seed,
            book,
            checkout,
            clock,
            hold,
            notification,
            simulation,
            waitlist,
        ],
    )
    def test_module_logger_uses_module_name(self, module):
        assert module.logger is logging.getLogger(module.__name__)

    @pytest.mark.anyio
    async def test_cache_failure_logged_with_module_name(self, caplog):
        mock_redis = AsyncMock()
        mock_redis.get.side_effect = ConnectionError("redis fora do ar")

        with patch("circulation.core.cache.settings") as mock_settings, patch(
            "circulation.core.cache.get_redis_client", return_value=mock_redis
        ):
            mock_settings.CACHE_ENABLED = True
            with caplog.at_level(logging.WARNING, logger="circulation.core.cache"):
                assert await CacheService(ttl=5).get_simulated_date() == (False, None)

        record = caplog.records[-1]
        assert record.name == "circulation.core.cache"
        assert record.levelno == logging.WARNING
        assert "redis fora do ar" in record.getMessage()


class TestSetupLogging:
    """Testes para setup_logging."""

    def test_single_stdout_handler(self, root_logger):
        setup_logging("debug")
        setup_logging("debug")

        assert len(root_logger.handlers) == 1
        assert root_logger.handlers[0].formatter._fmt == LOG_FORMAT
        assert root_logger.level == logging.DEBUG

    def test_quiets_third_party_loggers(self, root_logger):
        setup_logging("info")

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
