"""
Testes do cache da data simulada (Redis mockado).
"""

import json
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from circulation.core.cache import CacheService
from circulation.services.clock import SettingsClock


@pytest.fixture
def mock_redis():
    return AsyncMock()


@pytest.fixture
def cache_settings():
    """Settings do módulo de cache com cache habilitado."""
    with patch("circulation.core.cache.settings") as mock_settings:
        mock_settings.CACHE_ENABLED = True
        mock_settings.CACHE_CLOCK_TTL_SECONDS = 5
        yield mock_settings


class TestCacheService:
    """Testes para o CacheService."""

    @pytest.mark.anyio
    async def test_disabled(self, cache_settings, mock_redis):
        """Cache desabilitado nunca acessa o Redis."""
        cache_settings.CACHE_ENABLED = False
        with patch("circulation.core.cache.get_redis_client", return_value=mock_redis):
            cache = CacheService()

            assert await cache.get_simulated_date() == (False, None)
            assert await cache.set_simulated_date("2025-01-06T10:00:00") is False
            assert await cache.invalidate_simulated_date() is False

        mock_redis.get.assert_not_called()

    @pytest.mark.anyio
    async def test_redis_unavailable(self, cache_settings):
        with patch("circulation.core.cache.get_redis_client", return_value=None):
            cache = CacheService()

            assert await cache.get_simulated_date() == (False, None)
            assert await cache.set_simulated_date(None) is False

    @pytest.mark.anyio
    async def test_hit_with_value(self, cache_settings, mock_redis):
        mock_redis.get.return_value = json.dumps({"value": "2025-01-06T10:00:00"})
        with patch("circulation.core.cache.get_redis_client", return_value=mock_redis):
            hit, value = await CacheService().get_simulated_date()

        assert hit is True
        assert value == "2025-01-06T10:00:00"

    @pytest.mark.anyio
    async def test_hit_real_clock(self, cache_settings, mock_redis):
        """None em cache é um hit: relógio real, sem consultar o banco."""
        mock_redis.get.return_value = json.dumps({"value": None})
        with patch("circulation.core.cache.get_redis_client", return_value=mock_redis):
            assert await CacheService().get_simulated_date() == (True, None)

    @pytest.mark.anyio
    async def test_miss(self, cache_settings, mock_redis):
        mock_redis.get.return_value = None
        with patch("circulation.core.cache.get_redis_client", return_value=mock_redis):
            assert await CacheService().get_simulated_date() == (False, None)

    @pytest.mark.anyio
    async def test_error_is_miss(self, cache_settings, mock_redis):
        """Erro no Redis vira miss (fail-open)."""
        mock_redis.get.side_effect = ConnectionError("redis down")
        mock_redis.setex.side_effect = ConnectionError("redis down")
        with patch("circulation.core.cache.get_redis_client", return_value=mock_redis):
            cache = CacheService()

            assert await cache.get_simulated_date() == (False, None)
            assert await cache.set_simulated_date(None) is False

    @pytest.mark.anyio
    async def test_set_uses_ttl(self, cache_settings, mock_redis):
        with patch("circulation.core.cache.get_redis_client", return_value=mock_redis):
            saved = await CacheService(ttl=30).set_simulated_date("2025-01-06T10:00:00")

        assert saved is True
        mock_redis.setex.assert_called_once_with(
            CacheService.KEY_SIMULATED_DATE,
            30,
            json.dumps({"value": "2025-01-06T10:00:00"}),
        )

    @pytest.mark.anyio
    async def test_invalidate(self, cache_settings, mock_redis):
        with patch("circulation.core.cache.get_redis_client", return_value=mock_redis):
            assert await CacheService().invalidate_simulated_date() is True

        mock_redis.delete.assert_called_once_with(CacheService.KEY_SIMULATED_DATE)


class TestSettingsClockCache:
    """O relógio consulta o cache antes do banco."""

    @pytest.fixture
    def mock_cache(self):
        with patch("circulation.services.clock.cache_service") as cache:
            cache.get_simulated_date = AsyncMock()
            cache.set_simulated_date = AsyncMock(return_value=True)
            cache.invalidate_simulated_date = AsyncMock(return_value=True)
            yield cache

    @pytest.mark.anyio
    async def test_cache_hit_skips_database(self, mock_cache):
        mock_cache.get_simulated_date.return_value = (True, "2025-01-06T10:00:00")
        clock = SettingsClock(MagicMock())
        clock.setting_repo.get_value = AsyncMock()

        assert await clock.now() == datetime(2025, 1, 6, 10, 0)
        assert await clock.is_simulating() is True
        clock.setting_repo.get_value.assert_not_called()

    @pytest.mark.anyio
    async def test_cache_miss_fills_cache(self, mock_cache):
        mock_cache.get_simulated_date.return_value = (False, None)
        clock = SettingsClock(MagicMock())
        clock.setting_repo.get_value = AsyncMock(return_value="2025-02-01T00:00:00")

        assert await clock.now() == datetime(2025, 2, 1)
        mock_cache.set_simulated_date.assert_awaited_once_with("2025-02-01T00:00:00")

    @pytest.mark.anyio
    async def test_set_invalidates_cache(self, mock_cache):
        clock = SettingsClock(MagicMock())
        clock.setting_repo.set_value = AsyncMock()

        await clock.set(datetime(2025, 3, 1, 8, 0))

        mock_cache.invalidate_simulated_date.assert_awaited_once()
        assert await clock.now() == datetime(2025, 3, 1, 8, 0)
        mock_cache.get_simulated_date.assert_not_called()

    @pytest.mark.anyio
    async def test_without_cache(self, mock_cache):
        clock = SettingsClock(MagicMock(), use_cache=False)
        clock.setting_repo.get_value = AsyncMock(return_value=None)

        assert await clock.is_simulating() is False
        mock_cache.get_simulated_date.assert_not_called()
        mock_cache.set_simulated_date.assert_not_called()
