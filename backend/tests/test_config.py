"""Startup configuration validation."""

import pytest

from murmur.config import Settings
from murmur.exceptions import ConfigurationError
from murmur.main import create_app, lifespan


def test_valid_settings_pass():
    Settings(secret_key="a-real-secret").validate_required()


@pytest.mark.parametrize("secret", ["", "   ", "fallback_secret", "changeme"])
def test_placeholder_secret_fails(secret):
    with pytest.raises(ConfigurationError, match="SECRET_KEY"):
        Settings(secret_key=secret).validate_required()


def test_default_limit_above_max_fails():
    settings = Settings(secret_key="a-real-secret", feed_default_limit=50, feed_max_limit=20)
    with pytest.raises(ConfigurationError, match="FEED_DEFAULT_LIMIT"):
        settings.validate_required()


def test_invalid_log_level_rejected():
    with pytest.raises(ValueError):
        Settings(secret_key="a-real-secret", log_level="LOUD")


@pytest.mark.asyncio
async def test_startup_aborts_without_secret(tmp_path):
    app = create_app(
        Settings(
            secret_key="",
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'x.db'}",
            log_level="WARNING",
        )
    )
    with pytest.raises(ConfigurationError):
        async with lifespan(app):
            pass
