"""Tests for database engine configuration."""

import pytest
from pydantic import ValidationError
from sqlalchemy.pool import StaticPool

from sessionrun.config import Settings
from sessionrun.database import engine_options


class TestEngineOptions:
    def test_sqlite_uses_one_shared_connection(self) -> None:
        options = engine_options(Settings(DATABASE_URL="sqlite:///:memory:"))

        assert options["poolclass"] is StaticPool
        assert options["connect_args"] == {"check_same_thread": False}
        assert "pool_size" not in options

    def test_server_database_pool_comes_from_settings(self) -> None:
        settings = Settings(
            DATABASE_URL="postgresql://runs@db/sessionrun",
            DATABASE_POOL_SIZE=3,
            DATABASE_MAX_OVERFLOW=2,
            DATABASE_POOL_RECYCLE_SECONDS=600,
        )

        options = engine_options(settings)

        assert options == {
            "pool_size": 3,
            "max_overflow": 2,
            "pool_pre_ping": True,
            "pool_recycle": 600,
        }

    @pytest.mark.parametrize(
        "overrides",
        [
            {"DATABASE_POOL_SIZE": 0},
            {"DATABASE_MAX_OVERFLOW": -1},
            {"DATABASE_POOL_RECYCLE_SECONDS": -5},
        ],
    )
    def test_invalid_pool_settings_are_rejected(self, overrides: dict[str, int]) -> None:
        with pytest.raises(ValidationError):
            Settings(**overrides)  # type: ignore[arg-type]
