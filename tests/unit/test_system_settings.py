"""Unit tests for keygate/settings/system_settings.py."""

from __future__ import annotations

import pytest

from keygate.auth.errors import ModeResolverError
from keygate.auth.protocol import ModeResolver
from keygate.settings import SystemSettings, parse_flag


class TestParseFlag:
    @pytest.mark.parametrize("value", ["true", "TRUE", "True", " true\n"])
    def test_truthy(self, value: str) -> None:
        assert parse_flag(value) is True

    @pytest.mark.parametrize("value", [None, "", "false", "1", "yes", "truthy"])
    def test_falsy(self, value) -> None:
        assert parse_flag(value) is False


class TestIsMultiUserMode:
    async def test_missing_row_is_single_tenant(self, database) -> None:
        assert await SystemSettings(database).is_multi_user_mode() is False

    async def test_enabled(self, database, seed_multi_user_mode) -> None:
        await seed_multi_user_mode(True)
        assert await SystemSettings(database).is_multi_user_mode() is True

    async def test_disabled(self, database, seed_multi_user_mode) -> None:
        await seed_multi_user_mode(False)
        assert await SystemSettings(database).is_multi_user_mode() is False

    async def test_reads_fresh_each_call(self, database, seed_multi_user_mode) -> None:
        settings = SystemSettings(database)

        await seed_multi_user_mode(True)
        assert await settings.is_multi_user_mode() is True

        await seed_multi_user_mode(False)
        assert await settings.is_multi_user_mode() is False

    async def test_closed_database_raises(self, database) -> None:
        settings = SystemSettings(database)
        await database.close()

        with pytest.raises(ModeResolverError) as exc_info:
            await settings.is_multi_user_mode()
        assert exc_info.value.backend == "mode_resolver"

    async def test_missing_table_raises(self, database) -> None:
        await database.connection.execute("DROP TABLE system_settings")
        await database.connection.commit()

        with pytest.raises(ModeResolverError):
            await SystemSettings(database).is_multi_user_mode()


async def test_get_value_returns_raw_text(database, seed_multi_user_mode) -> None:
    await seed_multi_user_mode(True)
    settings = SystemSettings(database)
    assert await settings.get_value("multi_user_mode") == "true"
    assert await settings.get_value("no_such_label") is None


async def test_satisfies_protocol(database) -> None:
    assert isinstance(SystemSettings(database), ModeResolver)
