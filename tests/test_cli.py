"""Tests for the command-line interface."""

import asyncio

from typer.testing import CliRunner

from khata.cli import app
from khata.storage import SQLiteStore

runner = CliRunner()


def _seed(path, values):
    async def _write():
        store = SQLiteStore(path)
        await store.initialize()
        for key, value in values.items():
            await store.set(key, value)
        await store.close()

    asyncio.run(_write())


def _keys(path):
    async def _read():
        store = SQLiteStore(path)
        await store.initialize()
        keys = await store.keys()
        await store.close()
        return keys

    return asyncio.run(_read())


class TestRolesCommand:
    """Tests for `khata roles`."""

    def test_lists_roles(self):
        """Test every role and a few permissions appear."""
        result = runner.invoke(app, ["roles"])

        assert result.exit_code == 0
        for label in ("Owner", "Admin", "Worker"):
            assert label in result.output
        assert "can_manage_members" in result.output


class TestCacheCommands:
    """Tests for `khata cache`."""

    def test_show(self, temp_dir):
        """Test cached keys are listed."""
        path = temp_dir / "cache.sqlite"
        _seed(path, {"customers_cache": "[]"})

        result = runner.invoke(app, ["cache", "show", "--cache-path", str(path)])

        assert result.exit_code == 0
        assert "customers_cache" in result.output

    def test_clear_keeps_session(self, temp_dir):
        """Test the default clear keeps the token and profile."""
        path = temp_dir / "cache.sqlite"
        _seed(path, {"customers_cache": "[]", "dashboard_cache": "{}", "userData": "{}", "authToken": "t"})

        result = runner.invoke(app, ["cache", "clear", "--cache-path", str(path)])

        assert result.exit_code == 0
        assert "Removed 2" in result.output
        assert _keys(path) == ["authToken", "userData"]

    def test_clear_all(self, temp_dir):
        """Test --all also drops the session."""
        path = temp_dir / "cache.sqlite"
        _seed(path, {"customers_cache": "[]", "userData": "{}", "authToken": "t"})

        result = runner.invoke(app, ["cache", "clear", "--all", "--cache-path", str(path)])

        assert result.exit_code == 0
        assert _keys(path) == []


class TestSyncCommand:
    """Tests for `khata sync`."""

    def test_unknown_screen(self):
        """Test an unknown screen exits with an error."""
        result = runner.invoke(app, ["sync", "--screen", "ledger"])

        assert result.exit_code == 1
        assert "Unknown screen" in result.output

    def test_sync_unreachable_api(self, temp_dir):
        """Test an unreachable API reports failures but still exits cleanly."""
        path = temp_dir / "cache.sqlite"
        _seed(path, {"products_cache": '[{"name": "Rice", "price": 10, "stock_quantity": 2}]'})

        result = runner.invoke(
            app,
            [
                "sync",
                "--screen",
                "inventory",
                "--cache-path",
                str(path),
                "--base-url",
                "http://127.0.0.1:9",
            ],
        )

        assert result.exit_code == 0
        assert "products" in result.output
        assert "Low stock: 1" in result.output

    def test_sync_closes_store_on_error(self, temp_dir, monkeypatch):
        """Test the cache file is closed even when the refresh blows up."""
        from khata.sync.coordinator import SyncCoordinator

        closed = []
        original_close = SQLiteStore.close

        async def recording_close(self):
            closed.append(self.db_path)
            await original_close(self)

        async def broken_refresh(self, resource_keys=None):
            raise RuntimeError("render failed")

        monkeypatch.setattr(SQLiteStore, "close", recording_close)
        monkeypatch.setattr(SyncCoordinator, "refresh", broken_refresh)
        path = temp_dir / "cache.sqlite"

        result = runner.invoke(app, ["sync", "--cache-path", str(path), "--base-url", "http://127.0.0.1:9"])

        assert result.exit_code != 0
        assert isinstance(result.exception, RuntimeError)
        assert len(closed) == 1
