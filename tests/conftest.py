"""Shared fixtures for chorebot tests."""

import pytest
import pytest_asyncio

import chorebot.config as config_module
from chorebot.state.database import DatabaseManager
from chorebot.state.store import ChoreStateStore


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch, tmp_path):
    """Prevent tests from reading real .env or touching real data."""
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-test")
    monkeypatch.setenv("SLACK_SIGNING_SECRET", "test_secret")
    monkeypatch.setenv("SLACK_REMINDER_CHANNEL", "")
    monkeypatch.setenv("OPENAI_API_KEY", "test_key")
    monkeypatch.setenv("GCP_SERVICE_ACCOUNT", "")
    monkeypatch.setenv("GCP_SERVICE_ACCOUNT_FILE", "")
    monkeypatch.setenv("STATE_API_TOKEN", "")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    # Drop the cached singleton so each test sees its own environment
    monkeypatch.setattr(config_module, "_settings", None)


@pytest_asyncio.fixture
async def db(tmp_path):
    """Fresh database per test (temp file)."""
    manager = DatabaseManager(db_path=str(tmp_path / "test.db"))
    await manager.init()
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def store(db):
    return ChoreStateStore(db, name="chore-state")
