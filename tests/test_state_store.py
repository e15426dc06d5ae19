"""Tests for chorebot/state: entity storage and the chore state store."""

from datetime import datetime, timezone

import pytest

from chorebot.constants import DEFAULT_DESCRIPTION, STATE_KEY
from chorebot.exceptions import StateValidationError
from chorebot.models import ChoreState
from chorebot.state.store import ChoreStateStore


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, when: datetime):
        self.now = when

    def __call__(self) -> datetime:
        return self.now


T0 = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


# --------------------------------------------------------------------------- #
# DatabaseManager                                                              #
# --------------------------------------------------------------------------- #

@pytest.mark.asyncio
async def test_init_creates_entity_table(db):
    async with db.get_connection() as conn:
        rows = await conn.execute_fetchall(
            "SELECT name FROM sqlite_master WHERE type='table'"
        )
    assert "entity_storage" in {r["name"] for r in rows}


@pytest.mark.asyncio
async def test_put_get_roundtrip_is_partitioned_by_entity(db):
    await db.put("a", "k", {"x": 1})
    await db.put("b", "k", {"x": 2})
    assert await db.get("a", "k") == {"x": 1}
    assert await db.get("b", "k") == {"x": 2}
    assert await db.get("a", "missing") is None


@pytest.mark.asyncio
async def test_list_keys_prefix_treats_underscore_literally(db):
    await db.put("e", "backup_2026-10-18", {})
    await db.put("e", "backupX2026", {})
    await db.put("e", "choreState", {})
    assert await db.list_keys("e", "backup_") == ["backup_2026-10-18"]


# --------------------------------------------------------------------------- #
# ChoreStateStore                                                              #
# --------------------------------------------------------------------------- #

@pytest.mark.asyncio
async def test_first_read_creates_placeholder(db):
    store = ChoreStateStore(db, clock=FrozenClock(T0))
    state = await store.read()
    assert state.description == DEFAULT_DESCRIPTION
    assert state.last_updated == T0.isoformat()
    assert state.last_sent is None
    assert await db.get("chore-state", STATE_KEY) == state.to_wire()


@pytest.mark.asyncio
async def test_read_is_idempotent(store):
    await store.update_description("Alice: trash")
    await store.mark_sent()
    first = await store.read()
    for _ in range(3):
        again = await store.read()
        assert again.last_updated == first.last_updated
        assert again.last_sent == first.last_sent


@pytest.mark.asyncio
async def test_malformed_write_rejected_and_record_unchanged(store):
    before = await store.update_description("Alice: trash, Bob: dishes")

    with pytest.raises(StateValidationError):
        await store.write({"lastUpdated": "2026-10-18T00:00:00+00:00"})
    with pytest.raises(StateValidationError):
        await store.write({"description": 42, "lastUpdated": "x"})
    with pytest.raises(StateValidationError):
        await store.write(["not", "an", "object"])

    assert await store.read() == before


@pytest.mark.asyncio
async def test_last_updated_strictly_increases_on_same_tick(db):
    store = ChoreStateStore(db, clock=FrozenClock(T0))
    first = await store.update_description("one")
    second = await store.update_description("two")
    assert datetime.fromisoformat(second.last_updated) > datetime.fromisoformat(first.last_updated)


@pytest.mark.asyncio
async def test_write_restamps_last_updated(db):
    store = ChoreStateStore(db, clock=FrozenClock(T0))
    state = await store.write({"description": "x", "lastUpdated": "1999-01-01T00:00:00+00:00"})
    assert state.last_updated == T0.isoformat()


@pytest.mark.asyncio
async def test_update_description_keeps_last_sent(store):
    await store.read()
    sent = await store.mark_sent(T0)
    updated = await store.update_description("Bob: laundry")
    assert updated.last_sent == sent.last_sent == T0.isoformat()
    assert updated.description == "Bob: laundry"


@pytest.mark.asyncio
async def test_write_accepts_model_instance(store):
    state = ChoreState(description="Carol: hoover", last_updated="x")
    written = await store.write(state)
    assert written.description == "Carol: hoover"
    assert written.last_updated != "x"


@pytest.mark.asyncio
async def test_daily_and_manual_backups(db):
    clock = FrozenClock(T0)
    store = ChoreStateStore(db, clock=clock)
    await store.update_description("Alice: trash")

    key = await store.backup()
    assert key == f"manual_backup_{T0.isoformat()}"

    backups = await store.list_backups()
    assert "backup_2026-10-18" in backups
    assert key in backups

    snapshot = await store.get_backup(key)
    assert snapshot.description == "Alice: trash"
    assert await store.get_backup("backup_1999-01-01") is None


@pytest.mark.asyncio
async def test_stores_with_different_names_are_independent(db):
    a = ChoreStateStore(db, name="flat-a")
    b = ChoreStateStore(db, name="flat-b")
    await a.update_description("A chores")
    assert (await b.read()).description == DEFAULT_DESCRIPTION
