"""
Chore state store: the single named record the whole bot revolves around.

One ChoreStateStore instance owns one entity (default "chore-state") in the
entity storage table. Every read and write of that entity goes through the
store's lock, so at most one operation touches the record at a time.

Keys inside the entity:
  choreState                 the live record
  backup_YYYY-MM-DD          last write of each UTC day
  manual_backup_<ISO time>   explicit snapshots from backup()
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from pydantic import ValidationError

from ..constants import (
    DAILY_BACKUP_PREFIX,
    DEFAULT_DESCRIPTION,
    MANUAL_BACKUP_PREFIX,
    STATE_KEY,
)
from ..exceptions import StateValidationError, StorageError
from ..models import ChoreState
from .database import DatabaseManager

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ChoreStateStore:
    """
    Read/write access to one named chore state record.

    Usage:
        store = ChoreStateStore(db, name="chore-state")
        state = await store.read()
        await store.update_description("Alice: trash, Bob: dishes")
    """

    def __init__(
        self,
        db: DatabaseManager,
        name: str = "chore-state",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._db = db
        self._name = name
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return self._name

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    async def read(self) -> ChoreState:
        """Return the current record, creating the placeholder on first access."""
        async with self._lock:
            return await self._read_unlocked()

    async def write(self, state: ChoreState | dict[str, Any]) -> ChoreState:
        """
        Validate and store a full record.

        lastUpdated is always re-stamped here, whatever the caller sent.
        Raises StateValidationError (nothing stored) on a malformed payload.
        """
        validated = self.validate(state)
        async with self._lock:
            return await self._write_unlocked(validated)

    async def update_description(self, description: str) -> ChoreState:
        """Replace the description, keeping lastSent as it is."""
        async with self._lock:
            current = await self._read_unlocked()
            return await self._write_unlocked(
                current.model_copy(update={"description": description})
            )

    async def mark_sent(self, when: datetime | None = None) -> ChoreState:
        """Stamp lastSent (reminder bookkeeping) and write the record back."""
        sent_at = (when or self._clock()).isoformat()
        async with self._lock:
            current = await self._read_unlocked()
            return await self._write_unlocked(
                current.model_copy(update={"last_sent": sent_at})
            )

    async def backup(self) -> str:
        """Snapshot the current record under a manual_backup_ key and return the key."""
        async with self._lock:
            state = await self._read_unlocked()
            key = f"{MANUAL_BACKUP_PREFIX}{self._clock().isoformat()}"
            await self._db.put(self._name, key, state.to_wire())
        logger.info("Manual backup of %s written to %s", self._name, key)
        return key

    async def list_backups(self) -> list[str]:
        """Return all backup keys (daily and manual) for this entity."""
        daily = await self._db.list_keys(self._name, DAILY_BACKUP_PREFIX)
        manual = await self._db.list_keys(self._name, MANUAL_BACKUP_PREFIX)
        return daily + manual

    async def get_backup(self, key: str) -> ChoreState | None:
        raw = await self._db.get(self._name, key)
        if raw is None:
            return None
        return ChoreState.model_validate(raw)

    @staticmethod
    def validate(state: ChoreState | dict[str, Any]) -> ChoreState:
        """Coerce a payload into a ChoreState or raise StateValidationError."""
        if isinstance(state, ChoreState):
            return state
        if not isinstance(state, dict):
            raise StateValidationError("Invalid state structure: expected an object")
        try:
            return ChoreState.model_validate(state)
        except ValidationError as e:
            raise StateValidationError(f"Invalid state structure: {e}") from e

    # ------------------------------------------------------------------ #
    # Internals (caller holds the lock)                                  #
    # ------------------------------------------------------------------ #

    async def _read_unlocked(self) -> ChoreState:
        stored = await self._db.get(self._name, STATE_KEY)
        if stored is None:
            state = ChoreState(
                description=DEFAULT_DESCRIPTION,
                last_updated=self._clock().isoformat(),
            )
            await self._db.put(self._name, STATE_KEY, state.to_wire())
            logger.info("Initialised %s with placeholder description", self._name)
            return state
        try:
            return ChoreState.model_validate(stored)
        except ValidationError as e:
            raise StorageError(f"Stored record for {self._name} is corrupt: {e}") from e

    async def _write_unlocked(self, state: ChoreState) -> ChoreState:
        previous = await self._db.get(self._name, STATE_KEY)
        previous_stamp = _parse_timestamp(
            previous.get("lastUpdated") if isinstance(previous, dict) else None
        )

        now = self._clock()
        # lastUpdated must move forward even if two writes land on the same tick
        if previous_stamp is not None and now <= previous_stamp:
            now = previous_stamp + timedelta(microseconds=1)

        stamped = state.model_copy(update={"last_updated": now.isoformat()})
        payload = stamped.to_wire()

        await self._db.put(self._name, STATE_KEY, payload)
        backup_key = f"{DAILY_BACKUP_PREFIX}{now.date().isoformat()}"
        await self._db.put(self._name, backup_key, payload)

        logger.info(
            "Wrote %s (%d chars, lastSent=%s)",
            self._name, len(stamped.description), stamped.last_sent,
        )
        return stamped
