"""
One-shot script to initialise the chorebot SQLite database and the chore
state record. Prints the current state when done.

Usage:
    python3 scripts/init_db.py
"""

import asyncio
import json
import os
import sys

# Ensure project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chorebot.config import settings  # noqa: E402
from chorebot.state.database import DatabaseManager  # noqa: E402
from chorebot.state.store import ChoreStateStore  # noqa: E402


async def main() -> None:
    db = DatabaseManager()
    await db.init()
    try:
        store = ChoreStateStore(db, name=settings.state_name)
        state = await store.read()
        backups = await store.list_backups()
    finally:
        await db.close()
    print(f"Database initialised at: {db.db_path}")
    print(json.dumps(state.to_wire(), indent=2))
    print(f"{len(backups)} backup(s) on record")


if __name__ == "__main__":
    asyncio.run(main())
