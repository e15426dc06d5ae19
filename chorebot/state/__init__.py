"""
Durable chore state: the aiosqlite entity storage and the named store on top of it.
"""

from .database import DatabaseManager
from .store import ChoreStateStore

__all__ = ["DatabaseManager", "ChoreStateStore"]
