"""Save slot persistence."""

from oracle_games.storage.store import (
    FORMAT_VERSION,
    SaveRecord,
    SaveSummary,
    Session,
    SessionStore,
    atomic_write,
    commit,
)

__all__ = [
    "FORMAT_VERSION",
    "SaveRecord",
    "SaveSummary",
    "Session",
    "SessionStore",
    "atomic_write",
    "commit",
]
