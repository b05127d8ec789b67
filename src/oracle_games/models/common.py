"""Helpers shared by the session models."""

from datetime import datetime, timezone
from uuid import uuid4

# Slots become file names, so keep them to a safe alphabet
SLOT_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id() -> str:
    return uuid4().hex
