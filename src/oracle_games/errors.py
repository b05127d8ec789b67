"""
errors.py

PURPOSE: Exception taxonomy shared by the engines, the store and the oracle.
DEPENDENCIES: None

ARCHITECTURE NOTES:
Every error a player can trigger derives from GameError, so the CLI can
catch one type at its boundary, render the message, and keep the loop going.
Oracle failures also carry an OracleErrorKind tag so callers can branch on
the kind without isinstance chains.
"""

from enum import Enum


class GameError(Exception):
    """Base class for recoverable game errors."""

    pass


class SessionTerminal(GameError):
    """The session is over (or out of questions) and cannot take this action."""

    pass


class InvalidInput(GameError):
    """The player's input cannot be used (blank question, unknown skill, ...)."""

    pass


class SaveError(GameError):
    """Base class for save slot problems."""

    pass


class SaveNotFound(SaveError):
    """No save exists in the requested slot."""

    def __init__(self, slot: str):
        super().__init__(f"No saved game in slot '{slot}'")
        self.slot = slot


class CorruptSave(SaveError):
    """The save file exists but cannot be read back."""

    def __init__(self, slot: str, reason: str):
        super().__init__(f"Save slot '{slot}' is corrupt: {reason}")
        self.slot = slot
        self.reason = reason


class OracleErrorKind(str, Enum):
    """Tag for the ways an oracle round-trip can fail."""

    UNAVAILABLE = "unavailable"
    RATE_LIMITED = "rate_limited"
    INVALID_RESPONSE = "invalid_response"


class OracleError(GameError):
    """Base class for oracle failures."""

    kind: OracleErrorKind

    def __init__(self, message: str, *, retryable: bool | None = None):
        super().__init__(message)
        # Only UNAVAILABLE is retried unless the raiser says otherwise
        self.retryable = self.kind is OracleErrorKind.UNAVAILABLE if retryable is None else retryable


class OracleUnavailable(OracleError):
    """Network, server or timeout failure. Worth retrying later."""

    kind = OracleErrorKind.UNAVAILABLE


class OracleRateLimited(OracleError):
    """The API refused the call for quota reasons. Do not retry immediately."""

    kind = OracleErrorKind.RATE_LIMITED


class OracleInvalidResponse(OracleError):
    """The oracle replied with something that cannot be interpreted."""

    kind = OracleErrorKind.INVALID_RESPONSE
