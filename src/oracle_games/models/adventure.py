"""
adventure.py

PURPOSE: State of a D&D adventure in progress.
DEPENDENCIES: pydantic, character.py

ARCHITECTURE NOTES:
The narrative log keeps the player's own words and the Dungeon Master's
replies. Prompts are rebuilt from it each turn, so the log is the only
conversational memory the oracle gets.
"""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from oracle_games.models.character import CharacterSheet
from oracle_games.models.common import SLOT_PATTERN, new_session_id, utc_now


class NarrativeRole(str, Enum):
    PLAYER = "player"
    NARRATOR = "narrator"


class NarrativeEntry(BaseModel):
    role: NarrativeRole
    text: str
    created_at: datetime = Field(default_factory=utc_now)


class AdventureStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self is not AdventureStatus.IN_PROGRESS


class AdventureSession(BaseModel):
    """A campaign run by the oracle for one character."""

    kind: Literal["adventure"] = "adventure"
    id: str = Field(default_factory=new_session_id)
    slot: str = Field(default="adventure", pattern=SLOT_PATTERN)
    character: CharacterSheet
    campaign: str = ""
    current_location: str = ""
    current_quest: str = ""
    log: list[NarrativeEntry] = Field(default_factory=list)
    status: AdventureStatus = AdventureStatus.IN_PROGRESS
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def last_narration(self) -> str | None:
        for entry in reversed(self.log):
            if entry.role is NarrativeRole.NARRATOR:
                return entry.text
        return None

    def record_exchange(self, player_text: str, narration: str) -> None:
        """Append one player turn and the narration it produced."""
        self.log.append(NarrativeEntry(role=NarrativeRole.PLAYER, text=player_text))
        self.log.append(NarrativeEntry(role=NarrativeRole.NARRATOR, text=narration))
        self.touch()

    def recent_log(self, limit: int) -> list[NarrativeEntry]:
        return self.log[-limit:] if limit > 0 else []

    def touch(self) -> None:
        self.updated_at = utc_now()
