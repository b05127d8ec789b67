"""
base.py

PURPOSE: The interface the game engines use to consult the oracle.
DEPENDENCIES: models

ARCHITECTURE NOTES:
Engines never see prompts or raw model text. They hand over a small
context object and get back typed results, or one of the OracleError
subclasses (OracleUnavailable, OracleRateLimited, OracleInvalidResponse).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from oracle_games.models.adventure import NarrativeEntry
from oracle_games.models.character import CharacterSheet
from oracle_games.models.questions import Answer, Category, QuestionRecord


@dataclass
class QuestionContext:
    """What the oracle needs to answer a question about the hidden subject."""

    category: Category
    subject: str
    history: list[QuestionRecord] = field(default_factory=list)


@dataclass
class NarrationContext:
    """What the oracle needs to narrate the next beat of an adventure."""

    character: CharacterSheet
    campaign: str
    location: str
    quest: str
    recent: list[NarrativeEntry] = field(default_factory=list)


@dataclass
class CampaignOpening:
    """The oracle's pitch for a new campaign."""

    campaign: str
    location: str
    quest: str
    introduction: str


class Oracle(ABC):
    """Abstract base class for oracles."""

    @abstractmethod
    async def ask(self, context: QuestionContext, question: str) -> Answer:
        """Answer a yes/no question about the hidden subject."""
        ...

    @abstractmethod
    async def generate_subject(self, category: Category) -> str:
        """Pick a secret subject for a new game."""
        ...

    @abstractmethod
    async def check_guess(self, subject: str, guess: str) -> bool:
        """Decide whether a guess names the subject."""
        ...

    @abstractmethod
    async def narrate(self, context: NarrationContext, action: str) -> str:
        """Narrate the outcome of what the player does."""
        ...

    @abstractmethod
    async def open_campaign(self, character: CharacterSheet) -> CampaignOpening:
        """Invent a campaign hook and opening scene for a new character."""
        ...
