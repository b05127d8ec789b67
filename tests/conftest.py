"""
conftest.py

Shared pytest fixtures for oracle_games tests.
"""

import random
from collections.abc import Iterable
from pathlib import Path

import pytest

from oracle_games.models.adventure import AdventureSession
from oracle_games.models.character import (
    AbilityScores,
    Background,
    CharacterClass,
    CharacterSheet,
    Race,
    Skill,
)
from oracle_games.models.questions import Answer, Category, QuestionsSession
from oracle_games.oracle.base import CampaignOpening, NarrationContext, Oracle, QuestionContext
from oracle_games.storage.store import SessionStore


class FakeOracle(Oracle):
    """
    Scripted oracle.

    Each queue holds results to hand out in order; an Exception in a queue
    is raised instead of returned. Empty queues fall back to a default.
    """

    def __init__(
        self,
        answers: Iterable[Answer | Exception] = (),
        narrations: Iterable[str | Exception] = (),
        verdicts: Iterable[bool | Exception] = (),
        subject: str | Exception = "Eiffel Tower",
        opening: CampaignOpening | Exception | None = None,
    ):
        self.answers = list(answers)
        self.narrations = list(narrations)
        self.verdicts = list(verdicts)
        self.subject = subject
        self.opening = opening or CampaignOpening(
            campaign="The Sunken Crown",
            location="Saltmarsh",
            quest="Find the drowned king's crown",
            introduction="Fog rolls in off the harbour. What do you do?",
        )
        self.questions: list[tuple[QuestionContext, str]] = []
        self.actions: list[tuple[NarrationContext, str]] = []
        self.guesses: list[tuple[str, str]] = []

    @staticmethod
    def _next(queue: list, default):
        value = queue.pop(0) if queue else default
        if isinstance(value, Exception):
            raise value
        return value

    async def ask(self, context: QuestionContext, question: str) -> Answer:
        self.questions.append((context, question))
        return self._next(self.answers, Answer.NO)

    async def generate_subject(self, category: Category) -> str:
        if isinstance(self.subject, Exception):
            raise self.subject
        return self.subject

    async def check_guess(self, subject: str, guess: str) -> bool:
        self.guesses.append((subject, guess))
        return self._next(self.verdicts, False)

    async def narrate(self, context: NarrationContext, action: str) -> str:
        self.actions.append((context, action))
        return self._next(self.narrations, "The world shifts around you.")

    async def open_campaign(self, character: CharacterSheet) -> CampaignOpening:
        if isinstance(self.opening, Exception):
            raise self.opening
        return self.opening


@pytest.fixture
def make_oracle() -> type[FakeOracle]:
    """The FakeOracle class, for tests that script their own oracle."""
    return FakeOracle


@pytest.fixture
def fake_oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def store(tmp_path: Path) -> SessionStore:
    """A session store in a fresh temporary directory."""
    return SessionStore(tmp_path / "saves")


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def sample_character() -> CharacterSheet:
    """A level 1 elf rogue with Stealth and Perception."""
    return CharacterSheet(
        name="Mira",
        race=Race.ELF,
        character_class=CharacterClass.ROGUE,
        background=Background.CRIMINAL,
        abilities=AbilityScores(
            strength=8,
            dexterity=16,
            constitution=12,
            intelligence=13,
            wisdom=14,
            charisma=10,
        ),
        proficiencies={Skill.STEALTH, Skill.PERCEPTION},
        hit_points=9,
        max_hit_points=9,
        armor_class=14,
        inventory=["Shortsword", "Thieves' tools"],
        gold=30,
    )


@pytest.fixture
def questions_session() -> QuestionsSession:
    return QuestionsSession.start(category=Category.PLACE, subject="Eiffel Tower")


@pytest.fixture
def adventure_session(sample_character: CharacterSheet) -> AdventureSession:
    session = AdventureSession(
        character=sample_character,
        campaign="The Sunken Crown",
        current_location="Saltmarsh",
        current_quest="Find the drowned king's crown",
    )
    session.record_exchange("Begin the adventure.", "Fog rolls in off the harbour.")
    return session
