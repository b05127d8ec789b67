"""Domain models for the games."""

from oracle_games.models.adventure import (
    AdventureSession,
    AdventureStatus,
    NarrativeEntry,
    NarrativeRole,
)
from oracle_games.models.character import (
    Ability,
    AbilityScores,
    Background,
    CharacterClass,
    CharacterSheet,
    Race,
    Skill,
)
from oracle_games.models.dice import DiceRoll, DieType
from oracle_games.models.questions import (
    Answer,
    Category,
    QuestionRecord,
    QuestionsSession,
    SessionStatus,
)

__all__ = [
    "Ability",
    "AbilityScores",
    "AdventureSession",
    "AdventureStatus",
    "Answer",
    "Background",
    "Category",
    "CharacterClass",
    "CharacterSheet",
    "DiceRoll",
    "DieType",
    "NarrativeEntry",
    "NarrativeRole",
    "QuestionRecord",
    "QuestionsSession",
    "Race",
    "SessionStatus",
    "Skill",
]
