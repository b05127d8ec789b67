"""Game engine module."""

from oracle_games.engine.adventure import AdventureEngine, NarrationResult, SkillCheckResult
from oracle_games.engine.dice import parse_notation, roll_dice, roll_notation
from oracle_games.engine.questions import (
    AnswerResult,
    ExhaustionPolicy,
    GuessResult,
    QuestionsEngine,
)

__all__ = [
    "AdventureEngine",
    "AnswerResult",
    "ExhaustionPolicy",
    "GuessResult",
    "NarrationResult",
    "QuestionsEngine",
    "SkillCheckResult",
    "parse_notation",
    "roll_dice",
    "roll_notation",
]
