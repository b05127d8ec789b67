"""
questions.py

PURPOSE: State of a 20 Questions game.
DEPENDENCIES: pydantic

ARCHITECTURE NOTES:
QuestionsSession is a plain data object; the engine decides when a
transition is allowed and the session only guards its own invariants:
- remaining never goes below zero
- remaining always equals max_questions minus the questions recorded
- a terminal session accepts no further questions
These are re-checked on load, so a hand-edited save that breaks them is
rejected as corrupt instead of being played.
"""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from oracle_games.models.common import SLOT_PATTERN, new_session_id, utc_now


class Category(str, Enum):
    """What kind of subject the oracle is hiding."""

    PERSON = "Person"
    PLACE = "Place"
    THING = "Thing"

    @classmethod
    def lookup(cls, name: str) -> "Category":
        for category in cls:
            if category.value.lower() == name.strip().lower():
                return category
        raise ValueError(f"Unknown category: {name}")


class Answer(str, Enum):
    """The three answers the oracle may give to a question."""

    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.IN_PROGRESS


class QuestionRecord(BaseModel):
    """One asked question and the answer it got."""

    number: int = Field(..., ge=1)
    question: str = Field(..., min_length=1)
    answer: Answer
    asked_at: datetime = Field(default_factory=utc_now)


class QuestionsSession(BaseModel):
    """A 20 Questions game, from first question to final guess."""

    kind: Literal["questions"] = "questions"
    id: str = Field(default_factory=new_session_id)
    slot: str = Field(default="questions", pattern=SLOT_PATTERN)
    category: Category
    subject: str = Field(..., min_length=1, description="The hidden answer")
    max_questions: int = Field(default=20, gt=0)
    remaining: int = Field(default=20, ge=0)
    questions: list[QuestionRecord] = Field(default_factory=list)
    guesses: list[str] = Field(default_factory=list)
    status: SessionStatus = SessionStatus.IN_PROGRESS
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _check_budget(self) -> "QuestionsSession":
        if self.remaining != self.max_questions - len(self.questions):
            raise ValueError(
                f"remaining={self.remaining} does not match "
                f"{len(self.questions)} of {self.max_questions} questions asked"
            )
        return self

    @classmethod
    def start(
        cls,
        category: Category,
        subject: str,
        max_questions: int = 20,
        slot: str = "questions",
    ) -> "QuestionsSession":
        return cls(
            category=category,
            subject=subject,
            max_questions=max_questions,
            remaining=max_questions,
            slot=slot,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def questions_asked(self) -> int:
        return len(self.questions)

    @property
    def awaiting_guess(self) -> bool:
        """True when the budget is spent but the game is still open."""
        return not self.is_terminal and self.remaining == 0

    def record_answer(self, question: str, answer: Answer) -> QuestionRecord:
        """Spend one question and remember what the oracle said."""
        if self.is_terminal:
            raise ValueError(f"Session is already {self.status.value}")
        if self.remaining == 0:
            raise ValueError("No questions remaining")

        record = QuestionRecord(number=len(self.questions) + 1, question=question, answer=answer)
        self.questions.append(record)
        self.remaining -= 1
        self.touch()
        return record

    def finish(self, status: SessionStatus) -> None:
        if not status.is_terminal:
            raise ValueError("finish() needs a terminal status")
        if self.is_terminal:
            raise ValueError(f"Session is already {self.status.value}")
        self.status = status
        self.touch()

    def touch(self) -> None:
        self.updated_at = utc_now()
