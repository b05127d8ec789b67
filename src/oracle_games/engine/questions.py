"""
questions.py

PURPOSE: Game engine for 20 Questions.
DEPENDENCIES: models, oracle, storage

ARCHITECTURE NOTES:
The QuestionsEngine owns one QuestionsSession and is the only thing that
mutates it. Each turn follows the same order:
1. Check the session can take the action (else SessionTerminal)
2. Consult the oracle; if this raises, nothing has changed yet
3. Apply the result to the session
4. Auto-save

So a timed-out or rate-limited question costs the player nothing and can
simply be asked again.
"""

import logging
import random
import re
from dataclasses import dataclass
from enum import Enum

from oracle_games.engine.dice import roll_dice
from oracle_games.errors import InvalidInput, OracleInvalidResponse, SessionTerminal
from oracle_games.models.dice import DiceRoll, DieType
from oracle_games.models.questions import Answer, Category, QuestionsSession, SessionStatus
from oracle_games.observability import get_tracer
from oracle_games.oracle.base import Oracle, QuestionContext
from oracle_games.storage.store import SessionStore, commit

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

_ARTICLES = re.compile(r"^(a|an|the)\s+")


class ExhaustionPolicy(str, Enum):
    """What happens when the last question has been answered."""

    FORCED_GUESS = "forced_guess"  # stay open until the player guesses
    AUTO_LOSS = "auto_loss"  # the game is lost immediately


@dataclass
class AnswerResult:
    """Outcome of one question."""

    question: str
    answer: Answer
    remaining: int
    degraded: bool = False  # the oracle's reply was unusable; recorded as UNKNOWN
    status: SessionStatus = SessionStatus.IN_PROGRESS

    @property
    def must_guess(self) -> bool:
        return self.remaining == 0 and self.status is SessionStatus.IN_PROGRESS


@dataclass
class GuessResult:
    """Outcome of a guess. Always ends the game."""

    guess: str
    correct: bool
    subject: str
    status: SessionStatus
    questions_used: int


def normalize_guess(text: str) -> str:
    """Lowercase, drop punctuation and a leading article, collapse spaces."""
    words = re.sub(r"[^\w\s]", " ", text.lower())
    collapsed = " ".join(words.split())
    return _ARTICLES.sub("", collapsed)


class QuestionsEngine:
    """
    Runs a game of 20 Questions against an oracle.

    The session is passed in explicitly (new or loaded from a save), so
    several engines can coexist in one process.
    """

    def __init__(
        self,
        session: QuestionsSession,
        oracle: Oracle,
        store: SessionStore | None = None,
        exhaustion_policy: ExhaustionPolicy = ExhaustionPolicy.FORCED_GUESS,
        rng: random.Random | None = None,
    ):
        """
        Initialize the engine.

        Args:
            session: The session to play (fresh or loaded).
            oracle: Who answers the questions.
            store: Where to auto-save after each change. No saving when None.
            exhaustion_policy: What to do once the question budget is spent.
            rng: Random source for dice rolls.
        """
        self.session = session
        self._oracle = oracle
        self._store = store
        self._policy = ExhaustionPolicy(exhaustion_policy)
        self._rng = rng

    @classmethod
    async def new_game(
        cls,
        category: Category,
        oracle: Oracle,
        store: SessionStore | None = None,
        *,
        slot: str = "questions",
        max_questions: int = 20,
        exhaustion_policy: ExhaustionPolicy = ExhaustionPolicy.FORCED_GUESS,
    ) -> "QuestionsEngine":
        """
        Have the oracle pick a subject and start a session in `slot`.

        Any previous save in the slot is overwritten.
        """
        with tracer.start_as_current_span("questions.new_game") as span:
            span.set_attribute("questions.category", category.value)
            subject = await oracle.generate_subject(category)
            session = QuestionsSession.start(
                category=category,
                subject=subject,
                max_questions=max_questions,
                slot=slot,
            )
            engine = cls(session, oracle, store, exhaustion_policy)
            engine._save()

        logger.info(f"New 20 Questions game {session.id} ({category.value}) in slot '{slot}'")
        return engine

    def _ensure_open(self) -> None:
        if self.session.is_terminal:
            raise SessionTerminal(
                f"This game is over ({self.session.status.value}). Start a new game to play again."
            )

    def _save(self) -> None:
        if self._store is not None:
            self._store.save(self.session)

    async def ask_question(self, text: str) -> AnswerResult:
        """
        Ask the oracle a yes/no question.

        The question budget is only spent once an answer has been obtained.
        An unusable reply is recorded as UNKNOWN (and still costs a question).

        Raises:
            InvalidInput: If the question is blank
            SessionTerminal: If the game is over or no questions remain
            OracleUnavailable: If the oracle could not be reached (nothing changes)
            OracleRateLimited: If the oracle refused the call (nothing changes)
            SaveError: If the auto-save failed (the question is not spent)
        """
        self._ensure_open()
        question = " ".join(text.split())
        if not question:
            raise InvalidInput("Ask a question first")
        if self.session.remaining == 0:
            raise SessionTerminal("You have no questions left. Make your final guess.")

        with tracer.start_as_current_span("questions.ask") as span:
            span.set_attribute("questions.number", self.session.questions_asked + 1)

            context = QuestionContext(
                category=self.session.category,
                subject=self.session.subject,
                history=list(self.session.questions),
            )
            degraded = False
            try:
                answer = await self._oracle.ask(context, question)
            except OracleInvalidResponse as e:
                logger.warning(f"Recording 'unknown' after unusable oracle reply: {e}")
                answer = Answer.UNKNOWN
                degraded = True

            with commit(self.session, self._store):
                self.session.record_answer(question, answer)
                if self.session.remaining == 0 and self._policy is ExhaustionPolicy.AUTO_LOSS:
                    self.session.finish(SessionStatus.LOST)
            if self.session.status is SessionStatus.LOST:
                logger.info(f"Game {self.session.id} lost: question budget exhausted")

            span.set_attribute("questions.answer", answer.value)
            span.set_attribute("questions.remaining", self.session.remaining)

        return AnswerResult(
            question=question,
            answer=answer,
            remaining=self.session.remaining,
            degraded=degraded,
            status=self.session.status,
        )

    async def make_guess(self, text: str) -> GuessResult:
        """
        Guess the subject. Right or wrong, the game ends.

        An exact match (ignoring case, punctuation and articles) wins without
        consulting the oracle; anything else is judged by the oracle.

        Raises:
            InvalidInput: If the guess is blank
            SessionTerminal: If the game is already over
            OracleError: If the oracle could not judge the guess (nothing changes)
            SaveError: If the auto-save failed (the game stays open)
        """
        self._ensure_open()
        guess = " ".join(text.split())
        if not normalize_guess(guess):
            raise InvalidInput("Guess something")

        with tracer.start_as_current_span("questions.guess") as span:
            subject = self.session.subject
            correct = normalize_guess(guess) == normalize_guess(subject)
            if not correct:
                correct = await self._oracle.check_guess(subject, guess)

            with commit(self.session, self._store):
                self.session.guesses.append(guess)
                self.session.finish(SessionStatus.WON if correct else SessionStatus.LOST)
            span.set_attribute("questions.correct", correct)

        logger.info(
            f"Game {self.session.id} {self.session.status.value} "
            f"after {self.session.questions_asked} questions"
        )
        return GuessResult(
            guess=guess,
            correct=correct,
            subject=subject,
            status=self.session.status,
            questions_used=self.session.questions_asked,
        )

    def abandon(self) -> None:
        """
        Give up on the game.

        Raises:
            SessionTerminal: If the game is already over
        """
        self._ensure_open()
        with commit(self.session, self._store):
            self.session.finish(SessionStatus.ABANDONED)

    def roll_dice(self, die: DieType | int, count: int = 1) -> DiceRoll:
        return roll_dice(die, count, self._rng)
