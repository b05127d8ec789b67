"""
TEST DOC: 20 Questions Engine

WHAT: Tests for the QuestionsEngine turn rules
WHY: The question budget and game status must only change on real answers
HOW: Drive the engine with a scripted FakeOracle and a temporary store

CASES:
- New game picks a subject and saves it
- Each answered question spends one from the budget and auto-saves
- Exact and oracle-judged guesses
- Giving up
- Resuming a saved game mid-way

EDGE CASES:
- 21st question after 20 answers
- Oracle timeout / rate limit leaves the session unchanged
- Unusable oracle reply is recorded as unknown
- A failed auto-save does not spend the question or end the game
- Auto-loss exhaustion policy
- Actions after the game is over
- Blank input, including on a finished game
"""

import pytest

from oracle_games.engine.questions import ExhaustionPolicy, QuestionsEngine, normalize_guess
from oracle_games.errors import (
    InvalidInput,
    OracleInvalidResponse,
    OracleRateLimited,
    OracleUnavailable,
    SaveError,
    SessionTerminal,
)
from oracle_games.models.dice import DieType
from oracle_games.models.questions import Answer, Category, QuestionsSession, SessionStatus
from oracle_games.storage.store import SessionStore


@pytest.fixture
def engine(questions_session: QuestionsSession, fake_oracle, store: SessionStore):
    return QuestionsEngine(questions_session, fake_oracle, store)


class TestNewGame:
    """Tests for starting a game."""

    @pytest.mark.asyncio
    async def test_new_game_saves_session(self, store: SessionStore, make_oracle):
        oracle = make_oracle(subject="Ada Lovelace")
        engine = await QuestionsEngine.new_game(Category.PERSON, oracle, store, max_questions=10)

        assert engine.session.subject == "Ada Lovelace"
        assert engine.session.remaining == 10
        assert store.load("questions").id == engine.session.id

    @pytest.mark.asyncio
    async def test_new_game_failure_writes_nothing(self, store: SessionStore, make_oracle):
        oracle = make_oracle(subject=OracleUnavailable("down"))
        with pytest.raises(OracleUnavailable):
            await QuestionsEngine.new_game(Category.THING, oracle, store)
        assert not store.exists("questions")


class TestAskQuestion:
    """Tests for asking questions."""

    @pytest.mark.asyncio
    async def test_answer_spends_a_question(
        self, engine: QuestionsEngine, fake_oracle, store: SessionStore
    ):
        fake_oracle.answers = [Answer.YES]
        result = await engine.ask_question("  Is it in   Europe? ")

        assert result.answer is Answer.YES
        assert result.question == "Is it in Europe?"
        assert result.remaining == 19
        assert store.load("questions").remaining == 19

    @pytest.mark.asyncio
    async def test_oracle_sees_history(self, engine: QuestionsEngine, fake_oracle):
        await engine.ask_question("Is it alive?")
        await engine.ask_question("Is it big?")
        context, question = fake_oracle.questions[-1]
        assert question == "Is it big?"
        assert [record.question for record in context.history] == ["Is it alive?"]
        assert context.subject == "Eiffel Tower"

    @pytest.mark.asyncio
    async def test_twenty_first_question_is_refused(self, store: SessionStore, fake_oracle):
        engine = await QuestionsEngine.new_game(Category.THING, fake_oracle, store)
        for i in range(20):
            result = await engine.ask_question(f"Question {i}?")
            assert result.answer is Answer.NO
        assert result.remaining == 0
        assert result.must_guess

        with pytest.raises(SessionTerminal):
            await engine.ask_question("Is it a tower?")
        assert engine.session.remaining == 0
        assert len(fake_oracle.questions) == 20

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [OracleUnavailable("timed out"), OracleRateLimited("slow down")]
    )
    async def test_oracle_failure_changes_nothing(
        self, engine: QuestionsEngine, fake_oracle, store: SessionStore, error: Exception
    ):
        await engine.ask_question("Is it alive?")
        fake_oracle.answers = [error]

        with pytest.raises(type(error)):
            await engine.ask_question("Is it big?")

        assert engine.session.remaining == 19
        assert engine.session.questions_asked == 1
        assert store.load("questions").remaining == 19

        # The same question can simply be asked again
        result = await engine.ask_question("Is it big?")
        assert result.remaining == 18

    @pytest.mark.asyncio
    async def test_unusable_reply_counts_as_unknown(self, engine: QuestionsEngine, fake_oracle):
        fake_oracle.answers = [OracleInvalidResponse("maybe?")]
        result = await engine.ask_question("Is it loved?")

        assert result.answer is Answer.UNKNOWN
        assert result.degraded
        assert result.remaining == 19

    @pytest.mark.asyncio
    async def test_blank_question(self, engine: QuestionsEngine, fake_oracle):
        with pytest.raises(InvalidInput):
            await engine.ask_question("   ")
        assert engine.session.remaining == 20
        assert fake_oracle.questions == []

    @pytest.mark.asyncio
    async def test_blank_question_after_game_over(self, engine: QuestionsEngine):
        engine.abandon()
        with pytest.raises(SessionTerminal):
            await engine.ask_question("   ")
        with pytest.raises(SessionTerminal):
            await engine.make_guess("")

    @pytest.mark.asyncio
    async def test_failed_save_keeps_the_question(
        self,
        engine: QuestionsEngine,
        store: SessionStore,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def fail(session):
            raise SaveError("disk full")

        monkeypatch.setattr(store, "save", fail)
        with pytest.raises(SaveError):
            await engine.ask_question("Is it tall?")

        assert engine.session.remaining == 20
        assert engine.session.questions == []

        monkeypatch.undo()
        result = await engine.ask_question("Is it tall?")
        assert result.remaining == 19

    @pytest.mark.asyncio
    async def test_auto_loss_policy(self, store: SessionStore, make_oracle):
        session = QuestionsSession.start(Category.THING, "teapot", max_questions=2)
        engine = QuestionsEngine(session, make_oracle(), store, ExhaustionPolicy.AUTO_LOSS)

        first = await engine.ask_question("Is it alive?")
        assert first.status is SessionStatus.IN_PROGRESS
        last = await engine.ask_question("Is it metal?")

        assert last.status is SessionStatus.LOST
        assert not last.must_guess
        assert store.load("questions").status is SessionStatus.LOST
        with pytest.raises(SessionTerminal):
            await engine.make_guess("teapot")


class TestGuess:
    """Tests for guessing."""

    @pytest.mark.asyncio
    async def test_exact_guess_wins_without_oracle(
        self, engine: QuestionsEngine, fake_oracle, store: SessionStore
    ):
        result = await engine.make_guess("the eiffel tower!")

        assert result.correct
        assert result.status is SessionStatus.WON
        assert fake_oracle.guesses == []
        assert store.load("questions").status is SessionStatus.WON

    @pytest.mark.asyncio
    async def test_oracle_judges_near_miss(self, engine: QuestionsEngine, fake_oracle):
        fake_oracle.verdicts = [True]
        result = await engine.make_guess("La Tour Eiffel")

        assert result.correct
        assert fake_oracle.guesses == [("Eiffel Tower", "La Tour Eiffel")]

    @pytest.mark.asyncio
    async def test_wrong_guess_loses(self, engine: QuestionsEngine):
        await engine.ask_question("Is it in Europe?")
        result = await engine.make_guess("Big Ben")

        assert not result.correct
        assert result.status is SessionStatus.LOST
        assert result.subject == "Eiffel Tower"
        assert result.questions_used == 1
        assert engine.session.guesses == ["Big Ben"]

    @pytest.mark.asyncio
    async def test_guess_after_budget_spent(self, store: SessionStore, make_oracle):
        session = QuestionsSession.start(Category.PLACE, "Eiffel Tower", max_questions=1)
        engine = QuestionsEngine(session, make_oracle(), store)
        await engine.ask_question("Is it in Paris?")

        result = await engine.make_guess("Eiffel Tower")
        assert result.status is SessionStatus.WON

    @pytest.mark.asyncio
    async def test_judging_failure_changes_nothing(self, engine: QuestionsEngine, fake_oracle):
        fake_oracle.verdicts = [OracleUnavailable("down")]
        with pytest.raises(OracleUnavailable):
            await engine.make_guess("Big Ben")
        assert engine.session.status is SessionStatus.IN_PROGRESS
        assert engine.session.guesses == []

    @pytest.mark.asyncio
    async def test_failed_save_keeps_game_open(
        self,
        engine: QuestionsEngine,
        store: SessionStore,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def fail(session):
            raise SaveError("disk full")

        monkeypatch.setattr(store, "save", fail)
        with pytest.raises(SaveError):
            await engine.make_guess("Eiffel Tower")

        assert engine.session.status is SessionStatus.IN_PROGRESS
        assert engine.session.guesses == []

    @pytest.mark.asyncio
    async def test_no_questions_after_game_over(self, engine: QuestionsEngine):
        await engine.make_guess("Eiffel Tower")
        with pytest.raises(SessionTerminal):
            await engine.ask_question("Is it tall?")
        with pytest.raises(SessionTerminal):
            await engine.make_guess("Eiffel Tower")

    def test_normalize_guess(self):
        assert normalize_guess("  The  Eiffel-Tower. ") == "eiffel tower"
        assert normalize_guess("An apple") == "apple"


class TestLifecycle:
    """Tests for abandoning, resuming and dice."""

    def test_abandon(self, engine: QuestionsEngine, store: SessionStore):
        engine.abandon()
        assert store.load("questions").status is SessionStatus.ABANDONED
        with pytest.raises(SessionTerminal):
            engine.abandon()

    @pytest.mark.asyncio
    async def test_resume_mid_game(
        self, engine: QuestionsEngine, store: SessionStore, make_oracle
    ):
        for i in range(5):
            await engine.ask_question(f"Question {i}?")

        restored = store.load("questions")
        assert restored.remaining == 15

        resumed = QuestionsEngine(restored, make_oracle(answers=[Answer.YES]), store)
        result = await resumed.ask_question("Is it made of iron?")
        assert result.remaining == 14
        assert result.answer is Answer.YES

    def test_roll_dice(self, engine: QuestionsEngine):
        roll = engine.roll_dice(DieType.D6, 3)
        assert roll.total == sum(roll.rolls)
        assert engine.session.questions_asked == 0
