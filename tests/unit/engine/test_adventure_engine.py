"""
TEST DOC: Adventure Engine

WHAT: Tests for the AdventureEngine
WHY: Actions and skill checks must be logged and saved only when narrated
HOW: Drive the engine with a scripted FakeOracle and a temporary store

CASES:
- Starting a campaign from the oracle's opening
- Taking actions appends to the narrative log
- Skill checks add ability modifier and proficiency bonus
- The oracle sees recent history each turn

EDGE CASES:
- Blank campaign fields fall back to defaults
- Unknown skill names
- Oracle failures and failed auto-saves leave the session unchanged
- Actions after the adventure has ended
"""

import random

import pytest

from oracle_games.engine.adventure import (
    DEFAULT_CAMPAIGN,
    DEFAULT_LOCATION,
    DEFAULT_QUEST,
    AdventureEngine,
)
from oracle_games.errors import (
    InvalidInput,
    OracleInvalidResponse,
    OracleUnavailable,
    SaveError,
    SessionTerminal,
)
from oracle_games.models.adventure import AdventureSession, AdventureStatus, NarrativeRole
from oracle_games.models.character import Ability, CharacterSheet, Skill
from oracle_games.models.dice import DieType
from oracle_games.oracle.base import CampaignOpening
from oracle_games.storage.store import SessionStore


@pytest.fixture
def engine(adventure_session: AdventureSession, fake_oracle, store: SessionStore):
    return AdventureEngine(adventure_session, fake_oracle, store, rng=random.Random(42))


class TestStartCampaign:
    """Tests for starting a campaign."""

    @pytest.mark.asyncio
    async def test_start_campaign(
        self, sample_character: CharacterSheet, fake_oracle, store: SessionStore
    ):
        engine = await AdventureEngine.start_campaign(sample_character, fake_oracle, store)
        session = engine.session

        assert session.campaign == "The Sunken Crown"
        assert session.current_location == "Saltmarsh"
        assert session.current_quest == "Find the drowned king's crown"
        assert session.last_narration == "Fog rolls in off the harbour. What do you do?"
        assert session.log[0].role is NarrativeRole.PLAYER

        loaded = store.load("adventure")
        assert loaded.character.name == "Mira"

    @pytest.mark.asyncio
    async def test_blank_fields_use_defaults(
        self, sample_character: CharacterSheet, make_oracle, store: SessionStore
    ):
        oracle = make_oracle(
            opening=CampaignOpening(
                campaign="", location="", quest="", introduction="You wake in a ditch."
            )
        )
        engine = await AdventureEngine.start_campaign(
            sample_character, oracle, store, slot="ditch"
        )

        assert engine.session.campaign == DEFAULT_CAMPAIGN
        assert engine.session.current_location == DEFAULT_LOCATION
        assert engine.session.current_quest == DEFAULT_QUEST
        assert store.exists("ditch")

    @pytest.mark.asyncio
    async def test_failed_opening_saves_nothing(
        self, sample_character: CharacterSheet, make_oracle, store: SessionStore
    ):
        oracle = make_oracle(opening=OracleUnavailable("down"))
        with pytest.raises(OracleUnavailable):
            await AdventureEngine.start_campaign(sample_character, oracle, store)
        assert not store.exists("adventure")


class TestTakeAction:
    """Tests for free-text actions."""

    @pytest.mark.asyncio
    async def test_action_is_narrated_and_saved(
        self, engine: AdventureEngine, fake_oracle, store: SessionStore
    ):
        fake_oracle.narrations = ["The guard waves you through."]
        result = await engine.take_action("  I show the guard   my papers ")

        assert result.action == "I show the guard my papers"
        assert result.narration == "The guard waves you through."
        assert engine.session.log[-2].text == "I show the guard my papers"
        assert store.load("adventure").last_narration == "The guard waves you through."

    @pytest.mark.asyncio
    async def test_oracle_gets_context(self, engine: AdventureEngine, fake_oracle):
        await engine.take_action("I look around")
        context, action = fake_oracle.actions[-1]

        assert "I look around" in action
        assert context.campaign == "The Sunken Crown"
        assert context.character.name == "Mira"
        assert context.recent[-1].text == "Fog rolls in off the harbour."

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [OracleUnavailable("timed out"), OracleInvalidResponse("")]
    )
    async def test_oracle_failure_changes_nothing(
        self, engine: AdventureEngine, fake_oracle, store: SessionStore, error: Exception
    ):
        store.save(engine.session)
        before = len(engine.session.log)
        fake_oracle.narrations = [error]

        with pytest.raises(type(error)):
            await engine.take_action("I jump into the sea")

        assert len(engine.session.log) == before
        assert len(store.load("adventure").log) == before

    @pytest.mark.asyncio
    async def test_failed_save_is_not_logged(
        self,
        engine: AdventureEngine,
        store: SessionStore,
        monkeypatch: pytest.MonkeyPatch,
    ):
        before = engine.session.model_copy(deep=True)

        def fail(session):
            raise SaveError("disk full")

        monkeypatch.setattr(store, "save", fail)
        with pytest.raises(SaveError):
            await engine.take_action("I jump into the sea")
        with pytest.raises(SaveError):
            await engine.skill_check("athletics")
        with pytest.raises(SaveError):
            engine.abandon()

        assert engine.session == before
        assert engine.session.status is AdventureStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_blank_action(self, engine: AdventureEngine, fake_oracle):
        with pytest.raises(InvalidInput):
            await engine.take_action("   ")
        assert fake_oracle.actions == []


class TestSkillCheck:
    """Tests for skill checks."""

    @pytest.mark.asyncio
    async def test_proficient_check(self, engine: AdventureEngine, fake_oracle):
        fake_oracle.narrations = ["You melt into the shadows."]
        result = await engine.skill_check("stealth")

        assert result.skill is Skill.STEALTH
        assert result.ability is Ability.DEXTERITY
        assert result.ability_modifier == 3
        assert result.proficiency_bonus == 2
        assert 1 <= result.natural <= 20
        assert result.total == result.natural + 5
        assert result.narration == "You melt into the shadows."

        assert engine.session.log[-2].text == f"[Stealth check: {result.total}]"
        _, description = fake_oracle.actions[-1]
        assert f"total {result.total}" in description

    @pytest.mark.asyncio
    async def test_unproficient_check(self, engine: AdventureEngine):
        result = await engine.skill_check(Skill.ATHLETICS)

        assert result.ability_modifier == -1
        assert result.proficiency_bonus == 0
        assert result.total == result.natural - 1

    @pytest.mark.asyncio
    async def test_unknown_skill(self, engine: AdventureEngine, fake_oracle):
        with pytest.raises(InvalidInput, match="juggling"):
            await engine.skill_check("juggling")
        assert fake_oracle.actions == []

    @pytest.mark.asyncio
    async def test_failed_check_is_not_logged(self, engine: AdventureEngine, fake_oracle):
        before = len(engine.session.log)
        fake_oracle.narrations = [OracleUnavailable("down")]
        with pytest.raises(OracleUnavailable):
            await engine.skill_check("perception")
        assert len(engine.session.log) == before


class TestLifecycle:
    """Tests for dice, saving and ending an adventure."""

    def test_roll_does_not_touch_session(self, engine: AdventureEngine):
        before = engine.session.model_dump()
        roll = engine.roll(DieType.D8, 2)

        assert roll.notation == "2d8"
        assert engine.session.model_dump() == before

    @pytest.mark.asyncio
    async def test_abandon(self, engine: AdventureEngine, store: SessionStore):
        engine.abandon()

        assert store.load("adventure").status is AdventureStatus.ABANDONED
        with pytest.raises(SessionTerminal):
            await engine.take_action("I keep going")
        with pytest.raises(SessionTerminal):
            await engine.skill_check("stealth")
