"""
adventure.py

PURPOSE: Game engine for the D&D adventure.
DEPENDENCIES: models, oracle, storage, dice

ARCHITECTURE NOTES:
Same turn discipline as the QuestionsEngine: consult the oracle first,
mutate and auto-save only once it has answered. Skill checks are rolled
and totalled here; the oracle only interprets the result.
"""

import logging
import random
from dataclasses import dataclass

from oracle_games.engine.dice import roll_dice
from oracle_games.errors import InvalidInput, SessionTerminal
from oracle_games.models.adventure import AdventureSession, AdventureStatus
from oracle_games.models.character import Ability, CharacterSheet, Skill
from oracle_games.models.dice import DiceRoll, DieType
from oracle_games.observability import get_tracer
from oracle_games.oracle.base import NarrationContext, Oracle
from oracle_games.storage.store import SessionStore, commit

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

DEFAULT_CAMPAIGN = "Mystical Adventure"
DEFAULT_LOCATION = "Starting Town"
DEFAULT_QUEST = "Find adventure"
OPENING_ACTION = "Begin the adventure."


@dataclass
class NarrationResult:
    action: str
    narration: str


@dataclass
class SkillCheckResult:
    """A resolved skill check and the Dungeon Master's reading of it."""

    skill: Skill
    roll: DiceRoll
    ability: Ability
    ability_modifier: int
    proficiency_bonus: int  # 0 when not proficient
    narration: str

    @property
    def natural(self) -> int:
        return self.roll.rolls[0]

    @property
    def modifier(self) -> int:
        return self.ability_modifier + self.proficiency_bonus

    @property
    def total(self) -> int:
        return self.natural + self.modifier


class AdventureEngine:
    """Runs a D&D adventure with the oracle as Dungeon Master."""

    def __init__(
        self,
        session: AdventureSession,
        oracle: Oracle,
        store: SessionStore | None = None,
        rng: random.Random | None = None,
        history_window: int = 20,
    ):
        self.session = session
        self._oracle = oracle
        self._store = store
        self._rng = rng
        self._history_window = history_window

    @classmethod
    async def start_campaign(
        cls,
        character: CharacterSheet,
        oracle: Oracle,
        store: SessionStore | None = None,
        *,
        slot: str = "adventure",
        rng: random.Random | None = None,
    ) -> "AdventureEngine":
        """
        Ask the oracle for a campaign opening and save the new session in `slot`.

        Missing campaign details fall back to generic defaults.
        """
        with tracer.start_as_current_span("adventure.start_campaign") as span:
            span.set_attribute("adventure.class", character.character_class.value)
            opening = await oracle.open_campaign(character)

            session = AdventureSession(
                slot=slot,
                character=character,
                campaign=opening.campaign or DEFAULT_CAMPAIGN,
                current_location=opening.location or DEFAULT_LOCATION,
                current_quest=opening.quest or DEFAULT_QUEST,
            )
            session.record_exchange(OPENING_ACTION, opening.introduction)
            engine = cls(session, oracle, store, rng)
            engine.save()

        logger.info(f"New campaign '{session.campaign}' for {character.name} in slot '{slot}'")
        return engine

    @property
    def character(self) -> CharacterSheet:
        return self.session.character

    def _ensure_open(self) -> None:
        if self.session.is_terminal:
            raise SessionTerminal("This adventure has ended. Start a new one to keep playing.")

    def _context(self) -> NarrationContext:
        return NarrationContext(
            character=self.character,
            campaign=self.session.campaign,
            location=self.session.current_location,
            quest=self.session.current_quest,
            recent=self.session.recent_log(self._history_window),
        )

    def save(self) -> None:
        if self._store is not None:
            self._store.save(self.session)

    async def take_action(self, text: str) -> NarrationResult:
        """
        Describe what the character does and get the Dungeon Master's narration.

        Raises:
            InvalidInput: If the action is blank
            SessionTerminal: If the adventure has ended
            OracleError: If the oracle fails (nothing changes)
            SaveError: If the auto-save failed (nothing changes)
        """
        self._ensure_open()
        action = " ".join(text.split())
        if not action:
            raise InvalidInput("Describe what your character does")

        with tracer.start_as_current_span("adventure.action"):
            narration = await self._oracle.narrate(
                self._context(), f"takes the following action: {action}"
            )
            with commit(self.session, self._store):
                self.session.record_exchange(action, narration)

        return NarrationResult(action=action, narration=narration)

    async def skill_check(self, skill: Skill | str) -> SkillCheckResult:
        """
        Roll d20 + ability modifier (+ proficiency bonus if proficient).

        Raises:
            InvalidInput: If the skill name is not recognised
            SessionTerminal: If the adventure has ended
            OracleError: If the oracle fails (nothing changes)
            SaveError: If the auto-save failed (nothing changes)
        """
        self._ensure_open()
        if isinstance(skill, str) and not isinstance(skill, Skill):
            try:
                skill = Skill.lookup(skill)
            except ValueError as e:
                raise InvalidInput(str(e)) from None

        character = self.character
        roll = roll_dice(DieType.D20, 1, self._rng)
        ability = skill.ability
        ability_mod = character.abilities.modifier(ability)
        proficiency = character.proficiency_bonus if character.is_proficient(skill) else 0
        total = roll.total + ability_mod + proficiency

        proficiency_text = f", proficiency {proficiency:+d}" if proficiency else ""
        description = (
            f"rolls a {skill.value} check: {roll.total} on the d20, "
            f"{ability.abbreviation} modifier {ability_mod:+d}{proficiency_text}, total {total}."
        )

        with tracer.start_as_current_span("adventure.skill_check") as span:
            span.set_attribute("adventure.skill", skill.value)
            span.set_attribute("adventure.total", total)
            narration = await self._oracle.narrate(self._context(), description)
            with commit(self.session, self._store):
                self.session.record_exchange(f"[{skill.value} check: {total}]", narration)

        return SkillCheckResult(
            skill=skill,
            roll=roll,
            ability=ability,
            ability_modifier=ability_mod,
            proficiency_bonus=proficiency,
            narration=narration,
        )

    def roll(self, die: DieType | int, count: int = 1) -> DiceRoll:
        """Roll dice outside any check. Does not touch the session."""
        return roll_dice(die, count, self._rng)

    def abandon(self) -> None:
        self._ensure_open()
        with commit(self.session, self._store):
            self.session.status = AdventureStatus.ABANDONED
            self.session.touch()
