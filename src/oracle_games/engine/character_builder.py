"""
character_builder.py

PURPOSE: Build a level 1 character from the player's choices.
DEPENDENCIES: models, dice

ARCHITECTURE NOTES:
The CLI asks the questions; this module owns the rules:
- how ability scores are generated (4d6 drop lowest, standard array, point buy)
- which skills each class may pick and how many
- starting hit points, armor class, equipment and gold
"""

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from oracle_games.engine.dice import roll_ability_score
from oracle_games.errors import InvalidInput
from oracle_games.models.character import (
    Ability,
    AbilityScores,
    Background,
    CharacterClass,
    CharacterSheet,
    Race,
    Skill,
)


class ScoreMethod(str, Enum):
    ROLL = "roll"
    STANDARD_ARRAY = "standard"
    POINT_BUY = "point-buy"

    @property
    def label(self) -> str:
        return {
            ScoreMethod.ROLL: "Roll 4d6 (drop lowest)",
            ScoreMethod.STANDARD_ARRAY: "Standard Array",
            ScoreMethod.POINT_BUY: "Point Buy (27 points)",
        }[self]


STANDARD_ARRAY = (15, 14, 13, 12, 10, 8)
POINT_BUY_SPREAD = (13, 13, 13, 12, 12, 8)

# Classes not listed fall back to DEFAULT_CLASS_SKILLS
CLASS_SKILLS: dict[CharacterClass, tuple[Skill, ...]] = {
    CharacterClass.BARBARIAN: (
        Skill.ANIMAL_HANDLING,
        Skill.ATHLETICS,
        Skill.INTIMIDATION,
        Skill.NATURE,
        Skill.PERCEPTION,
        Skill.SURVIVAL,
    ),
    CharacterClass.BARD: tuple(Skill),
    CharacterClass.CLERIC: (
        Skill.HISTORY,
        Skill.INSIGHT,
        Skill.MEDICINE,
        Skill.PERSUASION,
        Skill.RELIGION,
    ),
    CharacterClass.DRUID: (
        Skill.ARCANA,
        Skill.ANIMAL_HANDLING,
        Skill.INSIGHT,
        Skill.MEDICINE,
        Skill.NATURE,
        Skill.PERCEPTION,
        Skill.RELIGION,
        Skill.SURVIVAL,
    ),
    CharacterClass.FIGHTER: (
        Skill.ACROBATICS,
        Skill.ANIMAL_HANDLING,
        Skill.ATHLETICS,
        Skill.HISTORY,
        Skill.INSIGHT,
        Skill.INTIMIDATION,
        Skill.PERCEPTION,
        Skill.SURVIVAL,
    ),
    CharacterClass.MONK: (
        Skill.ACROBATICS,
        Skill.ATHLETICS,
        Skill.HISTORY,
        Skill.INSIGHT,
        Skill.RELIGION,
        Skill.STEALTH,
    ),
    CharacterClass.PALADIN: (
        Skill.ATHLETICS,
        Skill.INSIGHT,
        Skill.INTIMIDATION,
        Skill.MEDICINE,
        Skill.PERSUASION,
        Skill.RELIGION,
    ),
    CharacterClass.RANGER: (
        Skill.ANIMAL_HANDLING,
        Skill.ATHLETICS,
        Skill.INSIGHT,
        Skill.INVESTIGATION,
        Skill.NATURE,
        Skill.PERCEPTION,
        Skill.STEALTH,
        Skill.SURVIVAL,
    ),
    CharacterClass.ROGUE: (
        Skill.ACROBATICS,
        Skill.ATHLETICS,
        Skill.DECEPTION,
        Skill.INSIGHT,
        Skill.INTIMIDATION,
        Skill.INVESTIGATION,
        Skill.PERCEPTION,
        Skill.PERFORMANCE,
        Skill.PERSUASION,
        Skill.SLEIGHT_OF_HAND,
        Skill.STEALTH,
    ),
    CharacterClass.SORCERER: (
        Skill.ARCANA,
        Skill.DECEPTION,
        Skill.INSIGHT,
        Skill.INTIMIDATION,
        Skill.PERSUASION,
        Skill.RELIGION,
    ),
    CharacterClass.WARLOCK: (
        Skill.ARCANA,
        Skill.DECEPTION,
        Skill.HISTORY,
        Skill.INTIMIDATION,
        Skill.INVESTIGATION,
        Skill.NATURE,
        Skill.RELIGION,
    ),
    CharacterClass.WIZARD: (
        Skill.ARCANA,
        Skill.HISTORY,
        Skill.INSIGHT,
        Skill.INVESTIGATION,
        Skill.MEDICINE,
        Skill.RELIGION,
    ),
}

DEFAULT_CLASS_SKILLS = (
    Skill.ARCANA,
    Skill.HISTORY,
    Skill.INVESTIGATION,
    Skill.NATURE,
    Skill.RELIGION,
)

SKILL_CHOICES: dict[CharacterClass, int] = {
    CharacterClass.ROGUE: 4,
    CharacterClass.BARD: 3,
    CharacterClass.RANGER: 3,
}

HIT_DIE_BASE: dict[CharacterClass, int] = {
    CharacterClass.BARBARIAN: 12,
    CharacterClass.FIGHTER: 10,
    CharacterClass.PALADIN: 10,
    CharacterClass.RANGER: 10,
    CharacterClass.SORCERER: 6,
    CharacterClass.WIZARD: 6,
}


@dataclass(frozen=True)
class StartingKit:
    items: tuple[str, ...]
    gold: int


STARTING_KITS: dict[CharacterClass, StartingKit] = {
    CharacterClass.FIGHTER: StartingKit(
        ("Longsword", "Shield", "Chain mail", "Dungeoneer's pack"), gold=10
    ),
    CharacterClass.WIZARD: StartingKit(
        ("Spellbook", "Staff", "Component pouch", "Scholar's pack"), gold=25
    ),
    CharacterClass.CLERIC: StartingKit(("Mace", "Scale mail", "Shield", "Holy symbol"), gold=15),
    CharacterClass.ROGUE: StartingKit(
        ("Shortsword", "Shortbow with 20 arrows", "Leather armor", "Thieves' tools"), gold=30
    ),
}

DEFAULT_KIT = StartingKit(("Adventurer's pack", "Simple weapon"), gold=20)

COMMON_ITEMS = ("Backpack", "Bedroll", "Rations (5 days)", "Waterskin", "Torch (3)")


def generate_scores(method: ScoreMethod, rng: random.Random | None = None) -> list[int]:
    """Six scores, in generation order, for the player to assign."""
    if method is ScoreMethod.ROLL:
        return [roll_ability_score(rng)[0] for _ in Ability]
    if method is ScoreMethod.STANDARD_ARRAY:
        return list(STANDARD_ARRAY)
    return list(POINT_BUY_SPREAD)


def assign_scores(assignment: dict[Ability, int], pool: Sequence[int]) -> AbilityScores:
    """
    Check that `assignment` uses exactly the scores in `pool` and build AbilityScores.

    Raises:
        InvalidInput: If an ability is missing or the scores differ from the pool
    """
    missing = [ability.abbreviation for ability in Ability if ability not in assignment]
    if missing:
        raise InvalidInput(f"No score assigned to {', '.join(missing)}")
    if sorted(assignment.values()) != sorted(pool):
        raise InvalidInput("Each generated score must be used exactly once")
    return AbilityScores(**{ability.value: score for ability, score in assignment.items()})


def skill_options(character_class: CharacterClass) -> tuple[Skill, ...]:
    return CLASS_SKILLS.get(character_class, DEFAULT_CLASS_SKILLS)


def skill_choice_count(character_class: CharacterClass) -> int:
    return min(SKILL_CHOICES.get(character_class, 2), len(skill_options(character_class)))


def starting_hit_points(character_class: CharacterClass, abilities: AbilityScores) -> int:
    base = HIT_DIE_BASE.get(character_class, 8)
    return max(base + abilities.modifier(Ability.CONSTITUTION), 1)


def starting_armor_class(character_class: CharacterClass, abilities: AbilityScores) -> int:
    dex = abilities.modifier(Ability.DEXTERITY)
    if character_class is CharacterClass.FIGHTER:
        return 16  # chain mail
    if character_class is CharacterClass.CLERIC:
        return 14 + min(dex, 2)  # scale mail
    if character_class is CharacterClass.ROGUE:
        return max(11 + dex, 1)  # leather armor
    return max(10 + dex, 1)


def build_character(
    name: str,
    race: Race,
    character_class: CharacterClass,
    background: Background,
    abilities: AbilityScores,
    skills: Iterable[Skill],
) -> CharacterSheet:
    """
    Create a level 1 character sheet.

    Raises:
        InvalidInput: If the name is blank or the skills are not a valid pick
            for the class
    """
    name = name.strip()
    if not name:
        raise InvalidInput("Your character needs a name")

    chosen = set(skills)
    allowed = set(skill_options(character_class))
    not_allowed = sorted(skill.value for skill in chosen - allowed)
    if not_allowed:
        raise InvalidInput(
            f"A {character_class.value} cannot choose: {', '.join(not_allowed)}"
        )
    limit = skill_choice_count(character_class)
    if len(chosen) > limit:
        raise InvalidInput(f"A {character_class.value} chooses at most {limit} skills")

    kit = STARTING_KITS.get(character_class, DEFAULT_KIT)
    hit_points = starting_hit_points(character_class, abilities)

    return CharacterSheet(
        name=name,
        race=race,
        character_class=character_class,
        background=background,
        abilities=abilities,
        proficiencies=chosen,
        level=1,
        hit_points=hit_points,
        max_hit_points=hit_points,
        armor_class=starting_armor_class(character_class, abilities),
        inventory=[*kit.items, *COMMON_ITEMS],
        gold=kit.gold,
    )

