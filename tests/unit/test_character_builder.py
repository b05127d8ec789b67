"""
TEST DOC: Character Builder

WHAT: Tests for building level 1 characters
WHY: Hit points, armor class and skill picks follow fixed class rules
HOW: Build characters for several classes and check the derived sheet

CASES:
- Score generation for each method
- Assigning a score pool to abilities
- Class skill lists and number of picks
- Hit points, armor class and starting kit

EDGE CASES:
- Very low constitution (hit points floor at 1)
- Skills outside the class list
- Too many skills
- Blank name
"""

import random

import pytest

from oracle_games.engine.character_builder import (
    COMMON_ITEMS,
    POINT_BUY_SPREAD,
    STANDARD_ARRAY,
    ScoreMethod,
    assign_scores,
    build_character,
    generate_scores,
    skill_choice_count,
    skill_options,
    starting_armor_class,
    starting_hit_points,
)
from oracle_games.errors import InvalidInput
from oracle_games.models.character import (
    Ability,
    AbilityScores,
    Background,
    CharacterClass,
    Race,
    Skill,
)


def _scores(**overrides: int) -> AbilityScores:
    return AbilityScores(**overrides)


class TestScores:
    """Tests for generating and assigning ability scores."""

    def test_standard_array(self):
        assert generate_scores(ScoreMethod.STANDARD_ARRAY) == list(STANDARD_ARRAY)

    def test_point_buy(self):
        assert generate_scores(ScoreMethod.POINT_BUY) == list(POINT_BUY_SPREAD)

    def test_rolled_scores(self, rng: random.Random):
        scores = generate_scores(ScoreMethod.ROLL, rng)
        assert len(scores) == 6
        assert all(3 <= score <= 18 for score in scores)

    def test_assign_scores(self):
        assignment = dict(zip(Ability, STANDARD_ARRAY, strict=True))
        abilities = assign_scores(assignment, STANDARD_ARRAY)
        assert abilities.strength == 15
        assert abilities.charisma == 8

    def test_assign_rejects_wrong_pool(self):
        assignment = dict.fromkeys(Ability, 15)
        with pytest.raises(InvalidInput):
            assign_scores(assignment, STANDARD_ARRAY)

    def test_assign_rejects_missing_ability(self):
        assignment = dict(zip(list(Ability)[:5], STANDARD_ARRAY, strict=False))
        with pytest.raises(InvalidInput, match="CHA"):
            assign_scores(assignment, STANDARD_ARRAY)


class TestClassRules:
    """Tests for class-driven values."""

    def test_skill_counts(self):
        assert skill_choice_count(CharacterClass.ROGUE) == 4
        assert skill_choice_count(CharacterClass.BARD) == 3
        assert skill_choice_count(CharacterClass.RANGER) == 3
        assert skill_choice_count(CharacterClass.WIZARD) == 2

    def test_bard_may_pick_any_skill(self):
        assert set(skill_options(CharacterClass.BARD)) == set(Skill)

    def test_unlisted_class_uses_default_skills(self):
        assert Skill.ARCANA in skill_options(CharacterClass.ARTIFICER)

    def test_hit_points(self):
        assert starting_hit_points(CharacterClass.BARBARIAN, _scores(constitution=14)) == 14
        assert starting_hit_points(CharacterClass.WIZARD, _scores(constitution=10)) == 6
        assert starting_hit_points(CharacterClass.BARD, _scores(constitution=10)) == 8

    def test_hit_points_never_below_one(self):
        assert starting_hit_points(CharacterClass.WIZARD, _scores(constitution=1)) == 1

    def test_armor_class(self):
        assert starting_armor_class(CharacterClass.FIGHTER, _scores(dexterity=18)) == 16
        assert starting_armor_class(CharacterClass.CLERIC, _scores(dexterity=18)) == 16
        assert starting_armor_class(CharacterClass.ROGUE, _scores(dexterity=16)) == 14
        assert starting_armor_class(CharacterClass.WIZARD, _scores(dexterity=14)) == 12


class TestBuildCharacter:
    """Tests for build_character."""

    def test_fighter(self):
        character = build_character(
            "  Bram  ",
            Race.DWARF,
            CharacterClass.FIGHTER,
            Background.SOLDIER,
            _scores(strength=15, constitution=14),
            [Skill.ATHLETICS, Skill.INTIMIDATION],
        )
        assert character.name == "Bram"
        assert character.level == 1
        assert character.hit_points == character.max_hit_points == 12
        assert character.armor_class == 16
        assert "Longsword" in character.inventory
        assert all(item in character.inventory for item in COMMON_ITEMS)
        assert character.gold == 10
        assert character.is_proficient(Skill.ATHLETICS)

    def test_default_kit(self):
        character = build_character(
            "Lark",
            Race.HALFLING,
            CharacterClass.BARD,
            Background.ENTERTAINER,
            _scores(),
            [Skill.PERFORMANCE],
        )
        assert character.gold == 20
        assert "Adventurer's pack" in character.inventory

    def test_rejects_skill_outside_class(self):
        with pytest.raises(InvalidInput, match="Stealth"):
            build_character(
                "Bram",
                Race.DWARF,
                CharacterClass.FIGHTER,
                Background.SOLDIER,
                _scores(),
                [Skill.STEALTH],
            )

    def test_rejects_too_many_skills(self):
        with pytest.raises(InvalidInput, match="at most 2"):
            build_character(
                "Ilsa",
                Race.HUMAN,
                CharacterClass.WIZARD,
                Background.SAGE,
                _scores(),
                [Skill.ARCANA, Skill.HISTORY, Skill.RELIGION],
            )

    def test_rejects_blank_name(self):
        with pytest.raises(InvalidInput):
            build_character(
                "   ",
                Race.HUMAN,
                CharacterClass.WIZARD,
                Background.SAGE,
                _scores(),
                [],
            )
