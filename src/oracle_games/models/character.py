"""
character.py

PURPOSE: D&D 5e character sheet and the fixed option lists it draws from.
DEPENDENCIES: pydantic

ARCHITECTURE NOTES:
The sheet stores only raw choices and scores. Modifiers and proficiency
bonus are derived on demand so they can never drift from the scores.
"""

from enum import Enum

from pydantic import BaseModel, Field


class Ability(str, Enum):
    """The six ability scores."""

    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    INTELLIGENCE = "intelligence"
    WISDOM = "wisdom"
    CHARISMA = "charisma"

    @property
    def abbreviation(self) -> str:
        return self.value[:3].upper()


class Skill(str, Enum):
    """The eighteen skills, each keyed to one ability."""

    ACROBATICS = "Acrobatics"
    ANIMAL_HANDLING = "Animal Handling"
    ARCANA = "Arcana"
    ATHLETICS = "Athletics"
    DECEPTION = "Deception"
    HISTORY = "History"
    INSIGHT = "Insight"
    INTIMIDATION = "Intimidation"
    INVESTIGATION = "Investigation"
    MEDICINE = "Medicine"
    NATURE = "Nature"
    PERCEPTION = "Perception"
    PERFORMANCE = "Performance"
    PERSUASION = "Persuasion"
    RELIGION = "Religion"
    SLEIGHT_OF_HAND = "Sleight of Hand"
    STEALTH = "Stealth"
    SURVIVAL = "Survival"

    @property
    def ability(self) -> Ability:
        return SKILL_ABILITIES[self]

    @classmethod
    def lookup(cls, name: str) -> "Skill":
        """Find a skill by case-insensitive name ('sleight of hand', 'stealth')."""
        wanted = " ".join(name.split()).lower()
        for skill in cls:
            if skill.value.lower() == wanted:
                return skill
        raise ValueError(f"Unknown skill: {name}")


SKILL_ABILITIES: dict[Skill, Ability] = {
    Skill.ATHLETICS: Ability.STRENGTH,
    Skill.ACROBATICS: Ability.DEXTERITY,
    Skill.SLEIGHT_OF_HAND: Ability.DEXTERITY,
    Skill.STEALTH: Ability.DEXTERITY,
    Skill.ARCANA: Ability.INTELLIGENCE,
    Skill.HISTORY: Ability.INTELLIGENCE,
    Skill.INVESTIGATION: Ability.INTELLIGENCE,
    Skill.NATURE: Ability.INTELLIGENCE,
    Skill.RELIGION: Ability.INTELLIGENCE,
    Skill.ANIMAL_HANDLING: Ability.WISDOM,
    Skill.INSIGHT: Ability.WISDOM,
    Skill.MEDICINE: Ability.WISDOM,
    Skill.PERCEPTION: Ability.WISDOM,
    Skill.SURVIVAL: Ability.WISDOM,
    Skill.DECEPTION: Ability.CHARISMA,
    Skill.INTIMIDATION: Ability.CHARISMA,
    Skill.PERFORMANCE: Ability.CHARISMA,
    Skill.PERSUASION: Ability.CHARISMA,
}


class Race(str, Enum):
    HUMAN = "Human"
    ELF = "Elf"
    DWARF = "Dwarf"
    HALFLING = "Halfling"
    GNOME = "Gnome"
    HALF_ELF = "Half-Elf"
    HALF_ORC = "Half-Orc"
    TIEFLING = "Tiefling"
    DRAGONBORN = "Dragonborn"


class CharacterClass(str, Enum):
    FIGHTER = "Fighter"
    WIZARD = "Wizard"
    CLERIC = "Cleric"
    ROGUE = "Rogue"
    RANGER = "Ranger"
    PALADIN = "Paladin"
    BARBARIAN = "Barbarian"
    BARD = "Bard"
    DRUID = "Druid"
    MONK = "Monk"
    SORCERER = "Sorcerer"
    WARLOCK = "Warlock"
    ARTIFICER = "Artificer"


class Background(str, Enum):
    ACOLYTE = "Acolyte"
    CHARLATAN = "Charlatan"
    CRIMINAL = "Criminal"
    ENTERTAINER = "Entertainer"
    FOLK_HERO = "Folk Hero"
    GUILD_ARTISAN = "Guild Artisan"
    HERMIT = "Hermit"
    NOBLE = "Noble"
    OUTLANDER = "Outlander"
    SAGE = "Sage"
    SAILOR = "Sailor"
    SOLDIER = "Soldier"
    URCHIN = "Urchin"


def ability_modifier(score: int) -> int:
    """Standard 5e modifier: (score - 10) / 2, rounded down."""
    return (score - 10) // 2


def proficiency_bonus_for(level: int) -> int:
    """Proficiency bonus by character level (+2 at 1-4 up to +6 at 17+)."""
    if level < 1:
        raise ValueError("Level must be positive")
    return min(2 + (level - 1) // 4, 6)


class AbilityScores(BaseModel):
    """Six ability scores, each at least 1."""

    strength: int = Field(default=10, ge=1)
    dexterity: int = Field(default=10, ge=1)
    constitution: int = Field(default=10, ge=1)
    intelligence: int = Field(default=10, ge=1)
    wisdom: int = Field(default=10, ge=1)
    charisma: int = Field(default=10, ge=1)

    def score(self, ability: Ability) -> int:
        return int(getattr(self, ability.value))

    def modifier(self, ability: Ability) -> int:
        return ability_modifier(self.score(ability))


class CharacterSheet(BaseModel):
    """
    A player character.

    Mutated by play (hit points, inventory, gold, experience) and saved
    as part of an AdventureSession.
    """

    name: str = Field(..., min_length=1)
    race: Race
    character_class: CharacterClass
    background: Background
    abilities: AbilityScores = Field(default_factory=AbilityScores)
    proficiencies: set[Skill] = Field(default_factory=set)
    level: int = Field(default=1, ge=1, le=20)
    hit_points: int = Field(default=10, ge=0)
    max_hit_points: int = Field(default=10, ge=1)
    armor_class: int = Field(default=10, ge=1)
    inventory: list[str] = Field(default_factory=list)
    gold: int = Field(default=0, ge=0)
    experience: int = Field(default=0, ge=0)

    @property
    def proficiency_bonus(self) -> int:
        return proficiency_bonus_for(self.level)

    @property
    def modifiers(self) -> dict[Ability, int]:
        """Ability modifier for each of the six abilities."""
        return {ability: self.abilities.modifier(ability) for ability in Ability}

    def is_proficient(self, skill: Skill) -> bool:
        return skill in self.proficiencies

    def skill_modifier(self, skill: Skill) -> int:
        """Total bonus added to a d20 for a check with this skill."""
        bonus = self.abilities.modifier(skill.ability)
        if self.is_proficient(skill):
            bonus += self.proficiency_bonus
        return bonus

    def describe(self) -> str:
        """One-line summary used in prompts: 'Mira the Elf Rogue (level 1)'."""
        return (
            f"{self.name} the {self.race.value} {self.character_class.value} "
            f"(level {self.level})"
        )
