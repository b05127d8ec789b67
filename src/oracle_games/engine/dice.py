"""
dice.py

PURPOSE: Rolling dice and reading dice notation.
DEPENDENCIES: models

ARCHITECTURE NOTES:
Rolls are pure functions of the random source. Callers that need
reproducible results (tests, replays) pass their own random.Random.
"""

import random
import re

from oracle_games.errors import InvalidInput
from oracle_games.models.dice import DiceRoll, DieType

MAX_DICE = 100

_NOTATION = re.compile(r"^(\d*)d(\d+)$", re.IGNORECASE)


def _die_type(sides: int) -> DieType:
    try:
        return DieType(sides)
    except ValueError:
        allowed = ", ".join(die.label for die in DieType)
        raise InvalidInput(f"There is no d{sides}. Choose one of {allowed}.") from None


def roll_dice(die: DieType | int, count: int = 1, rng: random.Random | None = None) -> DiceRoll:
    """
    Roll `count` dice of one type.

    Each die is uniform over 1..sides and the results keep roll order.

    Raises:
        InvalidInput: If the die is not a standard polyhedral or the count
            is outside 1..MAX_DICE
    """
    die_type = _die_type(int(die))
    if not 1 <= count <= MAX_DICE:
        raise InvalidInput(f"Roll between 1 and {MAX_DICE} dice at a time")

    source = rng or random
    rolls = [source.randint(1, die_type.value) for _ in range(count)]
    return DiceRoll(die=die_type, count=count, rolls=rolls)


def parse_notation(text: str) -> tuple[DieType, int]:
    """
    Parse dice notation such as 'd20', '2d6' or '1D100'.

    Returns:
        (die type, count)

    Raises:
        InvalidInput: If the text is not valid notation
    """
    match = _NOTATION.match("".join(text.split()))
    if not match:
        raise InvalidInput(f"'{text}' is not dice notation (try 2d6 or d20)")
    count = int(match.group(1)) if match.group(1) else 1
    return _die_type(int(match.group(2))), count


def roll_notation(text: str, rng: random.Random | None = None) -> DiceRoll:
    die, count = parse_notation(text)
    return roll_dice(die, count, rng)


def roll_ability_score(rng: random.Random | None = None) -> tuple[int, DiceRoll]:
    """Roll 4d6 and drop the lowest die. Returns the score and the full roll."""
    roll = roll_dice(DieType.D6, 4, rng)
    return roll.total - min(roll.rolls), roll
