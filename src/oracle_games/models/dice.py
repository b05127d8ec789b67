"""
dice.py

PURPOSE: The result of rolling a handful of identical polyhedral dice.
DEPENDENCIES: pydantic
"""

from enum import IntEnum

from pydantic import BaseModel, Field, model_validator


class DieType(IntEnum):
    """The standard polyhedral dice."""

    D4 = 4
    D6 = 6
    D8 = 8
    D10 = 10
    D12 = 12
    D20 = 20
    D100 = 100

    @property
    def label(self) -> str:
        return f"d{self.value}"


class DiceRoll(BaseModel):
    """
    A completed roll of `count` dice of one type.

    Individual results keep the order they were rolled in.
    """

    die: DieType
    count: int = Field(..., gt=0)
    rolls: list[int] = Field(..., description="Individual results, in roll order")

    @model_validator(mode="after")
    def _check_rolls(self) -> "DiceRoll":
        if len(self.rolls) != self.count:
            raise ValueError(f"Expected {self.count} results, got {len(self.rolls)}")
        for value in self.rolls:
            if not 1 <= value <= self.die:
                raise ValueError(f"Result {value} is impossible on a {self.die.label}")
        return self

    @property
    def total(self) -> int:
        """Sum of the individual results."""
        return sum(self.rolls)

    @property
    def notation(self) -> str:
        """Standard dice notation, e.g. '2d6'."""
        return f"{self.count}{self.die.label}"
