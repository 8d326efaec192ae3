from dataclasses import dataclass
from enum import Enum


class Direction(str, Enum):
    INCOME = "income"
    OUTCOME = "outcome"

    @property
    def is_income(self) -> bool:
        return self is Direction.INCOME

    @classmethod
    def from_is_income(cls, is_income: bool) -> "Direction":
        return cls.INCOME if is_income else cls.OUTCOME


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    emoji: str          # single character
    direction: Direction
