"""
Physical board spaces. Immutable; owned by the BoardModel.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .cards import Deck


class SpaceType(str, Enum):
    GO = "go"
    PROPERTY = "property"
    RAILROAD = "railroad"
    UTILITY = "utility"
    TAX = "tax"
    CARD = "card"
    JUST_VISITING = "just_visiting"
    FREE_PARKING = "free_parking"
    GO_TO_JAIL = "go_to_jail"
    JAIL = "jail"


@dataclass(frozen=True)
class Space:
    id: int
    name: str
    type: SpaceType


@dataclass(frozen=True)
class CardSpace(Space):
    deck: Deck = None


@dataclass(frozen=True)
class Jail(Space):
    """The jail itself. Its id is the first virtual jail cell, not a physical space."""
    just_visiting: int = 0
