"""
Card and deck definitions for card-draw spaces.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .board_layout import BoardModel
    from .spaces import Space

class CardAction(str, Enum):
    STAY = "stay"
    ADVANCE = "advance"
    BACK = "back"
    NEAREST = "nearest"
    JAIL = "jail"

@dataclass(frozen=True)
class Card:
    name: str
    action: CardAction = CardAction.STAY
    target: Optional[int] = None     # ADVANCE: destination space id
    steps: int = 0                   # BACK: spaces to move back
    kind: Optional[str] = None       # NEAREST: space type to advance to

    def apply(self, board: "BoardModel", space: "Space") -> "Space":
        """Return the space this card sends a player standing on `space` to."""
        if self.action == CardAction.ADVANCE:
            return board.get_space(int(self.target))
        if self.action == CardAction.BACK:
            return board.get_space((space.id - self.steps) % board.physical_space_count)
        if self.action == CardAction.NEAREST:
            n = board.physical_space_count
            for offset in range(1, n + 1):
                candidate = board.get_space((space.id + offset) % n)
                if candidate.type == self.kind:
                    return candidate
            return space
        if self.action == CardAction.JAIL:
            return board.jail()
        return space

    @classmethod
    def from_dict(cls, data: dict) -> "Card":
        return cls(
            name=str(data.get("name", "")),
            action=CardAction(data.get("action", "stay")),
            target=data.get("target", None),
            steps=int(data.get("steps", 0)),
            kind=data.get("kind", None),
        )

class Deck:
    """A named, fixed deck. Every card is equally likely to be drawn."""
    def __init__(self, name: str, cards: Tuple[Card, ...]):
        self.name = name
        self.cards: Tuple[Card, ...] = tuple(cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __repr__(self) -> str:
        return f"Deck({self.name!r}, {len(self.cards)} cards)"
