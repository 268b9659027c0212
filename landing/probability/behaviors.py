# landing/probability/behaviors.py
"""
Per-space behaviors for the single-turn probability walk.

A walk starts with one unit of probability at an origin node and splits it
across every dice outcome, card draw and doubles re-roll until each branch
ends its turn somewhere. Along the way every node collects two numbers:

    mid_prob  mass that passed through the node without ending the turn there
    end_prob  mass whose turn ended on the node

`end_prob` over all nodes sums to 1 after a walk; `mid_prob` is extra
pass-through mass on top of that.

Each behavior answers two questions:

    arrive(...)  probability `multiplier` just landed on `node`
    start(...)   a fresh turn begins on `node`

Behaviors are chosen once per node by `behavior_for`, a plain function over
the space type, so the variant set is closed and listed in `BEHAVIORS`.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Type, TYPE_CHECKING

from overrides import overrides

from ..engine.errors import ErrorCode, ProbabilityError
from ..engine.spaces import CardSpace, Space, SpaceType

if TYPE_CHECKING:
    from .sim_board import SimulationBoard, SimulationNode


class BehaviorKind(str, Enum):
    PLAIN = "plain"
    CARD = "card"
    FORCED_JAIL = "forced_jail"
    JAIL_CELL = "jail_cell"
    LAST_TURN_JAIL_CELL = "last_turn_jail_cell"


class SpaceBehavior:
    """Default space: a landing ends the turn unless doubles demand another roll."""
    kind = BehaviorKind.PLAIN

    def arrive(self, board: "SimulationBoard", node: "SimulationNode",
               num_doubles: int, multiplier: float, roll_again: bool) -> None:
        if not roll_again:
            node.add_to_end_prob(multiplier)
            return
        node.add_to_mid_prob(multiplier)
        self.roll(board, node, num_doubles, multiplier)

    def start(self, board: "SimulationBoard", node: "SimulationNode", stay_in_jail: bool) -> None:
        self.roll(board, node, 0, 1.0)

    @staticmethod
    def roll(board: "SimulationBoard", node: "SimulationNode", num_doubles: int, multiplier: float) -> None:
        # One branch per distinct outcome; a doubles streak at the cap goes to jail.
        for roll, weight in board.dice.distinct_rolls():
            if roll.is_doubles and num_doubles >= board.max_doubles - 1:
                board.jail().arrive(board, num_doubles, multiplier * weight, False)
            else:
                board.next_space(node.id, roll.total).arrive(
                    board,
                    num_doubles + 1 if roll.is_doubles else num_doubles,
                    multiplier * weight,
                    roll.is_doubles,
                )

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CardBehavior(SpaceBehavior):
    """Card-draw space: each card in the deck is equally likely and may send the player on."""
    kind = BehaviorKind.CARD

    @overrides
    def arrive(self, board: "SimulationBoard", node: "SimulationNode",
               num_doubles: int, multiplier: float, roll_again: bool) -> None:
        space: CardSpace = node.space
        share = multiplier / len(space.deck)
        for card in space.deck:
            destination = card.apply(board.model, space)
            if destination.id == space.id:
                super().arrive(board, node, num_doubles, share, roll_again)
            else:
                # the card moves us mid-turn; the doubles state carries over
                node.add_to_mid_prob(share)
                board.get_node(destination.id).arrive(board, num_doubles, share, roll_again)


class ForcedJailBehavior(SpaceBehavior):
    """Go-to-jail space: landing here always ends the turn in jail."""
    kind = BehaviorKind.FORCED_JAIL

    @overrides
    def arrive(self, board: "SimulationBoard", node: "SimulationNode",
               num_doubles: int, multiplier: float, roll_again: bool) -> None:
        node.add_to_mid_prob(multiplier)
        board.jail().arrive(board, num_doubles, multiplier, False)


class JailCellBehavior(SpaceBehavior):
    """
    One turn served in jail. Only ever a start-of-turn state: arriving here
    ends the turn, and the next turn either releases the player or moves them
    to the following cell.
    """
    kind = BehaviorKind.JAIL_CELL

    def __init__(self, turn_index: int, just_visiting: int):
        self.turn_index = int(turn_index)
        self.just_visiting = int(just_visiting)

    @overrides
    def arrive(self, board: "SimulationBoard", node: "SimulationNode",
               num_doubles: int, multiplier: float, roll_again: bool) -> None:
        # Going to jail ends the turn whatever the dice said.
        node.add_to_end_prob(multiplier)

    @overrides
    def start(self, board: "SimulationBoard", node: "SimulationNode", stay_in_jail: bool) -> None:
        if stay_in_jail:
            self.serve_turn(board, node)
        else:
            board.get_node(self.just_visiting).start(board, stay_in_jail)

    def serve_turn(self, board: "SimulationBoard", node: "SimulationNode") -> None:
        for roll, weight in board.dice.distinct_rolls():
            if roll.is_doubles:
                # released; the doubles are used up, no extra roll
                board.next_space(self.just_visiting, roll.total).arrive(board, 1, weight, False)
            else:
                board.get_node(node.id + 1).arrive(board, 0, weight, False)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(turn_index={self.turn_index}, just_visiting={self.just_visiting})"


class LastTurnJailCellBehavior(JailCellBehavior):
    """Final turn of the sentence: every roll releases the player."""
    kind = BehaviorKind.LAST_TURN_JAIL_CELL

    @overrides
    def serve_turn(self, board: "SimulationBoard", node: "SimulationNode") -> None:
        for roll, weight in board.dice.distinct_rolls():
            board.next_space(self.just_visiting, roll.total).arrive(
                board, 1 if roll.is_doubles else 0, weight, False
            )


BEHAVIORS: Dict[BehaviorKind, Type[SpaceBehavior]] = {
    BehaviorKind.PLAIN: SpaceBehavior,
    BehaviorKind.CARD: CardBehavior,
    BehaviorKind.FORCED_JAIL: ForcedJailBehavior,
    BehaviorKind.JAIL_CELL: JailCellBehavior,
    BehaviorKind.LAST_TURN_JAIL_CELL: LastTurnJailCellBehavior,
}


def behavior_for(space: Space, turn_index: Optional[int] = None, last_turn: bool = False) -> SpaceBehavior:
    """Pick the behavior for a space. Jail cells need their turn index."""
    if space.type == SpaceType.JAIL:
        if turn_index is None:
            raise ProbabilityError(ErrorCode.ERR_INVALID_BOARD, "Jail cells need a turn index",
                                   details={"space": space.id})
        cls = LastTurnJailCellBehavior if last_turn else JailCellBehavior
        return cls(turn_index, space.just_visiting)
    if space.type == SpaceType.CARD:
        return CardBehavior()
    if space.type == SpaceType.GO_TO_JAIL:
        return ForcedJailBehavior()
    return SpaceBehavior()
