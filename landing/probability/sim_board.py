# landing/probability/sim_board.py
"""
Board used to calculate landing probabilities from a single space over a single turn.

Basic usage:
    1. Construct a SimulationBoard from a BoardModel.
    2. `run_pass(origin, stay_in_jail)` walks every possible move of one turn
       and returns the (mid, end) probability vectors.
    3. Repeat for other origins; `run_pass` resets the accumulators first.

Nodes [0, physical) wrap the physical spaces. Nodes [physical, physical + max_turns)
are virtual: "serving turn k of a jail sentence". Keeping that state lets the
transition matrix forecast many turns ahead.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from ..engine.board_layout import BoardModel
from ..engine.dice import Dice
from ..engine.errors import ErrorCode, ProbabilityError
from ..engine.spaces import Space
from .behaviors import SpaceBehavior, behavior_for

logger = logging.getLogger(__name__)


@dataclass
class SimulationNode:
    id: int
    space: Space
    behavior: SpaceBehavior
    mid_prob: float = 0.0
    end_prob: float = 0.0

    def add_to_mid_prob(self, prob: float) -> None:
        self.mid_prob += prob

    def add_to_end_prob(self, prob: float) -> None:
        self.end_prob += prob

    def reset(self) -> None:
        self.mid_prob = 0.0
        self.end_prob = 0.0

    @property
    def dirty(self) -> bool:
        return self.mid_prob != 0.0 or self.end_prob != 0.0

    def arrive(self, board: "SimulationBoard", num_doubles: int, multiplier: float, roll_again: bool) -> None:
        self.behavior.arrive(board, self, num_doubles, multiplier, roll_again)

    def start(self, board: "SimulationBoard", stay_in_jail: bool) -> None:
        self.behavior.start(board, self, stay_in_jail)


class SimulationBoard:
    def __init__(self, model: BoardModel):
        self.model = model
        physical = model.physical_space_count
        max_turns = model.max_turns_in_jail
        nodes: List[SimulationNode] = []
        for i in range(physical):
            space = model.get_space(i)
            nodes.append(SimulationNode(i, space, behavior_for(space)))
        jail = model.jail()
        for k in range(max_turns):
            behavior = behavior_for(jail, turn_index=k, last_turn=(k == max_turns - 1))
            nodes.append(SimulationNode(physical + k, jail, behavior))
        self._nodes: Tuple[SimulationNode, ...] = tuple(nodes)
        logger.debug("SimulationBoard built: %d physical nodes, %d jail cells", physical, max_turns)

    # ---- lookups ------------------------------------------------------------

    @property
    def size(self) -> int:
        return len(self._nodes)

    @property
    def physical_space_count(self) -> int:
        return self.model.physical_space_count

    @property
    def max_turns_in_jail(self) -> int:
        return self.model.max_turns_in_jail

    @property
    def dice(self) -> Dice:
        return self.model.dice()

    @property
    def max_doubles(self) -> int:
        return self.model.dice().max_doubles

    @property
    def nodes(self) -> Tuple[SimulationNode, ...]:
        return self._nodes

    def get_node(self, node_id: int) -> SimulationNode:
        if not (0 <= node_id < len(self._nodes)):
            raise ProbabilityError(ErrorCode.ERR_SPACE_OUT_OF_RANGE, details={"id": node_id, "size": len(self._nodes)})
        return self._nodes[node_id]

    def jail(self) -> SimulationNode:
        """The jail-entry node: first turn of a sentence."""
        return self._nodes[self.model.jail().id]

    def next_space(self, current_id: int, steps: int) -> SimulationNode:
        # Dice movement only ever lands on physical spaces.
        return self._nodes[(current_id + steps) % self.physical_space_count]

    # ---- passes -------------------------------------------------------------

    def reset_all(self) -> None:
        for node in self._nodes:
            node.reset()

    def is_clean(self) -> bool:
        return not any(node.dirty for node in self._nodes)

    def simulate_from(self, origin: int, stay_in_jail: bool) -> None:
        """Walk one turn from `origin`. The board must be clean."""
        node = self.get_node(origin)
        if not self.is_clean():
            raise ProbabilityError(ErrorCode.ERR_BOARD_NOT_RESET, "reset_all() must run between passes",
                                   details={"origin": origin})
        node.start(self, stay_in_jail)

    def run_pass(self, origin: int, stay_in_jail: bool) -> Tuple[np.ndarray, np.ndarray]:
        self.reset_all()
        self.simulate_from(origin, stay_in_jail)
        return self.mid_vector(), self.end_vector()

    def mid_vector(self) -> np.ndarray:
        return np.array([node.mid_prob for node in self._nodes], dtype=np.float64)

    def end_vector(self) -> np.ndarray:
        return np.array([node.end_prob for node in self._nodes], dtype=np.float64)
