# landing/probability/table.py
"""
Immutable table of cached probability information for one board.
This is the main access point to all probability calculation.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

import numpy as np

from ..engine.board_layout import BoardModel
from ..engine.errors import ErrorCode, ProbabilityError
from .calculator import TransitionMatrixBuilder


def _frozen(arr: np.ndarray) -> np.ndarray:
    out = np.array(arr, dtype=np.float64, copy=True)
    out.flags.writeable = False
    return out


@dataclass(frozen=True, eq=False)
class ProbabilityTable:
    """
    probabilities[stay][turn][origin][destination] is the chance a player starting on
    `origin` is on `destination` during turn `turn` (0 = the coming turn).
    steady_state[stay][space] is the long-run occupancy of `space`.
    """
    depth: int
    size: int
    physical_space_count: int
    names: Tuple[str, ...]
    probabilities: Mapping[bool, np.ndarray]
    steady_state: Mapping[bool, np.ndarray]

    @classmethod
    def build(cls, model: BoardModel, depth: int, tolerance: float = 1e-9) -> "ProbabilityTable":
        """Compute everything for `model` and `depth` turns ahead."""
        if depth < 1:
            raise ProbabilityError(ErrorCode.ERR_INVALID_DEPTH, details={"depth": depth})
        calc = TransitionMatrixBuilder(model, tolerance=tolerance)
        return cls.from_builder(calc, model, depth)

    @classmethod
    def from_builder(cls, calc: TransitionMatrixBuilder, model: BoardModel, depth: int) -> "ProbabilityTable":
        physical = model.physical_space_count
        names = tuple(s.name for s in model.spaces) + tuple(
            f"In Jail (turn {k + 1})" for k in range(model.max_turns_in_jail)
        )
        return cls(
            depth=int(depth),
            size=calc.size,
            physical_space_count=physical,
            names=names,
            probabilities=MappingProxyType({stay: _frozen(calc.get_tensor(depth, stay)) for stay in (False, True)}),
            steady_state=MappingProxyType({stay: _frozen(calc.get_steady_state(stay)) for stay in (False, True)}),
        )

    # ---- lookups --------------------------------------------------------------

    def _check_space(self, space: int) -> None:
        if not (0 <= space < self.size):
            raise ProbabilityError(ErrorCode.ERR_SPACE_OUT_OF_RANGE, details={"id": space, "size": self.size})

    def _check_turn(self, turn: int) -> None:
        if not (0 <= turn < self.depth):
            raise ProbabilityError(ErrorCode.ERR_TURN_OUT_OF_RANGE, details={"turn": turn, "depth": self.depth})

    def get_probability(self, origin: int, destination: int, turn: int, stay_in_jail: bool) -> float:
        """
        Probability that a player starting from `origin` lands on `destination`
        `turn` turns from now, given their jail strategy.
        """
        self._check_space(origin)
        self._check_space(destination)
        self._check_turn(turn)
        return float(self.probabilities[bool(stay_in_jail)][turn, origin, destination])

    def get_steady_state(self, space: int, stay_in_jail: bool) -> float:
        """Long-run probability of `space` given a jail strategy."""
        self._check_space(space)
        return float(self.steady_state[bool(stay_in_jail)][space])

    def distribution(self, origin: int, turn: int, stay_in_jail: bool) -> np.ndarray:
        self._check_space(origin)
        self._check_turn(turn)
        return self.probabilities[bool(stay_in_jail)][turn, origin]

    def steady_state_vector(self, stay_in_jail: bool) -> np.ndarray:
        return self.steady_state[bool(stay_in_jail)]

    def most_visited(self, count: int, stay_in_jail: bool) -> List[Tuple[int, str, float]]:
        """Physical spaces ranked by steady-state occupancy, highest first."""
        occ = self.steady_state[bool(stay_in_jail)][: self.physical_space_count]
        order = np.argsort(-occ, kind="stable")[: max(0, int(count))]
        return [(int(i), self.names[i], float(occ[i])) for i in order]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "depth": self.depth,
            "names": list(self.names),
            "probabilities": {
                ("stay" if stay else "pay"): arr.tolist() for stay, arr in self.probabilities.items()
            },
            "steady_state": {
                ("stay" if stay else "pay"): arr.tolist() for stay, arr in self.steady_state.items()
            },
        }


def make_table(model: BoardModel, depth: int, tolerance: float = 1e-9) -> ProbabilityTable:
    return ProbabilityTable.build(model, depth, tolerance=tolerance)
