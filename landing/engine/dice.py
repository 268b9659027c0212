# landing/engine/dice.py
"""
Dice enumeration for exact probability walks.

Every ordered outcome of `count` dice with `sides` faces is equally likely.
The simulator only cares about the pip total and whether the roll was
doubles, so `distinct_rolls()` folds the ordered outcomes into those groups.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Tuple

from .errors import ErrorCode, ProbabilityError


@dataclass(frozen=True)
class Roll:
    values: Tuple[int, ...]

    @property
    def total(self) -> int:
        return sum(self.values)

    @property
    def is_doubles(self) -> bool:
        return len(self.values) > 1 and len(set(self.values)) == 1


@dataclass(frozen=True)
class Dice:
    count: int = 2
    sides: int = 6
    max_doubles: int = 3
    _distinct: Tuple[Tuple[Roll, float], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.count < 1 or self.sides < 2:
            raise ProbabilityError(ErrorCode.ERR_INVALID_DICE, details={"count": self.count, "sides": self.sides})
        if self.max_doubles < 1:
            raise ProbabilityError(ErrorCode.ERR_INVALID_DICE, details={"max_doubles": self.max_doubles})
        object.__setattr__(self, "_distinct", self._group_rolls())

    @property
    def outcome_count(self) -> int:
        return self.sides ** self.count

    def possible_rolls(self) -> Iterator[Roll]:
        for values in itertools.product(range(1, self.sides + 1), repeat=self.count):
            yield Roll(values)

    def for_each_possible_roll(self, callback: Callable[[Roll, int], None]) -> None:
        size = self.outcome_count
        for roll in self.possible_rolls():
            callback(roll, size)

    def distinct_rolls(self) -> Tuple[Tuple[Roll, float], ...]:
        """(representative roll, weight) per distinct (total, doubles) outcome."""
        return self._distinct

    def _group_rolls(self) -> Tuple[Tuple[Roll, float], ...]:
        """Fold the ordered outcomes from `for_each_possible_roll` into weighted groups."""
        counts: Dict[Tuple[int, bool], int] = {}
        representative: Dict[Tuple[int, bool], Roll] = {}

        def tally(roll: Roll, size: int) -> None:
            key = (roll.total, roll.is_doubles)
            counts[key] = counts.get(key, 0) + 1
            representative.setdefault(key, roll)

        self.for_each_possible_roll(tally)
        size = float(self.outcome_count)
        out: List[Tuple[Roll, float]] = []
        for key in sorted(counts):
            out.append((representative[key], counts[key] / size))
        return tuple(out)
