# landing/probability/calculator.py
"""
Builds and solves the Markov matrices of a board.

For each jail policy the builder runs one single-turn walk per origin node and
stacks the results into two N x N matrices:

    P  end probabilities; row i is where a turn started at i ends (rows sum to 1)
    M  mid probabilities; extra same-turn pass-through mass

From those it derives a multi-turn tensor by iterated multiplication and the
steady state by solving pi = pi P with sum(pi) = 1 as a least-squares system.
Everything is computed in the constructor so the resulting values never change.
"""
from __future__ import annotations

import logging
from typing import Dict, Tuple

import numpy as np

from ..engine.board_layout import BoardModel
from ..engine.errors import ErrorCode, ProbabilityError
from ..utils.timers import Timer
from .sim_board import SimulationBoard

logger = logging.getLogger(__name__)

_POLICIES = (False, True)   # pay to leave, stay in jail
_MIN_TOLERANCE = 1e-9


class TransitionMatrixBuilder:
    def __init__(self, model: BoardModel, tolerance: float = 1e-9):
        self.board = SimulationBoard(model)
        # floored so rounding in the row sums never trips the checks
        self.tolerance = max(float(tolerance), _MIN_TOLERANCE)
        self._end: Dict[bool, np.ndarray] = {}
        self._mid: Dict[bool, np.ndarray] = {}
        self._stationary: Dict[bool, np.ndarray] = {}
        self._occupancy: Dict[bool, np.ndarray] = {}
        self.residuals: Dict[bool, float] = {}

        timer = Timer().start()
        for stay in _POLICIES:
            self._end[stay], self._mid[stay] = self.build_transition_table(stay)
        for stay in _POLICIES:
            pi, residual = self.solve_steady_state(self._end[stay])
            self._stationary[stay] = pi
            self._occupancy[stay] = pi + pi @ self._mid[stay]
            self.residuals[stay] = residual
        self.build_seconds = timer.elapsed()
        logger.info("Transition matrices for %d nodes built in %.3fs", self.size, self.build_seconds)

    @property
    def size(self) -> int:
        return self.board.size

    # ---- matrices -------------------------------------------------------------

    def build_transition_table(self, stay_in_jail: bool) -> Tuple[np.ndarray, np.ndarray]:
        """Run one walk per origin and return (P, M)."""
        n = self.board.size
        table_end = np.zeros((n, n), dtype=np.float64)
        table_mid = np.zeros((n, n), dtype=np.float64)
        for i in range(n):
            table_mid[i], table_end[i] = self.board.run_pass(i, stay_in_jail)
        self.board.reset_all()

        row_sums = table_end.sum(axis=1)
        bad = np.flatnonzero(np.abs(row_sums - 1.0) > self.tolerance)
        if bad.size:
            raise ProbabilityError(
                ErrorCode.ERR_ROW_SUM,
                "End probabilities from an origin do not sum to 1",
                details={"rows": bad.tolist(), "sums": row_sums[bad].tolist(), "stay_in_jail": stay_in_jail},
            )
        return table_end, table_mid

    def transition_matrix(self, stay_in_jail: bool) -> np.ndarray:
        return self._end[stay_in_jail]

    def mid_matrix(self, stay_in_jail: bool) -> np.ndarray:
        return self._mid[stay_in_jail]

    # ---- forecasts ------------------------------------------------------------

    def get_tensor(self, depth: int, stay_in_jail: bool) -> np.ndarray:
        """
        T[turn][origin][destination] for turn in [0, depth).

        T[0] = P + M; afterwards the mid mass of turn t is what turn t-1's end
        distribution passes through, end_t = end_{t-1} P and mid_t = end_{t-1} M.
        """
        if depth < 1:
            raise ProbabilityError(ErrorCode.ERR_INVALID_DEPTH, details={"depth": depth})
        markov = self._end[stay_in_jail]
        mid = self._mid[stay_in_jail]
        result = np.empty((depth, self.size, self.size), dtype=np.float64)
        end_accum = markov.copy()
        mid_accum = mid.copy()
        for turn in range(depth):
            result[turn] = end_accum + mid_accum
            mid_accum = end_accum @ mid
            end_accum = end_accum @ markov
        return result

    # ---- steady state ---------------------------------------------------------

    def solve_steady_state(self, markov: np.ndarray) -> Tuple[np.ndarray, float]:
        """Return (pi, residual) with pi = pi P and sum(pi) = 1."""
        n = markov.shape[0]
        to_solve = np.empty((n + 1, n), dtype=np.float64)
        to_solve[:n] = markov.T - np.eye(n)
        # final equation, a + b + c + ... = 1
        to_solve[n] = 1.0
        rhs = np.zeros(n + 1, dtype=np.float64)
        rhs[n] = 1.0

        pi, _, rank, _ = np.linalg.lstsq(to_solve, rhs, rcond=None)
        if rank < n or not np.all(np.isfinite(pi)):
            raise ProbabilityError(ErrorCode.ERR_SINGULAR_SYSTEM, "Steady-state system is singular",
                                   details={"rank": int(rank), "size": n})
        residual = float(np.max(np.abs(to_solve @ pi - rhs)))
        if residual > self.tolerance * n:
            raise ProbabilityError(ErrorCode.ERR_SINGULAR_SYSTEM, "Steady-state system is inconsistent",
                                   details={"residual": residual, "size": n})
        logger.debug("Steady state solved: rank=%d residual=%.3e", rank, residual)
        # unreachable states can come back as -1e-17 and the like
        pi = np.clip(pi, 0.0, None)
        return pi, residual

    def stationary(self, stay_in_jail: bool) -> np.ndarray:
        return self._stationary[stay_in_jail]

    def get_steady_state(self, stay_in_jail: bool) -> np.ndarray:
        """Steady-state occupancy: pi plus the pass-through mass it induces."""
        return self._occupancy[stay_in_jail]
