# landing/engine/state.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class TableConfig:
    """
    Canonical configuration for building a probability table.
    This class provides a stable structure AND a `from_dict` constructor so
    scripts can pass a JSON config without manual parsing.
    """
    # Forecast
    depth: int = 10                         # number of future turns in the tensor
    tolerance: float = 1e-9                 # row-sum / steady-state residual check

    # Board
    layout: Optional[str] = None            # path to layout JSON; None = standard board

    # Rule overrides (None keeps the layout's value)
    dice_count: Optional[int] = None
    dice_sides: Optional[int] = None
    max_doubles: Optional[int] = None
    max_turns_in_jail: Optional[int] = None

    # Reporting
    top: int = 10

    # --------- factory & helpers ---------
    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "TableConfig":
        """
        Build a TableConfig from a nested dict like the JSON files under landing/configs/.
        Expected top-level keys: "table", "board", "rules" (all optional).
        """
        table = dict(cfg.get("table", {}))
        board = dict(cfg.get("board", {}))
        rules = dict(cfg.get("rules", {}))

        def _opt_int(key: str) -> Optional[int]:
            value = rules.get(key, None)
            return None if value is None else int(value)

        return cls(
            depth=int(table.get("depth", 10)),
            tolerance=float(table.get("tolerance", 1e-9)),
            layout=board.get("layout", None),
            dice_count=_opt_int("dice_count"),
            dice_sides=_opt_int("dice_sides"),
            max_doubles=_opt_int("max_doubles"),
            max_turns_in_jail=_opt_int("max_turns_in_jail"),
            top=int(table.get("top", 10)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Round-trip to a plain dict (useful for logging/debug)."""
        return asdict(self)

    def board_overrides(self) -> Dict[str, Any]:
        """Nested dict to deep-merge into the layout JSON."""
        dice: Dict[str, Any] = {}
        if self.dice_count is not None:
            dice["count"] = self.dice_count
        if self.dice_sides is not None:
            dice["sides"] = self.dice_sides
        if self.max_doubles is not None:
            dice["max_doubles"] = self.max_doubles
        out: Dict[str, Any] = {}
        if dice:
            out["dice"] = dice
        if self.max_turns_in_jail is not None:
            out["jail"] = {"max_turns": self.max_turns_in_jail}
        return out
