# landing/scripts/build_table.py
from __future__ import annotations
import argparse
import json
import logging
import os
from typing import Any, Dict, Optional

from ..engine.board_layout import load_board
from ..engine.state import TableConfig
from ..probability.calculator import TransitionMatrixBuilder
from ..probability.table import ProbabilityTable
from ..utils.jsonio import load_json, save_json, deep_update, override_config, parse_assignments
from ..utils.logging import LoggingMux


def load_config(path: Optional[str], override: Optional[str] = None, assignments=None) -> Dict[str, Any]:
    cfg = load_json(path) if path else {}
    if override:
        cfg = deep_update(cfg, json.loads(override))
    if assignments:
        cfg = override_config(cfg, parse_assignments(assignments))
    return cfg


def build(cfg: Dict[str, Any], mux: Optional[LoggingMux] = None) -> ProbabilityTable:
    table_cfg = TableConfig.from_dict(cfg)
    model = load_board(table_cfg.layout, overrides=table_cfg.board_overrides())
    calc = TransitionMatrixBuilder(model, tolerance=table_cfg.tolerance)
    table = ProbabilityTable.from_builder(calc, model, table_cfg.depth)
    if mux is not None:
        for step, stay in enumerate((False, True)):
            mux.scalars("build/" + ("stay" if stay else "pay"), {
                "residual": calc.residuals[stay],
                "stationary_sum": float(calc.stationary(stay).sum()),
                "occupancy_sum": float(calc.get_steady_state(stay).sum()),
            }, step)
        mux.scalar("build/seconds", calc.build_seconds, 0)
        mux.scalar("build/nodes", calc.size, 0)
    return table


def report(table: ProbabilityTable, origin: int, stay_in_jail: bool, top: int) -> None:
    table.distribution(origin, 0, stay_in_jail)  # bounds check before printing anything
    for stay in (False, True):
        print("Steady state ({}):".format("stay in jail" if stay else "pay to leave"))
        for space_id, name, prob in table.most_visited(top, stay):
            print(f"  {space_id:3d} {name:<24s} {prob * 100:6.3f}%")

    print(f"Forecast from {table.names[origin]} ({'stay' if stay_in_jail else 'pay'}):")
    for turn in range(table.depth):
        dist = table.distribution(origin, turn, stay_in_jail)
        best = int(dist.argmax())
        print(f"  turn {turn + 1:2d}: most likely {table.names[best]} ({dist[best] * 100:.2f}%)")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--override", type=str, default=None)
    parser.add_argument("--set", dest="assignments", action="append", default=[],
                        help="dot-path override, e.g. table.depth=5")
    parser.add_argument("--origin", type=int, default=0)
    parser.add_argument("--jail", choices=("pay", "stay"), default="pay")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    cfg = load_config(args.config, args.override, args.assignments)
    with LoggingMux(cfg) as mux:
        print("Run dir: {}".format(mux.run_dir))
        table = build(cfg, mux)
        save_json(os.path.join(mux.run_dir, "table.json"), table.to_dict())
    report(table, args.origin, args.jail == "stay", TableConfig.from_dict(cfg).top)


if __name__ == "__main__":
    main()
