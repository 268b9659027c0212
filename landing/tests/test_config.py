import json
import os
import numpy as np
import pytest
from landing.engine.errors import ErrorCode, ProbabilityError
from landing.engine.state import TableConfig
from landing.utils.jsonio import deep_update, load_json, override_config, parse_assignments, save_json
from landing.utils.logging import LoggingMux

DEFAULT_CFG = os.path.join(os.path.dirname(__file__), "..", "configs", "default.json")

def test_defaults_and_round_trip():
    cfg = TableConfig.from_dict({})
    assert cfg.depth == 10 and cfg.layout is None and cfg.max_doubles is None
    assert cfg.board_overrides() == {}
    assert TableConfig(**cfg.to_dict()) == cfg

def test_from_default_json():
    cfg = TableConfig.from_dict(load_json(DEFAULT_CFG))
    assert cfg.depth == 10 and cfg.top == 10
    assert cfg.max_turns_in_jail is None

def test_rule_overrides():
    cfg = TableConfig.from_dict({"table": {"depth": 3}, "rules": {"max_doubles": 2, "max_turns_in_jail": 1, "dice_sides": 4}})
    assert cfg.depth == 3
    assert cfg.board_overrides() == {"dice": {"sides": 4, "max_doubles": 2}, "jail": {"max_turns": 1}}

def test_deep_update_and_dot_paths():
    base = {"table": {"depth": 10, "top": 5}, "logging": {"csv": True}}
    merged = deep_update(base, {"table": {"depth": 2}})
    assert merged == {"table": {"depth": 2, "top": 5}, "logging": {"csv": True}}
    assert base["table"]["depth"] == 10
    out = override_config(base, parse_assignments(["table.depth=4", "logging.run_name=exp1", "rules.max_doubles=2"]))
    assert out["table"]["depth"] == 4
    assert out["logging"]["run_name"] == "exp1"
    assert out["rules"] == {"max_doubles": 2}
    with pytest.raises(ValueError):
        parse_assignments(["table.depth"])

def test_save_json_handles_numpy(tmp_path):
    path = str(tmp_path / "out.json")
    save_json(path, {"v": np.arange(3, dtype=np.float64), "x": np.float64(0.5)})
    assert load_json(path) == {"v": [0.0, 1.0, 2.0], "x": 0.5}

def test_logging_mux_writes_metrics(tmp_path):
    cfg = {"logging": {"logdir": str(tmp_path), "run_name": "unit"}}
    with LoggingMux(cfg) as mux:
        mux.scalars("build/pay", {"residual": 1e-12}, 0)
        mux.scalar("build/seconds", 0.25, 0)
    run_dir = tmp_path / "unit"
    rows = (run_dir / "metrics.csv").read_text(encoding="utf-8").splitlines()
    assert rows[0] == "step,key,value,timestamp"
    assert rows[1].startswith("0,build/pay/residual,")
    lines = [json.loads(l) for l in (run_dir / "metrics.jsonl").read_text(encoding="utf-8").splitlines()]
    assert lines[0]["build/pay"]["residual"] == 1e-12
    assert lines[1]["build/seconds"] == 0.25

def test_error_to_dict():
    err = ProbabilityError(ErrorCode.ERR_ROW_SUM, details={"rows": [3]})
    assert err.to_dict() == {"code": "ERR_ROW_SUM", "details": {"rows": [3]}}
    assert str(err) == "ERR_ROW_SUM"
