import csv

import pytest

from stepnet.engine import BackpropEngine, EngineConfig
from stepnet.sequencer import Step
from stepnet.train import build_parser, config_from_args, run, train_steps, walkthrough


def test_config_from_args_defaults() -> None:
    config = config_from_args(build_parser().parse_args([]))
    assert config == EngineConfig()


def test_config_from_args_overrides() -> None:
    args = build_parser().parse_args(["--hidden", "4", "--x1", "0.2", "--x2", "0.9", "--y", "0.1", "--lr", "0.5", "--seed", "3"])
    config = config_from_args(args)
    assert config.hidden_count == 4
    assert config.x == (0.2, 0.9)
    assert config.y == 0.1
    assert config.learning_rate == 0.5
    assert config.seed == 3


def test_walkthrough_visits_every_step_and_commits_once() -> None:
    engine = BackpropEngine(EngineConfig(seed=1))
    before = engine.params.copy()
    views = walkthrough(engine)
    assert [v.step for v in views] == list(Step)
    assert views[-1].update is not None
    assert views[-1].update.old_parameters == before
    assert engine.params == views[-1].update.new_parameters


def test_train_steps_history_is_chained() -> None:
    engine = BackpropEngine(EngineConfig(seed=1))
    history = train_steps(engine, 5)
    assert [int(row["step_idx"]) for row in history] == [1, 2, 3, 4, 5]
    for prev, cur in zip(history, history[1:]):
        assert cur["old_loss"] == pytest.approx(prev["new_loss"])
    assert history[-1]["new_loss"] < history[0]["old_loss"]


def test_train_steps_zero_does_nothing() -> None:
    engine = BackpropEngine(EngineConfig(seed=1))
    before = engine.params.copy()
    assert train_steps(engine, 0) == []
    assert engine.params == before


def test_run_writes_metrics_csv(tmp_path, capsys) -> None:
    path = tmp_path / "out" / "metrics.csv"
    run(build_parser().parse_args(["--seed", "0", "--steps", "3", "--metrics-csv-path", str(path)]))
    out = capsys.readouterr().out
    assert "step=3" in out

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 3
    assert rows[0]["step_idx"] == "1"
    assert rows[0]["hidden_count"] == "2"


def test_run_walkthrough_writes_trace_csv(tmp_path, capsys) -> None:
    path = tmp_path / "trace.csv"
    run(build_parser().parse_args(["--seed", "0", "--walkthrough", "--trace-csv-path", str(path)]))
    out = capsys.readouterr().out
    assert "1. Forward pass" in out
    assert "5. Update" in out

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert {row["step"] for row in rows} == {step.name for step in Step}
    b_o = [row for row in rows if row["label"] == "b_o"]
    assert len(b_o) == 1
    assert b_o[0]["new_value"] != ""


def test_run_rejects_empty_hidden_layer() -> None:
    with pytest.raises(ValueError):
        run(build_parser().parse_args(["--hidden", "0"]))
