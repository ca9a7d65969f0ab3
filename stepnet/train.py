from __future__ import annotations

import argparse
import logging

from .engine import BackpropEngine, EngineConfig
from .monitor import format_view, write_history_csv, write_trace_csv
from .sequencer import Step, StepView
from .utils import DEFAULT_HIDDEN, DEFAULT_LR, DEFAULT_X, DEFAULT_Y


def config_from_args(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig(
        hidden_count=args.hidden,
        x=(args.x1, args.x2),
        y=args.y,
        learning_rate=args.lr,
        seed=args.seed,
    )


def walkthrough(engine: BackpropEngine) -> list[StepView]:
    """Visit all five steps once, committing the update on arrival at the last one."""
    seq = engine.sequencer
    views = [seq.view()]
    while seq.state != Step.UPDATE:
        if seq.state == Step.HIDDEN_GRADIENTS:
            seq.enter_update()
        else:
            seq.next()
        views.append(seq.view())
    return views


def train_steps(engine: BackpropEngine, steps: int) -> list[dict[str, float]]:
    history: list[dict[str, float]] = []
    if steps <= 0:
        return history
    seq = engine.sequencer
    if seq.state != Step.UPDATE:
        seq.enter_update()
        steps -= 1
        history.append(_history_row(engine, 1))
    for _ in range(steps):
        seq.apply_step()
        history.append(_history_row(engine, len(history) + 1))
    return history


def _history_row(engine: BackpropEngine, step_idx: int) -> dict[str, float]:
    update = engine.sequencer.last_update
    assert update is not None
    return {
        "step_idx": float(step_idx),
        "hidden_count": float(engine.architecture.hidden_count),
        "learning_rate": update.learning_rate,
        "old_loss": update.old_loss,
        "new_loss": update.new_loss,
    }


def run(args: argparse.Namespace) -> None:
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    engine = BackpropEngine(config_from_args(args))

    if args.walkthrough:
        views = walkthrough(engine)
        for view in views:
            print(format_view(view))
            print()
        if args.trace_csv_path:
            write_trace_csv(args.trace_csv_path, views)
            print(f"Trace written to {args.trace_csv_path}")
        return

    history = train_steps(engine, args.steps)
    for row in history:
        print(f"step={int(row['step_idx'])} old_loss={row['old_loss']:.6f} new_loss={row['new_loss']:.6f}")
    if args.metrics_csv_path:
        write_history_csv(args.metrics_csv_path, history)
        print(f"Metrics CSV updated at {args.metrics_csv_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Step through backpropagation on a 2 -> H -> 1 sigmoid network")
    parser.add_argument("--hidden", type=int, default=DEFAULT_HIDDEN, help="Number of hidden neurons")
    parser.add_argument("--x1", type=float, default=DEFAULT_X[0])
    parser.add_argument("--x2", type=float, default=DEFAULT_X[1])
    parser.add_argument("--y", type=float, default=DEFAULT_Y, help="Target output")
    parser.add_argument("--lr", type=float, default=DEFAULT_LR)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--steps", type=int, default=20, help="Gradient descent steps to take")
    parser.add_argument("--walkthrough", action="store_true", help="Print every step of one pass instead of training")
    parser.add_argument("--metrics-csv-path", type=str, default="")
    parser.add_argument("--trace-csv-path", type=str, default="")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main() -> None:
    run(build_parser().parse_args())


if __name__ == "__main__":
    main()
