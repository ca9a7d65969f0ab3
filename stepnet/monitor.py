from __future__ import annotations

import csv
from pathlib import Path

from .sequencer import StepView, Value


def format_value(value: Value, digits: int = 4) -> str:
    if isinstance(value, tuple):
        old, new = value
        return f"{old:.{digits}f} → {new:.{digits}f}"
    return f"{value:.{digits}f}"


def format_view(view: StepView) -> str:
    width = max((len(label) for label, _ in view.values), default=0)
    lines = [view.title]
    lines.extend(f"  {label.ljust(width)}  {format_value(value)}" for label, value in view.values)
    return "\n".join(lines)


def write_history_csv(path: str, history: list[dict[str, float]]) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    fields = ["step_idx", "hidden_count", "learning_rate", "old_loss", "new_loss"]
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fields)
        writer.writeheader()
        for row in history:
            out = {name: row.get(name, 0.0) for name in fields}
            out["step_idx"] = int(out["step_idx"])
            out["hidden_count"] = int(out["hidden_count"])
            writer.writerow(out)


def write_trace_csv(path: str, views: list[StepView]) -> None:
    """One row per (step, label); update rows carry both old and new values."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["step", "label", "value", "new_value"])
        writer.writeheader()
        for view in views:
            for label, value in view.values:
                if isinstance(value, tuple):
                    old, new = value
                    writer.writerow({"step": view.step.name, "label": label, "value": old, "new_value": new})
                else:
                    writer.writerow({"step": view.step.name, "label": label, "value": value, "new_value": ""})
