from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Union

from .models import Parameters
from .passes import BackwardTrace, ForwardTrace

if TYPE_CHECKING:
    from .engine import BackpropEngine


class Step(IntEnum):
    FORWARD = 0
    LOSS = 1
    OUTPUT_GRADIENTS = 2
    HIDDEN_GRADIENTS = 3
    UPDATE = 4


STEP_TITLES = {
    Step.FORWARD: "1. Forward pass: from inputs to prediction",
    Step.LOSS: "2. Loss: how far is ŷ from y?",
    Step.OUTPUT_GRADIENTS: "3. Backward: gradients at the output neuron",
    Step.HIDDEN_GRADIENTS: "4. Backward: gradients for hidden neurons and input weights",
    Step.UPDATE: "5. Update: take one gradient descent step",
}

Value = Union[float, tuple[float, float]]


@dataclass(frozen=True)
class UpdateResult:
    old_parameters: Parameters
    old_loss: float
    new_parameters: Parameters
    new_loss: float
    learning_rate: float

    def deltas(self) -> list[tuple[str, tuple[float, float]]]:
        old = self.old_parameters.flat()
        new = self.new_parameters.flat()
        return [(label, (before, after)) for (label, before), (_, after) in zip(old, new)]


@dataclass(frozen=True)
class StepView:
    step: Step
    title: str
    forward: ForwardTrace
    backward: BackwardTrace
    values: list[tuple[str, Value]]
    update: UpdateResult | None = None


def forward_values(fwd: ForwardTrace) -> list[tuple[str, Value]]:
    values: list[tuple[str, Value]] = [(f"x{i + 1}", xi) for i, xi in enumerate(fwd.x)]
    for j, (z, h) in enumerate(zip(fwd.hidden_pre_activations, fwd.hidden_activations)):
        values.append((f"z_h{j + 1}", z))
        values.append((f"h{j + 1}", h))
    values.append(("z_out", fwd.output_pre_activation))
    values.append(("ŷ", fwd.prediction))
    return values


def loss_values(fwd: ForwardTrace) -> list[tuple[str, Value]]:
    return [("ŷ", fwd.prediction), ("y", fwd.y), ("L", fwd.loss)]


def output_gradient_values(bwd: BackwardTrace) -> list[tuple[str, Value]]:
    values: list[tuple[str, Value]] = [
        ("dL/dŷ", bwd.d_loss_d_prediction),
        ("σ'(z_out)", bwd.d_prediction_d_output_pre_activation),
        ("dL/dz_out", bwd.d_loss_d_output_pre_activation),
    ]
    for j, g in enumerate(bwd.d_loss_d_hidden_to_output_weights):
        values.append((f"dL/dw_ho{j + 1}", g))
    values.append(("dL/db_o", bwd.d_loss_d_output_bias))
    return values


def hidden_gradient_values(bwd: BackwardTrace) -> list[tuple[str, Value]]:
    values: list[tuple[str, Value]] = []
    for j in range(len(bwd.d_loss_d_hidden_activations)):
        values.append((f"dL/dh{j + 1}", bwd.d_loss_d_hidden_activations[j]))
        values.append((f"σ'(z_h{j + 1})", bwd.d_activation_d_pre_activations[j]))
        values.append((f"dL/dz_h{j + 1}", bwd.d_loss_d_hidden_pre_activations[j]))
    for j, row in enumerate(bwd.d_loss_d_input_to_hidden_weights):
        for i, g in enumerate(row):
            values.append((f"dL/dw_ih{j + 1},{i + 1}", g))
        values.append((f"dL/db_h{j + 1}", bwd.d_loss_d_hidden_biases[j]))
    return values


def update_values(update: UpdateResult) -> list[tuple[str, Value]]:
    values: list[tuple[str, Value]] = [("Old loss", update.old_loss), ("New loss", update.new_loss)]
    values.extend(update.deltas())
    return values


class StepSequencer:
    """Cursor over the five walkthrough steps.

    Moving the cursor and `view()` never touch the parameters. Training only
    happens through `apply_step()`, which is allowed in the update step and
    may be called repeatedly: every call is one more gradient descent step.
    """

    def __init__(self, engine: BackpropEngine) -> None:
        self.engine = engine
        self.state = Step.FORWARD
        self.last_update: UpdateResult | None = None

    def _move(self, state: Step) -> None:
        self.state = state
        self.last_update = None

    def next(self) -> Step:
        self._move(Step(min(self.state + 1, Step.UPDATE)))
        return self.state

    def prev(self) -> Step:
        self._move(Step(max(self.state - 1, Step.FORWARD)))
        return self.state

    def reset(self) -> Step:
        self.engine.reset_parameters()
        self._move(Step.FORWARD)
        return self.state

    def apply_step(self) -> UpdateResult:
        if self.state != Step.UPDATE:
            raise RuntimeError(f"parameters can only be updated in {Step.UPDATE.name}, not {self.state.name}")
        self.last_update = self.engine.train_step()
        return self.last_update

    def enter_update(self) -> UpdateResult:
        """Jump to the update step and commit one update, as the walkthrough does on arrival."""
        self._move(Step.UPDATE)
        return self.apply_step()

    def view(self) -> StepView:
        result = self.engine.evaluate()
        fwd, bwd = result.forward, result.backward
        if self.state == Step.FORWARD:
            values = forward_values(fwd)
        elif self.state == Step.LOSS:
            values = loss_values(fwd)
        elif self.state == Step.OUTPUT_GRADIENTS:
            values = output_gradient_values(bwd)
        elif self.state == Step.HIDDEN_GRADIENTS:
            values = hidden_gradient_values(bwd)
        elif self.last_update is not None:
            values = update_values(self.last_update)
        else:
            values = [("L", fwd.loss), ("learning rate", self.engine.learning_rate)]
        return StepView(
            step=self.state,
            title=STEP_TITLES[self.state],
            forward=fwd,
            backward=bwd,
            values=values,
            update=self.last_update if self.state == Step.UPDATE else None,
        )
