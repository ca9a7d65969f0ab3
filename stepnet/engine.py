from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field

from .models import Architecture, ParameterStore, Parameters
from .passes import BackwardTrace, Example, ForwardTrace, backward, forward
from .sequencer import StepSequencer, UpdateResult
from .utils import DEFAULT_HIDDEN, DEFAULT_LR, DEFAULT_X, DEFAULT_Y, INPUT_COUNT

logger = logging.getLogger(__name__)


@dataclass
class EngineConfig:
    hidden_count: int = DEFAULT_HIDDEN
    input_count: int = INPUT_COUNT
    x: tuple[float, ...] = field(default_factory=lambda: DEFAULT_X)
    y: float = DEFAULT_Y
    learning_rate: float = DEFAULT_LR
    seed: int | None = None


@dataclass(frozen=True)
class Evaluation:
    forward: ForwardTrace
    backward: BackwardTrace


class BackpropEngine:
    """One example, one 2 -> H -> 1 sigmoid network, recomputed on every query."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        config = config or EngineConfig()
        self.rng = random.Random(config.seed)
        self.store = ParameterStore(
            Architecture(input_count=config.input_count, hidden_count=config.hidden_count),
            rng=self.rng,
        )
        self.example = Example.of(config.x, config.y)
        self._check_example(self.example)
        self.learning_rate = float(config.learning_rate)
        self.sequencer = StepSequencer(self)

    @property
    def architecture(self) -> Architecture:
        return self.store.architecture

    @property
    def params(self) -> Parameters:
        return self.store.params

    def _check_example(self, example: Example) -> None:
        if len(example.x) != self.architecture.input_count:
            raise ValueError(
                f"expected {self.architecture.input_count} inputs, got {len(example.x)}"
            )

    def set_architecture(self, hidden_count: int) -> None:
        architecture = self.architecture.with_hidden(hidden_count)
        self.store.set_architecture(architecture)
        self.sequencer.last_update = None
        logger.debug("hidden layer resized to %d", hidden_count)

    def set_example(self, x1: float, x2: float, y: float) -> None:
        self.set_inputs([x1, x2], y)

    def set_inputs(self, x: Sequence[float], y: float) -> None:
        example = Example.of(x, y)
        self._check_example(example)
        self.example = example

    def set_learning_rate(self, lr: float) -> None:
        self.learning_rate = float(lr)

    def reset_parameters(self) -> None:
        self.store.initialize()

    def evaluate(self) -> Evaluation:
        trace = forward(self.example, self.params)
        return Evaluation(forward=trace, backward=backward(trace, self.params))

    def train_step(self) -> UpdateResult:
        """Take one gradient descent step and report the loss before and after it."""
        old_parameters = self.params.copy()
        before = self.evaluate()
        self.store.apply_update(before.backward.parameter_gradients(), self.learning_rate)
        after = forward(self.example, self.params)
        logger.debug("loss %.6f -> %.6f", before.forward.loss, after.loss)
        return UpdateResult(
            old_parameters=old_parameters,
            old_loss=before.forward.loss,
            new_parameters=self.params.copy(),
            new_loss=after.loss,
            learning_rate=self.learning_rate,
        )
