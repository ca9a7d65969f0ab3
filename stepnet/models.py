from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from .utils import INPUT_COUNT, OUTPUT_COUNT, uniform_init

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Architecture:
    """Shape of the network: input_count -> hidden_count -> 1, sigmoid everywhere."""

    input_count: int = INPUT_COUNT
    hidden_count: int = 2
    output_count: int = OUTPUT_COUNT

    def __post_init__(self) -> None:
        for name in ("input_count", "hidden_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an int, got {value!r}")
            if value < 1:
                raise ValueError(f"{name} must be >= 1, got {value}")
        if self.output_count != OUTPUT_COUNT:
            raise ValueError(f"output_count is fixed at {OUTPUT_COUNT}, got {self.output_count}")

    def with_hidden(self, hidden_count: int) -> Architecture:
        return Architecture(input_count=self.input_count, hidden_count=hidden_count)


@dataclass
class Parameters:
    """All weights and biases. Values change in place, the shape never does."""

    input_to_hidden_weights: list[list[float]]
    hidden_biases: list[float]
    hidden_to_output_weights: list[float]
    output_bias: float

    @classmethod
    def random(cls, architecture: Architecture, rng: random.Random) -> Parameters:
        h = architecture.hidden_count
        n = architecture.input_count
        return cls(
            input_to_hidden_weights=[[uniform_init(rng) for _ in range(n)] for _ in range(h)],
            hidden_biases=[uniform_init(rng) for _ in range(h)],
            hidden_to_output_weights=[uniform_init(rng) for _ in range(h)],
            output_bias=uniform_init(rng),
        )

    @property
    def hidden_count(self) -> int:
        return len(self.hidden_biases)

    @property
    def input_count(self) -> int:
        return len(self.input_to_hidden_weights[0]) if self.input_to_hidden_weights else 0

    def shape(self) -> tuple[int, int]:
        return self.hidden_count, self.input_count

    def copy(self) -> Parameters:
        return Parameters(
            input_to_hidden_weights=[row[:] for row in self.input_to_hidden_weights],
            hidden_biases=self.hidden_biases[:],
            hidden_to_output_weights=self.hidden_to_output_weights[:],
            output_bias=self.output_bias,
        )

    def flat(self) -> list[tuple[str, float]]:
        """Every scalar with its 1-based display label, in a stable order."""
        out: list[tuple[str, float]] = []
        for j, row in enumerate(self.input_to_hidden_weights):
            for i, w in enumerate(row):
                out.append((f"w_ih{j + 1},{i + 1}", w))
            out.append((f"b_h{j + 1}", self.hidden_biases[j]))
        for j, w in enumerate(self.hidden_to_output_weights):
            out.append((f"w_ho{j + 1}", w))
        out.append(("b_o", self.output_bias))
        return out


class ParameterStore:
    """Sole owner of the network parameters.

    A change of architecture replaces the whole Parameters value; it is never
    resized in place.
    """

    def __init__(self, architecture: Architecture, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self.architecture = architecture
        self.params = Parameters.random(architecture, self.rng)

    def initialize(self, architecture: Architecture | None = None) -> Parameters:
        if architecture is not None:
            self.architecture = architecture
        self.params = Parameters.random(self.architecture, self.rng)
        logger.debug(
            "initialized parameters for %d->%d->1",
            self.architecture.input_count,
            self.architecture.hidden_count,
        )
        return self.params

    def set_architecture(self, architecture: Architecture) -> Parameters:
        return self.initialize(architecture)

    def apply_update(self, gradients: Parameters, learning_rate: float) -> None:
        """p <- p - learning_rate * g for every weight and bias.

        learning_rate is not validated: 0 leaves everything unchanged and a
        negative value performs gradient ascent.
        """
        p = self.params
        if gradients.shape() != p.shape():
            raise ValueError(f"gradient shape {gradients.shape()} does not match parameters {p.shape()}")

        for j in range(p.hidden_count):
            for i in range(p.input_count):
                p.input_to_hidden_weights[j][i] -= learning_rate * gradients.input_to_hidden_weights[j][i]
            p.hidden_biases[j] -= learning_rate * gradients.hidden_biases[j]
            p.hidden_to_output_weights[j] -= learning_rate * gradients.hidden_to_output_weights[j]
        p.output_bias -= learning_rate * gradients.output_bias
        logger.debug("applied gradient step with lr=%s", learning_rate)
