from __future__ import annotations

import math
import random


INIT_RANGE = 0.8
INPUT_COUNT = 2
OUTPUT_COUNT = 1

DEFAULT_X = (0.5, -0.3)
DEFAULT_Y = 0.8
DEFAULT_LR = 0.1
DEFAULT_HIDDEN = 2


def sigmoid(z: float) -> float:
    # math.exp raises OverflowError instead of returning inf, so only ever
    # exponentiate a non-positive number.
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    e = math.exp(z)
    return e / (1.0 + e)


def sigmoid_prime(z: float) -> float:
    s = sigmoid(z)
    return s * (1.0 - s)


def half_squared_error(prediction: float, target: float) -> float:
    """0.5 * (prediction - target)^2, so that d/dprediction is just the error."""
    diff = prediction - target
    return 0.5 * diff * diff


def uniform_init(rng: random.Random) -> float:
    return rng.uniform(-INIT_RANGE, INIT_RANGE)
