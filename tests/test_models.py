import random

import pytest

from stepnet.models import Architecture, ParameterStore, Parameters
from stepnet.utils import INIT_RANGE


def _all_values(p: Parameters) -> list[float]:
    return [v for _, v in p.flat()]


@pytest.mark.parametrize("hidden", [0, -3])
def test_architecture_rejects_empty_hidden_layer(hidden: int) -> None:
    with pytest.raises(ValueError):
        Architecture(hidden_count=hidden)


def test_architecture_rejects_non_int_and_multi_output() -> None:
    with pytest.raises(ValueError):
        Architecture(hidden_count=2.5)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        Architecture(hidden_count=True)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        Architecture(output_count=2)


def test_initialize_shapes_and_range() -> None:
    store = ParameterStore(Architecture(hidden_count=5), rng=random.Random(3))
    p = store.params
    assert len(p.input_to_hidden_weights) == 5
    assert all(len(row) == 2 for row in p.input_to_hidden_weights)
    assert len(p.hidden_biases) == 5
    assert len(p.hidden_to_output_weights) == 5
    assert all(-INIT_RANGE <= v <= INIT_RANGE for v in _all_values(p))


def test_set_architecture_replaces_store_wholesale() -> None:
    store = ParameterStore(Architecture(hidden_count=4), rng=random.Random(0))
    before = store.params
    store.set_architecture(Architecture(hidden_count=2))
    assert store.params is not before
    assert len(store.params.input_to_hidden_weights) == 2
    assert len(store.params.hidden_to_output_weights) == 2
    assert len(before.hidden_biases) == 4


def test_manual_reset_keeps_shape_but_redraws() -> None:
    store = ParameterStore(Architecture(hidden_count=3), rng=random.Random(1))
    before = store.params.copy()
    store.initialize()
    assert store.params.shape() == before.shape()
    assert _all_values(store.params) != _all_values(before)


def _gradient_like(p: Parameters, value: float) -> Parameters:
    return Parameters(
        input_to_hidden_weights=[[value for _ in row] for row in p.input_to_hidden_weights],
        hidden_biases=[value for _ in p.hidden_biases],
        hidden_to_output_weights=[value for _ in p.hidden_to_output_weights],
        output_bias=value,
    )


def test_apply_update_moves_against_gradient() -> None:
    store = ParameterStore(Architecture(hidden_count=2), rng=random.Random(2))
    before = store.params.copy()
    store.apply_update(_gradient_like(before, 1.0), 0.5)
    for (_, old), (_, new) in zip(before.flat(), store.params.flat()):
        assert new == pytest.approx(old - 0.5)


def test_apply_update_zero_and_negative_learning_rate() -> None:
    store = ParameterStore(Architecture(hidden_count=2), rng=random.Random(2))
    before = store.params.copy()
    store.apply_update(_gradient_like(before, 1.0), 0.0)
    assert _all_values(store.params) == _all_values(before)

    store.apply_update(_gradient_like(before, 1.0), -0.25)
    for (_, old), (_, new) in zip(before.flat(), store.params.flat()):
        assert new == pytest.approx(old + 0.25)


def test_apply_update_rejects_mismatched_shape() -> None:
    store = ParameterStore(Architecture(hidden_count=3), rng=random.Random(2))
    other = ParameterStore(Architecture(hidden_count=2), rng=random.Random(2)).params
    with pytest.raises(ValueError):
        store.apply_update(other, 0.1)


def test_copy_is_independent() -> None:
    p = ParameterStore(Architecture(hidden_count=2), rng=random.Random(0)).params
    c = p.copy()
    c.input_to_hidden_weights[0][0] += 1.0
    c.hidden_biases[1] += 1.0
    assert p.input_to_hidden_weights[0][0] != c.input_to_hidden_weights[0][0]
    assert p.hidden_biases[1] != c.hidden_biases[1]


def test_flat_labels_are_one_based() -> None:
    p = ParameterStore(Architecture(hidden_count=2), rng=random.Random(0)).params
    labels = [label for label, _ in p.flat()]
    assert labels == ["w_ih1,1", "w_ih1,2", "b_h1", "w_ih2,1", "w_ih2,2", "b_h2", "w_ho1", "w_ho2", "b_o"]
