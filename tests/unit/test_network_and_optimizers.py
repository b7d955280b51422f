import numpy as np
import pytest

from densenets.core.activations import Activation
from densenets.core.errors import DimensionMismatchError, InvalidHyperparameterError
from densenets.core.layers import Layer
from densenets.core.network import Network, apply_dropout, determine_output_size
from densenets.core.optimizers import (
    AdamOptimizer,
    MomentumOptimizer,
    SGDOptimizer,
    build_optimizer,
)
from densenets.core.types import LayerGradients


def _build(hidden=(5, 4), n_features=3, output_size=2, seed=0):
    return Network.build(
        n_features, output_size, list(hidden), "RELU", np.random.default_rng(seed)
    )


def test_build_layout_and_architecture():
    network = _build()
    assert network.describe().layer_dims == [3, 3, 5, 4, 2]
    assert network.architecture == "3->5->4->2"
    assert [layer.activation for layer in network.layers] == [
        Activation.LINEAR,
        Activation.RELU,
        Activation.RELU,
        Activation.SIGMOID,
    ]
    assert network.parameter_count == 3 * 4 + 5 * 4 + 4 * 6 + 2 * 5
    assert network.input_dim == 3
    assert network.output_dim == 2


def test_build_is_deterministic_for_a_seed():
    first = _build(seed=11)
    second = _build(seed=11)
    for a, b in zip(first.layers, second.layers):
        assert np.array_equal(a.weights, b.weights)


def test_mismatched_layers_are_rejected():
    rng = np.random.default_rng(0)
    with pytest.raises(DimensionMismatchError):
        Network([Layer(2, 3, "RELU", rng), Layer(4, 1, "SIGMOID", rng)])


def test_forward_output_length_and_mismatch():
    network = _build(output_size=3)
    out = network.forward(np.array([0.1, 0.2, 0.3]))
    assert out.shape == (3,)
    assert np.all((out > 0) & (out < 1))
    with pytest.raises(DimensionMismatchError):
        network.forward(np.array([0.1, 0.2]))


def test_zero_dropout_matches_inference():
    network = _build()
    x = np.array([0.5, -0.3, 0.8])
    inference = network.forward(x)
    training = network.forward(
        x, training=True, dropout_rate=0.0, rng=np.random.default_rng(0)
    )
    assert np.array_equal(inference, training)


def test_dropout_requires_generator():
    network = _build()
    with pytest.raises(ValueError):
        network.forward(np.zeros(3), training=True, dropout_rate=0.5)


def test_inverted_dropout_statistics():
    values = np.ones(20000)
    dropped, mask = apply_dropout(values, 0.5, np.random.default_rng(0))
    assert set(np.unique(dropped)) <= {0.0, 2.0}
    assert np.array_equal(dropped, values * mask)
    assert abs(np.mean(dropped == 0.0) - 0.5) < 0.02
    assert abs(dropped.mean() - 1.0) < 0.05


def test_dropped_units_receive_no_update():
    rng = np.random.default_rng(3)
    network = Network([Layer(2, 50, "TANH", rng), Layer(50, 1, "SIGMOID", rng)])
    first_w = network.layers[0].weights.copy()
    first_b = network.layers[0].biases.copy()
    second_w = network.layers[1].weights.copy()

    out = network.forward(
        np.array([0.3, -0.6]), training=True, dropout_rate=0.5, rng=np.random.default_rng(9)
    )
    mask = network._dropout_masks[0]
    dropped = mask == 0
    assert dropped.any() and (~dropped).any()

    network.backward(np.array([1.0]) - out, SGDOptimizer(learning_rate=0.1))

    assert np.array_equal(network.layers[0].weights[dropped], first_w[dropped])
    assert np.array_equal(network.layers[0].biases[dropped], first_b[dropped])
    assert np.array_equal(network.layers[1].weights[:, dropped], second_w[:, dropped])
    assert not np.array_equal(network.layers[1].weights, second_w)


@pytest.mark.parametrize(
    "task_type, targets, expected",
    [
        ("regression", [0.1, 0.2, 0.3], 1),
        ("classification", [0, 1, 2, 1], 3),
        ("classification", [1, 1, 1], 1),
        ("classification", [], 1),
    ],
)
def test_determine_output_size(task_type, targets, expected):
    assert determine_output_size(task_type, targets) == expected


def test_determine_output_size_rejects_unknown_task():
    with pytest.raises(InvalidHyperparameterError):
        determine_output_size("clustering", [0, 1])


def _grads_for(layer: Layer, value: float) -> LayerGradients:
    return LayerGradients(
        weights=np.full_like(layer.weights, value),
        biases=np.full_like(layer.biases, value),
        input_error=np.zeros(layer.input_dim),
    )


def test_build_optimizer_names():
    assert isinstance(build_optimizer("sgd", 0.1), SGDOptimizer)
    assert isinstance(build_optimizer("Momentum", 0.1), MomentumOptimizer)
    assert isinstance(build_optimizer("adam", 0.1), AdamOptimizer)
    with pytest.raises(InvalidHyperparameterError):
        build_optimizer("rmsprop", 0.1)


def test_momentum_accumulates_velocity():
    layer = Layer(2, 2, "LINEAR", np.random.default_rng(0))
    start = layer.weights.copy()
    optimizer = MomentumOptimizer(learning_rate=0.1, momentum=0.5)
    grads = _grads_for(layer, 1.0)

    optimizer.step(0, layer, grads)
    assert np.allclose(layer.weights, start + 0.1)
    optimizer.step(0, layer, grads)
    assert np.allclose(layer.weights, start + 0.1 + (0.5 * 0.1 + 0.1))


def test_adam_first_step_has_learning_rate_magnitude():
    layer = Layer(2, 2, "LINEAR", np.random.default_rng(0))
    start_w = layer.weights.copy()
    start_b = layer.biases.copy()
    optimizer = AdamOptimizer(learning_rate=0.01)
    optimizer.step(0, layer, _grads_for(layer, -3.0))
    assert np.allclose(layer.weights - start_w, -0.01, atol=1e-6)
    assert np.allclose(layer.biases - start_b, -0.01, atol=1e-6)
