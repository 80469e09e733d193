import numpy as np
import pytest

from mlp_engine.activations import SIGMOID, Activation
from mlp_engine.errors import ShapeMismatch, StaleState
from mlp_engine.layers import BackProps, ProcessLayer, TerminalLayer
from mlp_engine.matrix import Matrix

IDENTITY = Activation(forward=lambda x: x, derivative=lambda y: 1.0, name="identity")


@pytest.fixture
def layer():
    layer = ProcessLayer(2, 1, np.random.default_rng(0))
    layer.weights = Matrix.from_data([[1.0, 2.0]])
    layer.biases = Matrix.from_data([[0.5]])
    return layer


def test_initial_state():
    layer = ProcessLayer(3, 4, np.random.default_rng(0))
    assert layer.weights.shape == (4, 3)
    assert layer.biases.shape == (4, 1)
    assert layer.data == Matrix.zeros(3, 1)
    assert np.all(np.abs(layer.weights.data) <= 1.0)
    assert not layer.awaiting_backward


def test_feed_forward_caches_input(layer):
    feed = Matrix.column([1.0, -1.0])
    out = layer.feed_forward(feed, IDENTITY)
    assert out.to_list() == [[-0.5]]
    assert layer.data == feed
    assert layer.awaiting_backward


def test_activate_is_pure(layer):
    out = layer.activate(Matrix.column([1.0, -1.0]), SIGMOID)
    assert out.to_list()[0][0] == pytest.approx(1 / (1 + np.exp(0.5)))
    assert layer.data == Matrix.zeros(2, 1)
    assert not layer.awaiting_backward


def test_back_propagate_updates_and_uses_old_weights(layer):
    layer.feed_forward(Matrix.column([1.0, -1.0]), IDENTITY)
    downstream = BackProps(Matrix.column([1.5]), Matrix.column([1.0]))

    error, grad = layer.back_propagate(0.1, downstream, IDENTITY)

    assert layer.weights.allclose(Matrix.from_data([[1.15, 1.85]]))
    assert layer.biases.allclose(Matrix.from_data([[0.65]]))
    # 誤差用更新前的權重 [[1, 2]] 傳回
    assert error.allclose(Matrix.column([1.5, 3.0]))
    assert grad == Matrix.column([1.0, 1.0])
    assert not layer.awaiting_backward


def test_back_propagate_without_forward_is_stale(layer):
    downstream = BackProps(Matrix.column([1.0]), Matrix.column([1.0]))
    with pytest.raises(StaleState):
        layer.back_propagate(0.1, downstream, SIGMOID)


def test_back_propagate_twice_is_stale(layer):
    layer.feed_forward(Matrix.column([1.0, 0.0]), SIGMOID)
    downstream = BackProps(Matrix.column([1.0]), Matrix.column([1.0]))
    layer.back_propagate(0.1, downstream, SIGMOID)
    with pytest.raises(StaleState):
        layer.back_propagate(0.1, downstream, SIGMOID)


def test_feed_forward_twice_is_stale(layer):
    layer.feed_forward(Matrix.column([1.0, 0.0]), SIGMOID)
    with pytest.raises(StaleState):
        layer.feed_forward(Matrix.column([1.0, 0.0]), SIGMOID)


def test_shape_errors_leave_parameters_untouched(layer):
    with pytest.raises(ShapeMismatch):
        layer.feed_forward(Matrix.column([1.0, 2.0, 3.0]), SIGMOID)
    assert not layer.awaiting_backward

    layer.feed_forward(Matrix.column([1.0, 0.0]), SIGMOID)
    weights, biases = layer.weights, layer.biases
    bad = BackProps(Matrix.column([1.0, 1.0]), Matrix.column([1.0, 1.0]))
    with pytest.raises(ShapeMismatch):
        layer.back_propagate(0.1, bad, SIGMOID)
    assert layer.weights == weights
    assert layer.biases == biases


def test_terminal_layer():
    terminal = TerminalLayer(2)
    outputs = terminal.feed_forward(Matrix.column([0.25, 0.75]), SIGMOID)
    assert list(outputs) == [0.25, 0.75]

    error, grad = terminal.back_propagate(0.5, outputs, [1.0, 0.0], SIGMOID)
    assert error == Matrix.column([0.75, -0.75])
    assert grad == Matrix.column([0.1875, 0.1875])


def test_terminal_layer_pairing():
    terminal = TerminalLayer(1)
    with pytest.raises(StaleState):
        terminal.back_propagate(0.5, [0.5], [1.0], SIGMOID)
    with pytest.raises(ShapeMismatch):
        terminal.feed_forward(Matrix.column([0.5, 0.5]), SIGMOID)


def test_compute_update_does_not_mutate_until_commit(layer):
    layer.feed_forward(Matrix.column([1.0, -1.0]), IDENTITY)
    downstream = BackProps(Matrix.column([1.5]), Matrix.column([1.0]))

    update = layer.compute_update(0.1, downstream, IDENTITY)
    assert layer.weights == Matrix.from_data([[1.0, 2.0]])
    assert layer.biases == Matrix.from_data([[0.5]])
    assert layer.awaiting_backward
    assert update.upstream.error.allclose(Matrix.column([1.5, 3.0]))

    layer.commit(update)
    assert layer.weights.allclose(Matrix.from_data([[1.15, 1.85]]))
    assert layer.biases.allclose(Matrix.from_data([[0.65]]))
    assert not layer.awaiting_backward
    with pytest.raises(StaleState):
        layer.commit(update)
