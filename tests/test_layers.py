import math
import random

import pytest

from rgbnet.config import BIAS
from rgbnet.core.layers import (
    ClassificationCounter,
    HiddenLayer,
    InputLayer,
    LayerKind,
    OutputLayer,
)
from rgbnet.core.neuron import NeuronKind
from rgbnet.errors import InvalidOperation


def _chain(hidden: int = 3, classes: int = 2, seed: int = 0):
    rng = random.Random(seed)
    input_layer = InputLayer(3)
    hidden1 = HiddenLayer(hidden)
    hidden2 = HiddenLayer(hidden)
    output = OutputLayer(classes)
    hidden1.connect(input_layer, rng)
    hidden2.connect(hidden1, rng)
    output.connect(hidden2, rng)
    return input_layer, hidden1, hidden2, output


def test_layer_sizes_and_bias_slots() -> None:
    input_layer, hidden1, hidden2, output = _chain(hidden=4, classes=5)
    assert input_layer.size == 4
    assert hidden1.size == hidden2.size == 5
    assert output.size == 5
    for layer in (input_layer, hidden1, hidden2):
        assert layer.neurons[-1].kind is NeuronKind.BIAS
    assert all(neuron.kind is NeuronKind.REGULAR for neuron in output.neurons)
    assert output.kind is LayerKind.OUTPUT


def test_weight_vectors_match_predecessor_size() -> None:
    input_layer, hidden1, hidden2, output = _chain(hidden=6, classes=3)
    for prev, layer in ((input_layer, hidden1), (hidden1, hidden2), (hidden2, output)):
        for neuron in layer.real_neurons():
            assert len(neuron.weights) == prev.size


def test_layers_cannot_be_connected_twice() -> None:
    input_layer, hidden1, _, _ = _chain()
    with pytest.raises(InvalidOperation):
        hidden1.connect(input_layer, random.Random(1))
    with pytest.raises(InvalidOperation):
        input_layer.connect(hidden1, random.Random(1))


def test_input_layer_carries_features_and_bias() -> None:
    input_layer = InputLayer(3)
    input_layer.set_inputs([0.1, -0.2, 0.3])
    assert input_layer.outputs() == [0.1, -0.2, 0.3, BIAS]
    with pytest.raises(ValueError):
        input_layer.set_inputs([0.1, 0.2])
    input_layer.calculate_delta()


def test_input_layer_cannot_run_forward() -> None:
    input_layer, hidden1, _, _ = _chain()
    with pytest.raises(InvalidOperation):
        input_layer.process(hidden1)


def test_output_layer_softmax_sums_to_one() -> None:
    input_layer, hidden1, hidden2, output = _chain(hidden=5, classes=4, seed=11)
    rng = random.Random(5)
    for _ in range(20):
        input_layer.set_inputs([rng.uniform(-1.0, 1.0) for _ in range(3)])
        hidden1.process(input_layer)
        hidden2.process(hidden1)
        output.process(hidden2)
        probabilities = output.probabilities()
        assert math.fsum(probabilities) == pytest.approx(1.0, abs=1e-9)
        assert all(0.0 <= p <= 1.0 for p in probabilities)


def test_output_uses_softmax_of_weighted_inputs() -> None:
    input_layer, hidden1, hidden2, output = _chain(classes=3)
    input_layer.set_inputs([0.5, 0.0, -0.5])
    hidden1.process(input_layer)
    hidden2.process(hidden1)
    output.process(hidden2)
    weighted = [neuron.weighted_input for neuron in output.neurons]
    exps = [math.exp(value) for value in weighted]
    expected = [value / sum(exps) for value in exps]
    assert output.probabilities() == pytest.approx(expected, abs=1e-12)


def test_output_delta_is_target_minus_output() -> None:
    input_layer, hidden1, hidden2, output = _chain(classes=3)
    input_layer.set_inputs([0.5, 0.0, -0.5])
    hidden1.process(input_layer)
    hidden2.process(hidden1)
    output.process(hidden2)
    output.set_target([0.0, 1.0, 0.0])
    output.calculate_delta()
    probabilities = output.probabilities()
    assert output.delta == pytest.approx([-probabilities[0], 1.0 - probabilities[1], -probabilities[2]])


def test_output_delta_requires_target() -> None:
    _, _, _, output = _chain()
    with pytest.raises(InvalidOperation):
        output.calculate_delta()


def test_hidden_delta_skips_bias_of_next_hidden_layer() -> None:
    input_layer, hidden1, hidden2, output = _chain(hidden=3, classes=2, seed=4)
    input_layer.set_inputs([0.2, -0.4, 0.9])
    hidden1.process(input_layer)
    hidden2.process(hidden1)
    output.process(hidden2)
    output.set_target([1.0, 0.0])
    output.calculate_delta()
    hidden2.calculate_delta(output)
    hidden1.calculate_delta(hidden2)

    for j in range(hidden2.width):
        out = hidden2.neurons[j].output
        upstream = sum(n.weights[j] * output.delta[k] for k, n in enumerate(output.neurons))
        assert hidden2.delta[j] == pytest.approx(out * (1.0 - out) * upstream, abs=1e-12)
    for j in range(hidden1.width):
        out = hidden1.neurons[j].output
        upstream = sum(hidden2.neurons[k].weights[j] * hidden2.delta[k] for k in range(hidden2.width))
        assert hidden1.delta[j] == pytest.approx(out * (1.0 - out) * upstream, abs=1e-12)
    assert hidden1.delta[-1] == 0.0
    assert hidden2.delta[-1] == 0.0


def test_adjust_weights_uses_predecessor_outputs() -> None:
    input_layer, hidden1, _, _ = _chain(hidden=2)
    input_layer.set_inputs([0.5, -0.5, 1.0])
    hidden1.delta = [0.2, -0.1, 0.0]
    before = hidden1.weight_matrix()
    hidden1.adjust_weights(input_layer, 0.5)
    after = hidden1.weight_matrix()
    inputs = input_layer.outputs()
    for k in range(2):
        expected = [w + 0.5 * hidden1.delta[k] * x for w, x in zip(before[k], inputs)]
        assert after[k] == pytest.approx(expected)


def test_output_vector_rounds_to_two_decimals() -> None:
    _, _, _, output = _chain(classes=3)
    for neuron, value in zip(output.neurons, (0.125, 0.3349, 0.5401)):
        neuron.output = value
    assert output.output_vector() == [0.13, 0.33, 0.54]
    assert output.probabilities() == [0.125, 0.3349, 0.5401]


def test_record_and_consume_classification_error() -> None:
    _, _, _, output = _chain(classes=2)
    rows = [
        ((0.8, 0.2), (1.0, 0.0)),
        ((0.3, 0.7), (1.0, 0.0)),
        ((0.1, 0.9), (0.0, 1.0)),
        ((0.5, 0.5), (0.0, 1.0)),
    ]
    for outputs, target in rows:
        for neuron, value in zip(output.neurons, outputs):
            neuron.output = value
        output.set_target(target)
        output.record_classification(training=True)
    # Ties resolve to the first index, so the last row counts as a miss.
    assert output.training.correct == 2
    assert output.consume_classification_error(training=True) == pytest.approx(50.0)
    assert output.training.processed == 0
    assert output.consume_classification_error(training=True) is None


def test_validation_branch_is_independent() -> None:
    _, _, _, output = _chain(classes=2)
    output.neurons[0].output, output.neurons[1].output = 0.9, 0.1
    output.set_target([1.0, 0.0])
    output.record_classification(training=False)
    assert output.consume_classification_error(training=True) is None
    assert output.consume_classification_error(training=False) == 0.0


def test_reset_classification_discards_counts() -> None:
    _, _, _, output = _chain(classes=2)
    output.neurons[0].output, output.neurons[1].output = 0.9, 0.1
    output.set_target([0.0, 1.0])
    output.record_classification(training=True)
    output.reset_classification(training=True)
    assert output.consume_classification_error(training=True) is None


def test_classification_counter_error_rate() -> None:
    counter = ClassificationCounter()
    assert counter.error_rate() is None
    for is_correct in (True, True, False, True):
        counter.record(is_correct)
    assert counter.error_rate() == pytest.approx(25.0)
    assert counter.consume() == pytest.approx(25.0)
    assert counter.consume() is None
