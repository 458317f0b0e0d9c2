"""Input, hidden and output layers of the feed-forward classifier.

Layers never hold references to their neighbours. The owning
:class:`~rgbnet.core.network.Network` keeps them in an ordered tuple and
passes the predecessor or successor into every operation that needs it.
"""
from __future__ import annotations

import enum
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..errors import DatasetFormatError, InvalidOperation
from ..utils.math_utils import round2, softmax
from .neuron import BiasNeuron, InputNeuron, Neuron, NeuronKind, Unit


class LayerKind(enum.Enum):
    INPUT = "input"
    HIDDEN = "hidden"
    OUTPUT = "output"


class Layer:
    """Shared behaviour of the layer variants.

    Parameters
    ----------
    width:
        Number of neurons excluding the bias slot. Layers with ``has_bias``
        append one :class:`BiasNeuron` after them.
    """

    kind: LayerKind
    has_bias = True

    def __init__(self, width: int) -> None:
        if width <= 0:
            raise ValueError("layer width must be positive")
        self.width = width
        self.neurons: List[Unit] = []
        self.delta: List[float] = []

    @property
    def size(self) -> int:
        """Total neuron count, bias slot included."""

        return self.width + (1 if self.has_bias else 0)

    @property
    def connected(self) -> bool:
        return bool(self.neurons)

    def connect(self, prev: "Layer", rng: random.Random) -> None:
        """Generate the neurons now that the predecessor's size is known."""

        if self.connected:
            raise InvalidOperation(f"{self.kind.value} layer is already connected")
        self._generate_neurons(prev.size, rng)
        self.delta = [0.0] * self.size

    def _generate_neurons(self, num_inputs: int, rng: random.Random) -> None:
        self.neurons = [Neuron(num_inputs, rng) for _ in range(self.width)]
        if self.has_bias:
            self.neurons.append(BiasNeuron())

    def outputs(self) -> List[float]:
        return [neuron.output for neuron in self.neurons]

    def real_neurons(self) -> List[Unit]:
        """Neurons that own incoming weights (the bias slot is skipped)."""

        return [neuron for neuron in self.neurons if neuron.kind is not NeuronKind.BIAS]

    def process(self, prev: "Layer") -> None:
        inputs = prev.outputs()
        for neuron in self.neurons:
            neuron.process(inputs)

    def calculate_delta(self, next_layer: Optional["Layer"] = None) -> None:
        raise NotImplementedError

    def adjust_weights(self, prev: "Layer", learning_rate: float) -> None:
        """Apply ``delta[k] * prev_output[j]`` to synapse ``j`` of neuron ``k``."""

        prev_outputs = prev.outputs()
        for k, neuron in enumerate(self.neurons):
            delta_k = self.delta[k]
            neuron.adjust_weights([delta_k * output for output in prev_outputs], learning_rate)

    def weight_matrix(self) -> List[List[float]]:
        """Neuron-major copy of the weights, bias slot excluded."""

        return [list(neuron.weights) for neuron in self.real_neurons()]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(width={self.width}, size={self.size})"


class InputLayer(Layer):
    """Feature carriers followed by a bias slot; built at construction time."""

    kind = LayerKind.INPUT

    def __init__(self, num_inputs: int) -> None:
        super().__init__(num_inputs)
        self.neurons = [InputNeuron() for _ in range(num_inputs)]
        self.neurons.append(BiasNeuron())

    def connect(self, prev: Layer, rng: random.Random) -> None:
        raise InvalidOperation("the input layer has no predecessor")

    def set_inputs(self, values: Sequence[float]) -> None:
        if len(values) != self.width:
            raise ValueError(f"expected {self.width} input values, received {len(values)}")
        for neuron, value in zip(self.neurons, values):
            neuron.set_input(value)

    def calculate_delta(self, next_layer: Optional[Layer] = None) -> None:
        return None


class HiddenLayer(Layer):
    kind = LayerKind.HIDDEN

    def calculate_delta(self, next_layer: Optional[Layer] = None) -> None:
        """Sigmoid-derivative backpropagation from ``next_layer``.

        Only the successor's real neurons contribute; when it is a hidden layer
        its trailing bias slot carries no weight from this layer. The
        successor's weights must not have been updated for the current row.
        """

        if next_layer is None:
            raise InvalidOperation("hidden layer delta requires the next layer")
        upstream = next_layer.real_neurons()
        upstream_delta = next_layer.delta
        for j, neuron in enumerate(self.neurons):
            if neuron.kind is NeuronKind.BIAS:
                self.delta[j] = 0.0
                continue
            total = 0.0
            for k, successor in enumerate(upstream):
                total += successor.weights[j] * upstream_delta[k]
            output = neuron.output
            self.delta[j] = output * (1.0 - output) * total


@dataclass(slots=True)
class ClassificationCounter:
    """Per-epoch tally of correct classifications for one dataset branch."""

    correct: int = 0
    processed: int = 0

    def record(self, is_correct: bool) -> None:
        self.processed += 1
        if is_correct:
            self.correct += 1

    def error_rate(self) -> Optional[float]:
        """Misclassified percentage, or ``None`` when nothing was processed."""

        if self.processed == 0:
            return None
        return (1.0 - self.correct / self.processed) * 100.0

    def reset(self) -> None:
        self.correct = 0
        self.processed = 0

    def consume(self) -> Optional[float]:
        rate = self.error_rate()
        self.reset()
        return rate


class OutputLayer(Layer):
    """Softmax output layer without a bias slot."""

    kind = LayerKind.OUTPUT
    has_bias = False

    def __init__(self, num_classes: int) -> None:
        super().__init__(num_classes)
        self.target: List[float] = []
        self.training = ClassificationCounter()
        self.validation = ClassificationCounter()

    def process(self, prev: Layer) -> None:
        """Sigmoid pass for the weighted inputs, then softmax over them."""

        super().process(prev)
        probabilities = softmax([neuron.weighted_input for neuron in self.neurons])
        for neuron, probability in zip(self.neurons, probabilities):
            neuron.output = probability

    def set_target(self, target: Sequence[float]) -> None:
        if len(target) != self.width:
            raise ValueError(f"expected a target of length {self.width}, received {len(target)}")
        self.target = [float(value) for value in target]

    def calculate_delta(self, next_layer: Optional[Layer] = None) -> None:
        # Softmax with cross-entropy: no activation derivative term.
        if not self.target:
            raise InvalidOperation("output delta requested before a target was set")
        for k, neuron in enumerate(self.neurons):
            self.delta[k] = self.target[k] - neuron.output

    def probabilities(self) -> List[float]:
        return self.outputs()

    def output_vector(self) -> List[float]:
        """Current probabilities rounded to two decimals."""

        return [round2(neuron.output) for neuron in self.neurons]

    def predicted_class(self) -> int:
        rounded = self.output_vector()
        return rounded.index(max(rounded))

    def true_class(self) -> int:
        try:
            return self.target.index(1.0)
        except ValueError:
            raise DatasetFormatError(f"target {self.target} is not one-hot") from None

    def _counter(self, training: bool) -> ClassificationCounter:
        return self.training if training else self.validation

    def record_classification(self, training: bool) -> bool:
        """Tally the current row for the training or validation branch."""

        is_correct = self.predicted_class() == self.true_class()
        self._counter(training).record(is_correct)
        return is_correct

    def consume_classification_error(self, training: bool) -> Optional[float]:
        """Return the branch's error percentage and reset its counters.

        ``None`` signals that no row was recorded since the last reset.
        """

        return self._counter(training).consume()

    def reset_classification(self, training: bool) -> None:
        self._counter(training).reset()


__all__ = [
    "ClassificationCounter",
    "HiddenLayer",
    "InputLayer",
    "Layer",
    "LayerKind",
    "OutputLayer",
]
