"""Scalar computational units of the network.

Three closed variants exist, tagged by :class:`NeuronKind`:

* :class:`Neuron` owns a weight vector and applies the sigmoid activation,
* :class:`BiasNeuron` emits the constant :data:`~rgbnet.config.BIAS`,
* :class:`InputNeuron` exposes an externally assigned feature value.
"""
from __future__ import annotations

import enum
import math
import random
from typing import List, Optional, Sequence, Tuple, Union

from ..config import BIAS
from ..errors import InvalidOperation, WeightReinitialisationError
from ..utils.math_utils import sigmoid, weighted_sum

#: Widening of the upper initialisation bound.
INIT_EPSILON = 0.01


class NeuronKind(enum.Enum):
    REGULAR = "regular"
    BIAS = "bias"
    INPUT = "input"


class Neuron:
    """Sigmoid unit with one weight per predecessor output (bias included)."""

    kind = NeuronKind.REGULAR

    def __init__(self, num_inputs: int, rng: random.Random) -> None:
        if num_inputs <= 0:
            raise ValueError("num_inputs must be positive")
        self.num_inputs = num_inputs
        self.weights: Optional[List[float]] = None
        self.last_input: List[float] = []
        self.weighted_input = 0.0
        self.output = 0.0
        self.initialise_weights(rng)

    def initialise_weights(self, rng: random.Random) -> None:
        """Draw every weight from ``[-1/sqrt(n), 1/sqrt(n) + 0.01]``.

        Only valid once per neuron; a second call raises
        :class:`~rgbnet.errors.WeightReinitialisationError`.
        """

        if self.weights is not None:
            raise WeightReinitialisationError(
                "attempted to assign random weights to an initialised neuron"
            )
        limit = 1.0 / math.sqrt(self.num_inputs)
        self.weights = [rng.uniform(-limit, limit + INIT_EPSILON) for _ in range(self.num_inputs)]

    def process(self, inputs: Sequence[float]) -> None:
        if len(inputs) != self.num_inputs:
            raise ValueError(f"expected {self.num_inputs} inputs, received {len(inputs)}")
        self.last_input = list(inputs)
        self.weighted_input = weighted_sum(self.last_input, self.weights)
        self.output = sigmoid(self.weighted_input)

    def adjust_weights(self, delta: Sequence[float], learning_rate: float) -> None:
        """Add ``learning_rate * delta`` to the weight vector in place."""

        if len(delta) != self.num_inputs:
            raise ValueError(f"expected {self.num_inputs} weight deltas, received {len(delta)}")
        weights = self.weights
        for i, value in enumerate(delta):
            weights[i] += learning_rate * value

    def __repr__(self) -> str:
        return f"Neuron(num_inputs={self.num_inputs}, output={self.output:.4f})"


class BiasNeuron:
    """Constant emitter appended to the input and hidden layers."""

    kind = NeuronKind.BIAS
    weights: Tuple[float, ...] = ()
    weighted_input = 0.0

    def __init__(self, value: float = BIAS) -> None:
        self._value = float(value)

    @property
    def output(self) -> float:
        return self._value

    def process(self, inputs: Sequence[float]) -> None:
        # Output never depends on the predecessor layer.
        return None

    def adjust_weights(self, delta: Sequence[float], learning_rate: float) -> None:
        return None

    def __repr__(self) -> str:
        return f"BiasNeuron(value={self._value})"


class InputNeuron:
    """Carrier of one normalised feature; it has no weights and never learns."""

    kind = NeuronKind.INPUT

    def __init__(self) -> None:
        self.output = 0.0

    def set_input(self, value: float) -> None:
        self.output = float(value)

    @property
    def weights(self) -> List[float]:
        raise InvalidOperation("input neurons have no weights")

    @property
    def weighted_input(self) -> float:
        raise InvalidOperation("input neurons have no weighted input")

    def process(self, inputs: Sequence[float]) -> None:
        raise InvalidOperation("forward pass issued on an input neuron")

    def adjust_weights(self, delta: Sequence[float], learning_rate: float) -> None:
        raise InvalidOperation("weight adjustment issued on an input neuron")

    def __repr__(self) -> str:
        return f"InputNeuron(output={self.output})"


Unit = Union[Neuron, BiasNeuron, InputNeuron]


__all__ = ["INIT_EPSILON", "BiasNeuron", "InputNeuron", "Neuron", "NeuronKind", "Unit"]
