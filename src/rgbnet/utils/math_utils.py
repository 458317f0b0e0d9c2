"""Scalar arithmetic shared by the live network and the code generators.

Every generated inference routine repeats these exact operations in the same
order, so changing anything here requires changing the templates in
:mod:`rgbnet.export.codegen` as well.
"""

from __future__ import annotations

import math
from typing import List, Sequence

from ..config import CHANNEL_MAX

#: Sigmoid inputs are clamped to this magnitude before exponentiation.
SIGMOID_CLAMP = 500.0


def normalize_channel(value: float) -> float:
    """Map a raw channel value in ``[0, 255]`` to ``[-1, 1]``."""

    return 2.0 * (value / CHANNEL_MAX) - 1.0


def weighted_sum(inputs: Sequence[float], weights: Sequence[float]) -> float:
    # Plain left-to-right accumulation; ``sum`` may compensate on newer Pythons.
    total = 0.0
    for value, weight in zip(inputs, weights):
        total += value * weight
    return total


def sigmoid(x: float) -> float:
    x = max(-SIGMOID_CLAMP, min(SIGMOID_CLAMP, x))
    return 1.0 / (1.0 + math.exp(-x))


def softmax(values: Sequence[float]) -> List[float]:
    """Softmax of ``values`` shifted by their maximum."""

    shift = max(values)
    exps = [math.exp(value - shift) for value in values]
    total = 0.0
    for value in exps:
        total += value
    return [value / total for value in exps]


def round2(value: float) -> float:
    """Round to two decimals, halves rounding up."""

    return math.floor(value * 100.0 + 0.5) / 100.0


__all__ = [
    "SIGMOID_CLAMP",
    "normalize_channel",
    "round2",
    "sigmoid",
    "softmax",
    "weighted_sum",
]
