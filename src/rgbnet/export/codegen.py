"""Cross-compile trained weights into standalone inference routines.

Two targets are supported:

``c``
    A C99 translation unit exposing ``double* query(double r, double g, double b)``.
    It only needs ``<math.h>`` (link with ``-lm``).
``python``
    A Python module exposing ``query(r, g, b)`` that imports nothing but the
    standard library :mod:`math`.

Both routines normalise the raw channels, accumulate weighted sums left to
right, apply the clamped sigmoid in the hidden layers, a max-shifted softmax
over the output weighted sums and round to two decimals, exactly as
:mod:`rgbnet.utils.math_utils` does for the live network. Weights are written
with :func:`repr`, which round-trips every finite double, and the output
contains no timestamp, so unchanged weights always produce identical source.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Sequence, Tuple

from ..config import BIAS, CHANNEL_MAX, NUM_INPUTS
from ..utils.math_utils import SIGMOID_CLAMP

Matrix = Tuple[Tuple[float, ...], ...]


@dataclass(frozen=True)
class NetworkWeights:
    """Snapshot of the trained weights, neuron-major and bias rows excluded."""

    hidden1: Matrix
    hidden2: Matrix
    output: Matrix

    def __post_init__(self) -> None:
        if not self.hidden1 or not self.hidden2 or not self.output:
            raise ValueError("every weight matrix needs at least one row")
        width = len(self.hidden1)
        _check_shape("hidden1", self.hidden1, NUM_INPUTS + 1)
        _check_shape("hidden2", self.hidden2, width + 1)
        _check_shape("output", self.output, len(self.hidden2) + 1)
        for row in self.hidden1 + self.hidden2 + self.output:
            for value in row:
                if not math.isfinite(value):
                    raise ValueError(f"cannot export non-finite weight {value!r}")

    @classmethod
    def from_matrices(
        cls,
        hidden1: Sequence[Sequence[float]],
        hidden2: Sequence[Sequence[float]],
        output: Sequence[Sequence[float]],
    ) -> "NetworkWeights":
        return cls(_freeze(hidden1), _freeze(hidden2), _freeze(output))

    @classmethod
    def from_network(cls, network) -> "NetworkWeights":
        return cls.from_matrices(*network.weight_matrices())

    @property
    def hidden1_width(self) -> int:
        return len(self.hidden1)

    @property
    def hidden2_width(self) -> int:
        return len(self.hidden2)

    @property
    def num_classes(self) -> int:
        return len(self.output)


def _freeze(matrix: Sequence[Sequence[float]]) -> Matrix:
    return tuple(tuple(float(value) for value in row) for row in matrix)


def _check_shape(name: str, matrix: Matrix, columns: int) -> None:
    for row in matrix:
        if len(row) != columns:
            raise ValueError(f"{name} rows must have {columns} weights, found {len(row)}")


def _literal(value: float) -> str:
    return repr(float(value))


# ---------------------------------------------------------------------------
# C target


def _c_matrix(name: str, matrix: Matrix) -> str:
    rows = ",\n".join("    {" + ", ".join(_literal(v) for v in row) + "}" for row in matrix)
    return f"static const double {name}[{len(matrix)}][{len(matrix[0])}] = {{\n{rows}\n}};\n"


def render_c_source(weights: NetworkWeights) -> str:
    h1 = weights.hidden1_width
    h2 = weights.hidden2_width
    classes = weights.num_classes
    bias = _literal(BIAS)
    clamp = _literal(SIGMOID_CLAMP)
    channel_max = _literal(CHANNEL_MAX)
    lines = [
        "/*",
        " * Generated by rgbnet. Link with -lm.",
        " *",
        " * query() takes raw channel values in [0, 255] and returns the class",
        " * probabilities, rounded to two decimals, in the column order of the",
        " * training targets. The returned buffer is overwritten by the next call.",
        " */",
        "",
        "#include <math.h>",
        "",
        _c_matrix("hl1_weights", weights.hidden1),
        _c_matrix("hl2_weights", weights.hidden2),
        _c_matrix("out_weights", weights.output),
        f"static double hidden_out1[{h1 + 1}];",
        f"static double hidden_out2[{h2 + 1}];",
        f"static double out[{classes}];",
        "",
        "static double rgbnet_sigmoid(double x) {",
        f"    if (x > {clamp}) x = {clamp};",
        f"    if (x < -{clamp}) x = -{clamp};",
        "    return 1.0 / (1.0 + exp(-x));",
        "}",
        "",
        "double* query(double r, double g, double b);",
        "",
        "double* query(double r, double g, double b) {",
        f"    double inputs[{NUM_INPUTS + 1}];",
        f"    double logits[{classes}];",
        "    double sum, shift, total;",
        "    int i, j;",
        "",
        f"    inputs[0] = 2.0 * (r / {channel_max}) - 1.0;",
        f"    inputs[1] = 2.0 * (g / {channel_max}) - 1.0;",
        f"    inputs[2] = 2.0 * (b / {channel_max}) - 1.0;",
        f"    inputs[3] = {bias};",
        "",
        f"    for (i = 0; i < {h1}; i++) {{",
        "        sum = 0.0;",
        f"        for (j = 0; j < {NUM_INPUTS + 1}; j++) {{",
        "            sum += inputs[j] * hl1_weights[i][j];",
        "        }",
        "        hidden_out1[i] = rgbnet_sigmoid(sum);",
        "    }",
        f"    hidden_out1[{h1}] = {bias};",
        "",
        f"    for (i = 0; i < {h2}; i++) {{",
        "        sum = 0.0;",
        f"        for (j = 0; j < {h1 + 1}; j++) {{",
        "            sum += hidden_out1[j] * hl2_weights[i][j];",
        "        }",
        "        hidden_out2[i] = rgbnet_sigmoid(sum);",
        "    }",
        f"    hidden_out2[{h2}] = {bias};",
        "",
        f"    for (i = 0; i < {classes}; i++) {{",
        "        sum = 0.0;",
        f"        for (j = 0; j < {h2 + 1}; j++) {{",
        "            sum += hidden_out2[j] * out_weights[i][j];",
        "        }",
        "        logits[i] = sum;",
        "    }",
        "",
        "    shift = logits[0];",
        f"    for (i = 1; i < {classes}; i++) {{",
        "        if (logits[i] > shift) shift = logits[i];",
        "    }",
        "    total = 0.0;",
        f"    for (i = 0; i < {classes}; i++) {{",
        "        out[i] = exp(logits[i] - shift);",
        "        total += out[i];",
        "    }",
        f"    for (i = 0; i < {classes}; i++) {{",
        "        out[i] = floor(out[i] / total * 100.0 + 0.5) / 100.0;",
        "    }",
        "    return out;",
        "}",
        "",
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Python target


def _py_matrix(name: str, matrix: Matrix) -> str:
    rows = "".join("    (" + ", ".join(_literal(v) for v in row) + ",),\n" for row in matrix)
    return f"{name} = (\n{rows})\n"


def render_python_source(weights: NetworkWeights) -> str:
    header = '''"""Standalone RGB colour classifier generated by rgbnet.

query(r, g, b) takes raw channel values in [0, 255] and returns the class
probabilities, rounded to two decimals, in the column order of the training
targets.
"""

import math

'''
    constants = "\n".join(
        [
            f"BIAS = {_literal(BIAS)}",
            f"CHANNEL_MAX = {_literal(CHANNEL_MAX)}",
            f"SIGMOID_CLAMP = {_literal(SIGMOID_CLAMP)}",
            "",
            _py_matrix("HIDDEN1_WEIGHTS", weights.hidden1),
            _py_matrix("HIDDEN2_WEIGHTS", weights.hidden2),
            _py_matrix("OUTPUT_WEIGHTS", weights.output),
        ]
    )
    body = '''

def _weighted_sum(inputs, weights):
    total = 0.0
    for value, weight in zip(inputs, weights):
        total += value * weight
    return total


def _sigmoid(x):
    x = max(-SIGMOID_CLAMP, min(SIGMOID_CLAMP, x))
    return 1.0 / (1.0 + math.exp(-x))


def query(r, g, b):
    inputs = [2.0 * (channel / CHANNEL_MAX) - 1.0 for channel in (r, g, b)]
    inputs.append(BIAS)
    hidden1 = [_sigmoid(_weighted_sum(inputs, row)) for row in HIDDEN1_WEIGHTS]
    hidden1.append(BIAS)
    hidden2 = [_sigmoid(_weighted_sum(hidden1, row)) for row in HIDDEN2_WEIGHTS]
    hidden2.append(BIAS)
    logits = [_weighted_sum(hidden2, row) for row in OUTPUT_WEIGHTS]
    shift = max(logits)
    exps = [math.exp(value - shift) for value in logits]
    total = 0.0
    for value in exps:
        total += value
    return [math.floor(value / total * 100.0 + 0.5) / 100.0 for value in exps]
'''
    return header + constants + body


RENDERERS: Dict[str, Callable[[NetworkWeights], str]] = {
    "c": render_c_source,
    "python": render_python_source,
}


def render_source(weights: NetworkWeights, target: str = "c") -> str:
    try:
        renderer = RENDERERS[target]
    except KeyError:
        raise ValueError(f"unknown export target {target!r}; choose from {sorted(RENDERERS)}") from None
    return renderer(weights)


def export_network(network, path: str | Path, *, target: str = "c") -> Path:
    """Write the inference routine for ``network`` to ``path`` (overwriting it)."""

    source = render_source(NetworkWeights.from_network(network), target)
    path = Path(path)
    path.write_text(source, encoding="utf-8")
    return path


__all__ = [
    "NetworkWeights",
    "RENDERERS",
    "export_network",
    "render_c_source",
    "render_python_source",
    "render_source",
]
