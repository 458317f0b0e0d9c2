"""Utility helpers for the RGB classifier."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

from .math_utils import normalize_channel, round2, sigmoid, softmax, weighted_sum

if TYPE_CHECKING:  # pragma: no cover - import-time hinting only
    from .visualization import load_error_log, plot_error_history

__all__ = [
    "load_error_log",
    "normalize_channel",
    "plot_error_history",
    "round2",
    "sigmoid",
    "softmax",
    "weighted_sum",
]


def __getattr__(name: str):  # pragma: no cover - small wrapper
    if name in {"load_error_log", "plot_error_history"}:
        return getattr(import_module("rgbnet.utils.visualization"), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
