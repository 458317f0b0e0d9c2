"""Exception hierarchy shared by the network, the data loader and the exporter."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class RgbNetError(Exception):
    """Base class for every error raised by :mod:`rgbnet`."""


class ConfigurationError(RgbNetError, ValueError):
    """Invalid construction parameters or a run requested without training data."""


class DatasetFormatError(RgbNetError, ValueError):
    """A dataset file or in-memory dataset does not follow the row contract."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str | Path] = None,
        line_number: Optional[int] = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.line_number = line_number
        location = ""
        if self.path is not None:
            location = f"{self.path}"
            if line_number is not None:
                location += f":{line_number}"
            location += ": "
        super().__init__(f"{location}{message}")


class InvalidOperation(RgbNetError):
    """An operation was issued on a unit or layer that cannot perform it.

    These are contract violations inside the engine (for example running a
    forward pass through an input neuron) and are never recovered from.
    """


class WeightReinitialisationError(InvalidOperation):
    """Weights of an already initialised neuron were about to be redrawn."""


__all__ = [
    "RgbNetError",
    "ConfigurationError",
    "DatasetFormatError",
    "InvalidOperation",
    "WeightReinitialisationError",
]
