"""Plotting and reloading of the per-epoch classification error."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

from ..training.history import TrainingHistory


def load_error_log(path: str | Path) -> TrainingHistory:
    """Read an ``Epoch,Training Error[,Validation Error]`` CSV back."""

    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        header = handle.readline().strip().split(",")
    history = TrainingHistory()
    data = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
    if data.size == 0:
        return history
    with_validation = len(header) > 2
    for row in data:
        history.append(float(row[1]), float(row[2]) if with_validation else None)
    return history


def plot_error_history(history: TrainingHistory, path: Optional[str | Path] = None):
    """Plot training (and validation) error per epoch; optionally save it."""

    epochs = np.arange(history.epochs)
    figure = plt.figure()
    training = np.array([np.nan if v is None else v for v in history.training_errors], dtype=float)
    plt.plot(epochs, training, label="Training Error")
    if any(value is not None for value in history.validation_errors):
        validation = np.array(
            [np.nan if v is None else v for v in history.validation_errors], dtype=float
        )
        plt.plot(epochs, validation, label="Validation Error")
    plt.xlabel("Epoch")
    plt.ylabel("Misclassified (%)")
    plt.title("Classification Error")
    plt.legend()
    plt.tight_layout()
    if path is not None:
        figure.savefig(path)
    return figure
