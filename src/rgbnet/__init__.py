"""From-scratch RGB colour classifier with a C/Python weight exporter.

The package trains a fixed 3 -> hidden -> hidden -> classes feed-forward
network with per-row backpropagation written in plain Python, and turns the
trained weights into dependency-free inference code.
"""

from .config import BIAS, NUM_INPUTS, NetworkConfig
from .core import Network
from .data import LabeledDataset, load_dataset
from .errors import (
    ConfigurationError,
    DatasetFormatError,
    InvalidOperation,
    RgbNetError,
    WeightReinitialisationError,
)
from .export import NetworkWeights, export_network, render_source
from .training import TrainingHistory, train_in_background

__all__ = [
    "BIAS",
    "NUM_INPUTS",
    "ConfigurationError",
    "DatasetFormatError",
    "InvalidOperation",
    "LabeledDataset",
    "Network",
    "NetworkConfig",
    "NetworkWeights",
    "RgbNetError",
    "TrainingHistory",
    "WeightReinitialisationError",
    "export_network",
    "load_dataset",
    "render_source",
    "train_in_background",
]
