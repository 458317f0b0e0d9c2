"""Configuration dataclass and fixed constants of the RGB classifier."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError

#: Constant emitted by every bias unit.
BIAS = -1.0
#: Number of raw input channels (red, green, blue).
NUM_INPUTS = 3
#: Upper bound of a raw colour channel.
CHANNEL_MAX = 255.0


@dataclass(slots=True)
class NetworkConfig:
    """Configuration of the fixed 3 -> hidden -> hidden -> classes topology.

    Parameters
    ----------
    num_classes:
        Number of output neurons, one per colour class. The order of the
        classes is the column order of the one-hot training targets.
    hidden_neurons:
        Width of both hidden layers (bias slot not included).
    epochs:
        Number of passes over the training set performed by
        :meth:`rgbnet.core.network.Network.run`. Zero is allowed and skips
        training entirely.
    learning_rate:
        Step size of the per-row stochastic gradient update. There is no
        decay, momentum or regularisation.
    write_stats:
        Write one row per epoch to the error log at ``stats_path``.
    stats_path:
        Location of the error log CSV. Parent folders are created on demand.
    seed:
        Optional seed. Weight initialisation and row shuffling are fully
        deterministic when it is set.
    """

    num_classes: int
    hidden_neurons: int = 10
    epochs: int = 800
    learning_rate: float = 1e-3
    write_stats: bool = False
    stats_path: Path = Path("stats") / "error_stats.csv"
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.num_classes <= 0:
            raise ConfigurationError("num_classes must be positive")
        if self.hidden_neurons <= 0:
            raise ConfigurationError("hidden_neurons must be positive")
        if self.epochs < 0:
            raise ConfigurationError("epochs must be non-negative")
        if self.learning_rate <= 0.0:
            raise ConfigurationError("learning_rate must be positive")
        self.stats_path = Path(self.stats_path)


__all__ = ["BIAS", "CHANNEL_MAX", "NUM_INPUTS", "NetworkConfig"]
