"""Feed-forward RGB colour classifier trained with per-row backpropagation.

Topology: 3 inputs (+ bias) -> hidden (+ bias) -> hidden (+ bias) -> classes.
Hidden units use the sigmoid, the output layer a softmax, and weights are
updated after every training row (stochastic gradient descent).
"""
from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import NUM_INPUTS, NetworkConfig
from ..data.dataset import LabeledDataset, load_dataset
from ..errors import ConfigurationError
from ..training.history import ErrorLogWriter, TestResult, TrainingHistory
from ..utils.math_utils import normalize_channel
from .layers import HiddenLayer, InputLayer, Layer, OutputLayer

ProgressCallback = Callable[[float], None]


class Network:
    """Four-layer classifier owning its layers and datasets.

    Parameters
    ----------
    config:
        Topology, training length and logging options.
    progress:
        Optional callback receiving the completed percentage after every
        epoch. It is a one-way notification; the training loop ignores
        whatever the callback does with it.
    """

    def __init__(self, config: NetworkConfig, *, progress: Optional[ProgressCallback] = None) -> None:
        self.config = config
        self.progress = progress
        self.rng = random.Random(config.seed)

        self.input_layer = InputLayer(NUM_INPUTS)
        self.hidden_layer1 = HiddenLayer(config.hidden_neurons)
        self.hidden_layer2 = HiddenLayer(config.hidden_neurons)
        self.output_layer = OutputLayer(config.num_classes)
        self.layers: Tuple[Layer, ...] = (
            self.input_layer,
            self.hidden_layer1,
            self.hidden_layer2,
            self.output_layer,
        )
        for prev, layer in zip(self.layers, self.layers[1:]):
            layer.connect(prev, self.rng)
        self._shuffle_rng = random.Random(self.rng.getrandbits(64))

        self.training_set: Optional[LabeledDataset] = None
        self.validation_set: Optional[LabeledDataset] = None
        self.testing_set: Optional[LabeledDataset] = None
        self.history = TrainingHistory()
        self.final_training_error: Optional[float] = None
        self.final_validation_error: Optional[float] = None

    # ------------------------------------------------------------------ data
    @property
    def class_names(self) -> Optional[Tuple[str, ...]]:
        if self.testing_set is None:
            return None
        return self.testing_set.class_names

    def set_datasets(
        self,
        training: Optional[LabeledDataset] = None,
        validation: Optional[LabeledDataset] = None,
        testing: Optional[LabeledDataset] = None,
    ) -> None:
        """Attach in-memory datasets; ``None`` leaves a slot unchanged."""

        for dataset in (training, validation, testing):
            if dataset is not None and dataset.num_classes != self.config.num_classes:
                raise ConfigurationError(
                    f"dataset has {dataset.num_classes} target columns, "
                    f"network expects {self.config.num_classes}"
                )
        if training is not None:
            self.training_set = training
        if validation is not None:
            self.validation_set = validation
        if testing is not None:
            self.testing_set = testing

    def load_datasets(
        self,
        training: str | Path,
        validation: Optional[str | Path] = None,
        testing: Optional[str | Path] = None,
    ) -> None:
        """Parse dataset files; the testing file must start with a class header."""

        num_classes = self.config.num_classes
        self.set_datasets(
            training=load_dataset(training, num_classes),
            validation=load_dataset(validation, num_classes) if validation is not None else None,
            testing=load_dataset(testing, num_classes, has_header=True) if testing is not None else None,
        )

    # --------------------------------------------------------------- forward
    def forward(self, features: Sequence[float]) -> None:
        """Propagate normalised features through Hidden1, Hidden2 and Output."""

        self.input_layer.set_inputs(features)
        self.hidden_layer1.process(self.input_layer)
        self.hidden_layer2.process(self.hidden_layer1)
        self.output_layer.process(self.hidden_layer2)

    def query(self, red: float, green: float, blue: float, *, normalized: bool = False) -> List[float]:
        """Return the rounded probability vector for one colour.

        Raw channels lie in ``[0, 255]``; pass ``normalized=True`` for values
        already mapped to ``[-1, 1]``. Entries follow the column order of the
        training targets.
        """

        features = [red, green, blue]
        if not normalized:
            features = [normalize_channel(value) for value in features]
        self.forward(features)
        return self.output_layer.output_vector()

    # -------------------------------------------------------------- backward
    def compute_deltas(self) -> None:
        """Deltas back to front; no weight is modified here."""

        self.output_layer.calculate_delta()
        self.hidden_layer2.calculate_delta(self.output_layer)
        self.hidden_layer1.calculate_delta(self.hidden_layer2)

    def update_weights(self) -> None:
        learning_rate = self.config.learning_rate
        self.output_layer.adjust_weights(self.hidden_layer2, learning_rate)
        self.hidden_layer2.adjust_weights(self.hidden_layer1, learning_rate)
        self.hidden_layer1.adjust_weights(self.input_layer, learning_rate)

    # ---------------------------------------------------------------- epochs
    def train_epoch(self) -> None:
        """One shuffled pass over the training set with per-row updates."""

        dataset = self._require_training_set()
        order = list(range(len(dataset)))
        self._shuffle_rng.shuffle(order)
        for row in order:
            features, target = dataset.row(row)
            self.output_layer.set_target(target)
            self.forward(features)
            self.output_layer.record_classification(training=True)
            # Every delta is computed before any weight changes: hidden deltas
            # read the successors' weights as they were for this row.
            self.compute_deltas()
            self.update_weights()

    def validate(self) -> None:
        """Forward-only pass over the validation set, in file order."""

        if self.validation_set is None:
            return
        for row in range(len(self.validation_set)):
            features, target = self.validation_set.row(row)
            self.output_layer.set_target(target)
            self.forward(features)
            self.output_layer.record_classification(training=False)

    def test(self) -> List[TestResult]:
        """Report expected label and rounded output for every testing row."""

        if self.testing_set is None:
            return []
        names = self.testing_set.class_names
        results: List[TestResult] = []
        for row in range(len(self.testing_set)):
            features, target = self.testing_set.row(row)
            expected = target.index(1.0)
            label = names[expected] if names is not None and expected < len(names) else None
            outputs = self.query(*features, normalized=True)
            results.append(TestResult(expected, label, outputs))
        return results

    def run(self, epochs: Optional[int] = None) -> TrainingHistory:
        """Train for ``epochs`` (default: ``config.epochs``), then test.

        Raises
        ------
        ConfigurationError
            If no training set was attached.
        """

        self._require_training_set()
        total = self.config.epochs if epochs is None else epochs
        if total < 0:
            raise ConfigurationError("epochs must be non-negative")
        self.history = TrainingHistory()
        self.output_layer.reset_classification(training=True)
        self.output_layer.reset_classification(training=False)
        self.final_training_error = None
        self.final_validation_error = None

        log_writer: Optional[ErrorLogWriter] = None
        if self.config.write_stats:
            log_writer = ErrorLogWriter(
                self.config.stats_path, with_validation=self.validation_set is not None
            )
        try:
            for epoch in range(total):
                self.train_epoch()
                self.validate()
                log_writer = self._record_statistics(epoch, total, log_writer)
                if self.progress is not None:
                    self.progress(100.0 * (epoch + 1) / total)
        finally:
            if log_writer is not None:
                log_writer.close()

        self.history.test_results = self.test()
        return self.history

    def _record_statistics(
        self,
        epoch: int,
        total: int,
        log_writer: Optional[ErrorLogWriter],
    ) -> Optional[ErrorLogWriter]:
        training_error = self.output_layer.consume_classification_error(training=True)
        validation_error = self.output_layer.consume_classification_error(training=False)
        self.history.append(training_error, validation_error)
        if epoch == total - 1:
            self.final_training_error = training_error
            self.final_validation_error = validation_error
        if log_writer is None:
            return None
        try:
            log_writer.write(epoch, training_error, validation_error)
        except OSError as exc:
            print(f"An error occurred while writing stats to {log_writer.path}: {exc}", file=sys.stderr)
            log_writer.close()
            return None
        return log_writer

    def _require_training_set(self) -> LabeledDataset:
        if self.training_set is None:
            raise ConfigurationError("training data was not loaded; call load_datasets() first")
        return self.training_set

    # ---------------------------------------------------------------- export
    def weight_matrices(self) -> Tuple[List[List[float]], List[List[float]], List[List[float]]]:
        """Hidden1, Hidden2 and Output weights (neuron-major, bias rows excluded)."""

        return (
            self.hidden_layer1.weight_matrix(),
            self.hidden_layer2.weight_matrix(),
            self.output_layer.weight_matrix(),
        )


__all__ = ["Network", "ProgressCallback"]
