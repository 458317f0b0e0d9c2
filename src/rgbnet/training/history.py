"""Per-epoch error bookkeeping and the error log CSV."""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TextIO


@dataclass(slots=True)
class TestResult:
    """Outcome of one testing row."""

    __test__ = False  # not a pytest test class

    expected_index: int
    expected_label: Optional[str]
    outputs: List[float]

    @property
    def predicted_index(self) -> int:
        return self.outputs.index(max(self.outputs))

    @property
    def correct(self) -> bool:
        return self.predicted_index == self.expected_index


@dataclass
class TrainingHistory:
    """Container storing metrics collected during :meth:`Network.run`.

    Error rates are misclassified percentages. ``validation_errors`` holds
    ``None`` for epochs without a validation set.
    """

    training_errors: List[Optional[float]] = field(default_factory=list)
    validation_errors: List[Optional[float]] = field(default_factory=list)
    test_results: List[TestResult] = field(default_factory=list)

    @property
    def epochs(self) -> int:
        return len(self.training_errors)

    @property
    def final_training_error(self) -> Optional[float]:
        return self.training_errors[-1] if self.training_errors else None

    @property
    def final_validation_error(self) -> Optional[float]:
        return self.validation_errors[-1] if self.validation_errors else None

    def append(self, training_error: Optional[float], validation_error: Optional[float]) -> None:
        self.training_errors.append(training_error)
        self.validation_errors.append(validation_error)


class ErrorLogWriter:
    """Write ``Epoch,Training Error[,Validation Error]`` rows to a CSV file.

    The file and its parent folder are created lazily on the first row so a
    run with zero epochs leaves no artifact behind.
    """

    def __init__(self, path: str | Path, *, with_validation: bool) -> None:
        self.path = Path(path)
        self.with_validation = with_validation
        self._handle: Optional[TextIO] = None
        self._writer = None

    @property
    def header(self) -> List[str]:
        columns = ["Epoch", "Training Error"]
        if self.with_validation:
            columns.append("Validation Error")
        return columns

    def _open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._handle, lineterminator="\n")
        self._writer.writerow(self.header)

    def write(
        self,
        epoch: int,
        training_error: Optional[float],
        validation_error: Optional[float] = None,
    ) -> None:
        if self._handle is None:
            self._open()
        row = [str(epoch), _format_rate(training_error)]
        if self.with_validation:
            row.append(_format_rate(validation_error))
        self._writer.writerow(row)
        self._handle.flush()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            self._writer = None

    def __enter__(self) -> "ErrorLogWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _format_rate(value: Optional[float]) -> str:
    return "" if value is None else f"{value:f}"


__all__ = ["ErrorLogWriter", "TestResult", "TrainingHistory"]
