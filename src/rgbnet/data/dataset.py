"""Parsing of ``r,g,b;x1,...,xn`` colour datasets."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import CHANNEL_MAX, NUM_INPUTS
from ..errors import DatasetFormatError
from ..utils.math_utils import normalize_channel

_DIGIT = re.compile(r"[0-9]")


@dataclass
class LabeledDataset:
    """Normalised inputs and one-hot targets of a single dataset.

    ``inputs`` has shape ``(rows, 3)`` with values in ``[-1, 1]``; ``targets``
    has shape ``(rows, num_classes)``. ``class_names`` is only present for
    testing sets, whose first line names the target columns.
    """

    inputs: np.ndarray
    targets: np.ndarray
    class_names: Optional[Tuple[str, ...]] = None
    source: Optional[Path] = None

    def __post_init__(self) -> None:
        self.inputs = np.asarray(self.inputs, dtype=np.float64)
        self.targets = np.asarray(self.targets, dtype=np.float64)
        if self.inputs.ndim != 2 or self.inputs.shape[1] != NUM_INPUTS:
            raise DatasetFormatError(
                f"inputs must have shape (rows, {NUM_INPUTS})", path=self.source
            )
        if self.targets.ndim != 2 or self.targets.shape[0] != self.inputs.shape[0]:
            raise DatasetFormatError("targets must have one row per input row", path=self.source)
        if self.inputs.shape[0] == 0:
            raise DatasetFormatError("dataset contains no rows", path=self.source)
        if self.class_names is not None:
            self.class_names = tuple(self.class_names)

    @classmethod
    def from_raw(
        cls,
        rows: Sequence[Sequence[float]],
        targets: Sequence[Sequence[float]],
        *,
        class_names: Optional[Sequence[str]] = None,
    ) -> "LabeledDataset":
        """Build a dataset from raw ``[0, 255]`` channel values."""

        inputs = [[normalize_channel(float(value)) for value in row] for row in rows]
        names = tuple(class_names) if class_names is not None else None
        return cls(np.array(inputs, dtype=np.float64), np.array(targets, dtype=np.float64), names)

    @property
    def num_classes(self) -> int:
        return int(self.targets.shape[1])

    def __len__(self) -> int:
        return int(self.inputs.shape[0])

    def row(self, index: int) -> Tuple[List[float], List[float]]:
        return self.inputs[index].tolist(), self.targets[index].tolist()


def _parse_number(text: str, *, path: Optional[Path], line_number: Optional[int]) -> float:
    try:
        return float(text)
    except ValueError:
        raise DatasetFormatError(
            f"non-numeric value {text.strip()!r}", path=path, line_number=line_number
        ) from None


def parse_row(
    line: str,
    num_classes: int,
    *,
    path: Optional[Path] = None,
    line_number: Optional[int] = None,
) -> Tuple[List[float], List[float]]:
    """Split one data line into raw channels and a one-hot target.

    A trailing ``;`` (as written by the camera capture tool) is accepted.
    """

    parts = line.strip().split(";")
    while len(parts) > 2 and parts[-1].strip() == "":
        parts.pop()
    if len(parts) != 2:
        raise DatasetFormatError(
            "expected exactly one ';' between channels and target",
            path=path,
            line_number=line_number,
        )
    channel_fields = parts[0].split(",")
    target_fields = parts[1].split(",")
    if len(channel_fields) != NUM_INPUTS:
        raise DatasetFormatError(
            f"expected {NUM_INPUTS} channel values, found {len(channel_fields)}",
            path=path,
            line_number=line_number,
        )
    if len(target_fields) != num_classes:
        raise DatasetFormatError(
            f"expected {num_classes} target values, found {len(target_fields)}",
            path=path,
            line_number=line_number,
        )
    channels = [_parse_number(field, path=path, line_number=line_number) for field in channel_fields]
    for value in channels:
        if not 0.0 <= value <= CHANNEL_MAX:
            raise DatasetFormatError(
                f"channel value {value:g} outside [0, {CHANNEL_MAX:g}]",
                path=path,
                line_number=line_number,
            )
    target = [_parse_number(field, path=path, line_number=line_number) for field in target_fields]
    if target.count(1.0) != 1 or any(value not in (0.0, 1.0) for value in target):
        raise DatasetFormatError(
            "target must contain exactly one 1 and zeros elsewhere",
            path=path,
            line_number=line_number,
        )
    return channels, target


def parse_header(
    line: str,
    num_classes: int,
    *,
    path: Optional[Path] = None,
    line_number: Optional[int] = None,
) -> Tuple[str, ...]:
    """Parse the class-name header of a testing file."""

    names = tuple(name.strip() for name in line.strip().split(","))
    for name in names:
        if not name or _DIGIT.search(name):
            raise DatasetFormatError(
                "invalid class header: expected comma-separated colour names without digits",
                path=path,
                line_number=line_number,
            )
    if len(names) != num_classes:
        raise DatasetFormatError(
            f"class header names {len(names)} classes, expected {num_classes}",
            path=path,
            line_number=line_number,
        )
    return names


def load_dataset(
    path: str | Path,
    num_classes: int,
    *,
    has_header: bool = False,
) -> LabeledDataset:
    """Read a dataset file; blank lines are skipped.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    DatasetFormatError
        If a row or the header violates the format, or no row is present.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")
    class_names: Optional[Tuple[str, ...]] = None
    raw_inputs: List[List[float]] = []
    targets: List[List[float]] = []
    with path.open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            if has_header and class_names is None:
                class_names = parse_header(line, num_classes, path=path, line_number=line_number)
                continue
            channels, target = parse_row(line, num_classes, path=path, line_number=line_number)
            raw_inputs.append([normalize_channel(value) for value in channels])
            targets.append(target)
    if not raw_inputs:
        raise DatasetFormatError("dataset contains no data rows", path=path)
    return LabeledDataset(
        np.array(raw_inputs, dtype=np.float64),
        np.array(targets, dtype=np.float64),
        class_names,
        path,
    )


__all__ = ["LabeledDataset", "load_dataset", "parse_header", "parse_row"]
