"""Training bookkeeping helpers."""

from .background import train_in_background
from .history import ErrorLogWriter, TestResult, TrainingHistory

__all__ = [
    "ErrorLogWriter",
    "TestResult",
    "TrainingHistory",
    "train_in_background",
]
