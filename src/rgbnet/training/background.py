"""Run a training session on a single detached worker thread."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Optional

from .history import TrainingHistory


def train_in_background(network, epochs: Optional[int] = None) -> "Future[TrainingHistory]":
    """Start ``network.run(epochs)`` on a daemon thread.

    The returned future resolves to the :class:`TrainingHistory` or carries the
    exception raised by the run. Progress is only observable through the
    network's progress callback; there is no cancellation.
    """

    future: "Future[TrainingHistory]" = Future()

    def _worker() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            history = network.run(epochs)
        except BaseException as exc:  # delivered to the caller through the future
            future.set_exception(exc)
        else:
            future.set_result(history)

    thread = threading.Thread(target=_worker, name="rgbnet-training", daemon=True)
    thread.start()
    return future


__all__ = ["train_in_background"]
