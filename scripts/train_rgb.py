#!/usr/bin/env python3
"""Train the RGB colour classifier and cross-compile it into a query routine."""
from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path
from typing import Optional

from tqdm.auto import tqdm

from rgbnet import (
    ConfigurationError,
    DatasetFormatError,
    Network,
    NetworkConfig,
    export_network,
    load_dataset,
    train_in_background,
)

DEFAULT_EPOCHS = 800
DEFAULT_NEURONS = 10

EPILOG = """\
Example usages:
  train_rgb.py -t training_set.csv -s -c 5 -o query.c
  train_rgb.py -t training_set.csv -e testing_set.csv -v validation_set.csv -c 5 -o query.c
  train_rgb.py -t training_set.csv -x 800 -n 15 -c 5 -o query.py --target python
"""

if os.name == "nt":
    ANSI_RESET = ANSI_RED = ANSI_GREEN = ""
else:
    ANSI_RESET = "\033[0m"
    ANSI_RED = "\033[31m"
    ANSI_GREEN = "\033[32m"


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description=__doc__,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-t", "--trainset", type=Path, required=True, help="Training data set (csv)")
    p.add_argument(
        "-v", "--valset", type=Path, default=None, help="Validation data set used to watch for overfitting"
    )
    p.add_argument(
        "-e", "--testset", type=Path, default=None, help="Testing data set; first line names the colours"
    )
    p.add_argument("-c", "--colors", type=int, required=True, help="Number of colours to recognise")
    p.add_argument("-s", "--stats", action="store_true", help="Write per-epoch error statistics")
    p.add_argument("--stats-path", type=Path, default=Path("stats") / "error_stats.csv")
    p.add_argument("-x", "--epochs", type=int, default=DEFAULT_EPOCHS)
    p.add_argument("-n", "--neurons", type=int, default=DEFAULT_NEURONS, help="Neurons per hidden layer")
    p.add_argument(
        "-o", "--csource", type=Path, required=True, help="Generated source path (overwritten if present)"
    )
    p.add_argument("--target", choices=["c", "python"], default="c")
    p.add_argument("--learning-rate", type=float, default=1e-3)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--plot", type=Path, default=None, help="Save the error curves to this image")
    return p.parse_args(argv)


def _load_optional(path: Optional[Path], num_classes: int, *, has_header: bool = False):
    if path is None:
        return None
    try:
        return load_dataset(path, num_classes, has_header=has_header)
    except (DatasetFormatError, OSError) as exc:
        print(f"\nSkipping {path}: {exc}", file=sys.stderr)
        return None


def _format_elapsed(seconds: float) -> str:
    total = int(seconds)
    return f"{total // 3600:02d}:{total % 3600 // 60:02d}:{total % 60:02d}"


def _print_test_report(network: Network, results) -> None:
    print("\n" + "=" * 40 + " BEGIN TESTING " + "=" * 40)
    print(f"\nProbability vector order: {list(network.class_names or [])}\n")
    for result in results:
        label = result.expected_label if result.expected_label is not None else f"#{result.expected_index}"
        print(f"Color should be {label}, output vector is:\t\t{result.outputs}")
    print("=" * 41 + " END TESTING " + "=" * 41)


def main(argv: Optional[list[str]] = None) -> int:
    start = time.monotonic()
    args = parse_args(argv)
    try:
        config = NetworkConfig(
            num_classes=args.colors,
            hidden_neurons=args.neurons,
            epochs=args.epochs,
            learning_rate=args.learning_rate,
            write_stats=args.stats,
            stats_path=args.stats_path,
            seed=args.seed,
        )
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print("Parsing data set(s)...", end="")
    try:
        training = load_dataset(args.trainset, config.num_classes)
    except (DatasetFormatError, OSError) as exc:
        print(f"\nerror: {exc}", file=sys.stderr)
        return 1
    validation = _load_optional(args.valset, config.num_classes)
    testing = _load_optional(args.testset, config.num_classes, has_header=True)
    print(f"{ANSI_GREEN}[OK]{ANSI_RESET}")

    with tqdm(total=100.0, desc="Training", unit="%", bar_format="{l_bar}{bar}| {n:.0f}%") as bar:

        def on_progress(percentage: float) -> None:
            bar.update(percentage - bar.n)

        network = Network(config, progress=on_progress)
        network.set_datasets(training=training, validation=validation, testing=testing)
        history = train_in_background(network).result()

    if history.test_results:
        _print_test_report(network, history.test_results)

    print("Generating source...", end="")
    try:
        export_network(network, args.csource, target=args.target)
    except OSError as exc:
        print(f"\nerror: could not write {args.csource}: {exc}", file=sys.stderr)
        return 1
    print(f"{ANSI_GREEN}[OK]{ANSI_RESET}\n")

    if args.plot is not None and history.epochs:
        from rgbnet.utils.visualization import plot_error_history

        plot_error_history(history, args.plot)
        print(f"Saved error curves to {args.plot}")

    if network.final_training_error is not None:
        colour = ANSI_RED if network.final_training_error > 5 else ANSI_GREEN
        print(
            f"Final classification error on training set: "
            f"{colour}{network.final_training_error}{ANSI_RESET}%"
        )
    if network.final_validation_error is not None:
        colour = ANSI_RED if network.final_validation_error > 8 else ANSI_GREEN
        print(
            f"Final classification error on validation set: "
            f"{colour}{network.final_validation_error}{ANSI_RESET}%"
        )
    print("Increase number of epochs (-x) and/or number of neurons (-n) to further reduce the error")
    print(f"\nElapsed time: {_format_elapsed(time.monotonic() - start)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
