"""Dataset parsing for colour classification files."""

from .dataset import LabeledDataset, load_dataset, parse_header, parse_row

__all__ = ["LabeledDataset", "load_dataset", "parse_header", "parse_row"]
