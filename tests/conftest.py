import importlib.util
import itertools
from pathlib import Path

import pytest

from rgbnet import export_network

_module_ids = itertools.count()


def _import_query(path: Path):
    spec = importlib.util.spec_from_file_location(f"rgbnet_generated_{next(_module_ids)}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.query


@pytest.fixture
def import_query():
    """Import ``query`` from a generated Python file."""

    return _import_query


@pytest.fixture
def exported_query(tmp_path):
    """Export a network with the Python target and import its ``query``."""

    def export(network):
        path = tmp_path / f"query_{next(_module_ids)}.py"
        export_network(network, path, target="python")
        return _import_query(path)

    return export
