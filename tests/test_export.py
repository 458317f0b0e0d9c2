import math
import shutil
import subprocess

import pytest

from rgbnet import LabeledDataset, Network, NetworkConfig, NetworkWeights, export_network
from rgbnet.export import render_c_source, render_python_source, render_source

SAMPLES = [
    (0, 0, 0),
    (255, 255, 255),
    (255, 0, 0),
    (12, 240, 15),
    (10, 20, 245),
    (128, 64, 200),
    (77.5, 3, 254),
]


def trained_network(classes: int = 3, hidden: int = 5) -> Network:
    rows = [[250, 10, 5], [12, 240, 15], [10, 20, 245], [200, 200, 30]]
    targets = [[1 if i == j % classes else 0 for i in range(classes)] for j in range(len(rows))]
    config = NetworkConfig(num_classes=classes, hidden_neurons=hidden, epochs=25, learning_rate=0.2, seed=11)
    network = Network(config)
    network.set_datasets(training=LabeledDataset.from_raw(rows, targets))
    network.run()
    return network


def test_python_target_matches_live_query(exported_query) -> None:
    network = trained_network()
    query = exported_query(network)
    for sample in SAMPLES:
        assert query(*sample) == network.query(*sample)


def test_python_target_handles_two_classes_and_wide_layers(exported_query) -> None:
    network = trained_network(classes=2, hidden=12)
    query = exported_query(network)
    for sample in SAMPLES:
        assert query(*sample) == network.query(*sample)


def test_rendering_is_deterministic() -> None:
    weights = NetworkWeights.from_network(trained_network())
    assert render_c_source(weights) == render_c_source(weights)
    assert render_python_source(weights) == render_python_source(weights)


def test_weights_round_trip_through_literals() -> None:
    network = trained_network()
    weights = NetworkWeights.from_network(network)
    c_source = render_c_source(weights)
    for row in weights.hidden1 + weights.hidden2 + weights.output:
        for value in row:
            assert repr(value) in c_source
            assert float(repr(value)) == value


def test_c_source_declares_query_and_shapes() -> None:
    weights = NetworkWeights.from_network(trained_network(classes=4, hidden=6))
    source = render_c_source(weights)
    assert "double* query(double r, double g, double b)" in source
    assert "static const double hl1_weights[6][4]" in source
    assert "static const double hl2_weights[6][7]" in source
    assert "static const double out_weights[4][7]" in source
    assert "#include <math.h>" in source


def test_weights_shape_is_validated() -> None:
    with pytest.raises(ValueError):
        NetworkWeights.from_matrices([[0.1, 0.2, 0.3]], [[0.1, 0.2]], [[0.1, 0.2]])
    with pytest.raises(ValueError):
        NetworkWeights.from_matrices([[0.1, 0.2, 0.3, 0.4]], [[0.1, 0.2]], [[0.1]])
    with pytest.raises(ValueError):
        NetworkWeights.from_matrices([], [[0.1]], [[0.1]])


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_non_finite_weights_are_rejected(bad: float) -> None:
    with pytest.raises(ValueError):
        NetworkWeights.from_matrices([[0.1, 0.2, bad, 0.4]], [[0.1, 0.2]], [[0.1, 0.2]])


def test_unknown_target_is_rejected() -> None:
    weights = NetworkWeights.from_matrices([[0.1, 0.2, 0.3, 0.4]], [[0.1, 0.2]], [[0.1, 0.2]])
    with pytest.raises(ValueError):
        render_source(weights, "fortran")


def test_export_network_overwrites_file(tmp_path, import_query) -> None:
    network = trained_network()
    path = tmp_path / "query.py"
    path.write_text("stale")
    written = export_network(network, path, target="python")

    assert written == path
    source = path.read_text(encoding="utf-8")
    assert "stale" not in source
    assert import_query(path)(255, 0, 0) == network.query(255, 0, 0)


HARNESS = """
#include <stdio.h>

double* query(double r, double g, double b);

int main(void) {
    static const double samples[][3] = {%(samples)s};
    int n = sizeof(samples) / sizeof(samples[0]);
    int i, k;
    for (i = 0; i < n; i++) {
        double* out = query(samples[i][0], samples[i][1], samples[i][2]);
        for (k = 0; k < %(classes)d; k++) {
            printf(k ? " %%.17g" : "%%.17g", out[k]);
        }
        printf("\\n");
    }
    return 0;
}
"""


def test_c_target_matches_live_query(tmp_path) -> None:
    compiler = shutil.which("cc") or shutil.which("gcc") or shutil.which("clang")
    if compiler is None:
        pytest.skip("no C compiler available")

    network = trained_network()
    source = tmp_path / "query.c"
    export_network(network, source, target="c")
    harness = tmp_path / "main.c"
    harness.write_text(
        HARNESS
        % {
            "samples": ", ".join("{%r, %r, %r}" % tuple(float(v) for v in s) for s in SAMPLES),
            "classes": network.config.num_classes,
        }
    )
    binary = tmp_path / "query"
    subprocess.run(
        [compiler, "-std=c99", "-O0", "-ffp-contract=off", str(source), str(harness), "-o", str(binary), "-lm"],
        check=True,
        capture_output=True,
        text=True,
    )
    result = subprocess.run([str(binary)], check=True, capture_output=True, text=True)

    lines = result.stdout.strip().splitlines()
    assert len(lines) == len(SAMPLES)
    for line, sample in zip(lines, SAMPLES):
        outputs = [float(value) for value in line.split()]
        assert outputs == pytest.approx(network.query(*sample), abs=1e-12)
