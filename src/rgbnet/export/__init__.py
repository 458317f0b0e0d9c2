"""Code generation of standalone inference routines."""

from .codegen import (
    NetworkWeights,
    RENDERERS,
    export_network,
    render_c_source,
    render_python_source,
    render_source,
)

__all__ = [
    "NetworkWeights",
    "RENDERERS",
    "export_network",
    "render_c_source",
    "render_python_source",
    "render_source",
]
