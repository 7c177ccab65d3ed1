"""
Stylesheet transform chain — imports, nesting, SVG, variables, calc,
assets, minification and optional selector scoping.
"""

from __future__ import annotations

from .base import ChainState, Stage, StylesheetSource
from .chain import ChainResult, TransformChain, build_chain, map_path_for, write_result
from .errors import (
    ImportResolutionError,
    StyleSyntaxError,
    StylesheetError,
    SvgLoadError,
    UnresolvedVariableError,
)

__all__ = [
    "ChainResult",
    "ChainState",
    "ImportResolutionError",
    "Stage",
    "StyleSyntaxError",
    "StylesheetError",
    "StylesheetSource",
    "SvgLoadError",
    "TransformChain",
    "UnresolvedVariableError",
    "build_chain",
    "map_path_for",
    "write_result",
]
