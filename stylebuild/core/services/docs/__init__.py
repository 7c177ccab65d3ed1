"""
Documentation page build — example extraction and template rendering.
"""

from __future__ import annotations

from .examples import (
    dedent_snippet,
    display_view,
    example,
    highlight_markup,
    inline_view,
    render_example,
)
from .ids import IdCounter
from .renderer import (
    DocsAssetError,
    DocsResult,
    build_docs,
    copy_doc_assets,
    render_docs,
    write_docs,
)

__all__ = [
    "DocsAssetError",
    "DocsResult",
    "IdCounter",
    "build_docs",
    "copy_doc_assets",
    "dedent_snippet",
    "display_view",
    "example",
    "highlight_markup",
    "inline_view",
    "render_docs",
    "render_example",
    "write_docs",
]
