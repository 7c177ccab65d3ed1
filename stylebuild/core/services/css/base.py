"""
Transform chain base — the state every stage reads and rewrites.

Stage model
───────────
A chain is an ordered list of stages. Each stage:
  - Receives the shared ``ChainState``.
  - Rewrites ``state.text`` (before nesting) or ``state.sheet`` (after).
  - Raises a ``StylesheetError`` subclass to abort the chain.

Stage conventions
─────────────────
  "imports"   — prepare @import statements and the importer libsass uses
  "nesting"   — inline imports, flatten nested rules; parse into a Stylesheet
  "svg"       — inline svg-load() references as data URIs
  "variables" — substitute var() references
  "calc"      — fold calc() arithmetic
  "assets"    — copy url() targets next to the output
  "minify"    — compact the tree
  "scope"     — namespace selectors (scoped chains only)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from .nodes import Origin, Stylesheet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StylesheetSource:
    """Entry stylesheet text plus where it came from and where it goes."""

    text: str
    origin: Path                        # Entry file; relative imports resolve from here
    destination: Path                   # Output CSS path; the map sits beside it
    banner: str = ""                    # "/*! … */" comment placed ahead of the output


@dataclass
class ChainState:
    """Mutable state threaded through the stages of one chain run."""

    source: StylesheetSource
    text: str
    sheet: Stylesheet | None = None
    importer: Callable[..., Any] | None = None  # libsass importers= callback (set by "imports")
    sources: dict[str, str] = field(default_factory=dict)  # Absolute path → original text
    warnings: list[str] = field(default_factory=list)
    assets: list[Path] = field(default_factory=list)

    def require_sheet(self) -> Stylesheet:
        if self.sheet is None:
            raise RuntimeError("Stylesheet not parsed yet; the nesting stage must run first")
        return self.sheet

    def base_dir(self, origin: Origin | None) -> Path:
        """Directory relative references of a node resolve against."""
        if origin is not None:
            return Path(origin.source).parent
        return self.source.origin.resolve().parent

    def warn(self, message: str) -> None:
        logger.warning("%s", message)
        self.warnings.append(message)


class Stage(ABC):
    """One rewrite step of a transform chain."""

    name: str = ""

    @abstractmethod
    def apply(self, state: ChainState) -> None:
        """Rewrite the state in place.

        Raises:
            StylesheetError: If the stylesheet cannot be processed.
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
