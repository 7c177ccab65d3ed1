"""
Stylesheet errors raised by the transform chain stages.

Every error carries the file it was raised for (and the line, when
known) so the orchestrator can report where a build broke.
"""

from __future__ import annotations


class StylesheetError(Exception):
    """Base class for transform chain failures."""

    stage = "css"

    def __init__(self, message: str, source: str | None = None, line: int | None = None):
        self.message = message
        self.source = source
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        if self.source and self.line:
            return f"{self.source}:{self.line}: {self.message}"
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class ImportResolutionError(StylesheetError):
    """An @import target could not be found."""

    stage = "imports"


class StyleSyntaxError(StylesheetError):
    """The stylesheet could not be compiled or parsed."""

    stage = "nesting"


class SvgLoadError(StylesheetError):
    """An svg-load() reference could not be read."""

    stage = "svg"


class UnresolvedVariableError(StylesheetError):
    """A var() reference has no definition and no fallback."""

    stage = "variables"
