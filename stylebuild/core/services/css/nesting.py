"""
Nesting expansion — libsass inlines imports, flattens nested rules and
evaluates plain arithmetic; the expanded output is parsed into a
Stylesheet.

libsass is asked for source comments (``/* line N, file */``) so the
parser can attach each rule to the file and line it came from. The
entry text is compiled from a string, which libsass calls ``stdin``.
"""

from __future__ import annotations

import re
from pathlib import Path

import sass

from .base import ChainState, Stage
from .errors import ImportResolutionError, StyleSyntaxError
from .imports import ENTRY_NAME
from .nodes import Locator, Origin, parse_stylesheet

_ERROR_LINE_RE = re.compile(r"on line (\d+)(?::\d+)? of ([^\n,]+)")
_MISSING_IMPORT_RE = re.compile(r"File to import not found or unreadable: (.+?)\.?\s*$", re.MULTILINE)


def expand_nesting(text: str, include_dir: str | None = None, importer=None) -> str:
    """Compile nested stylesheet text to flat, expanded CSS.

    Raises:
        sass.CompileError: On invalid syntax or an unresolvable import.
    """
    return sass.compile(
        string=text,
        output_style="expanded",
        source_comments=True,
        include_paths=[include_dir] if include_dir else [],
        importers=[(0, importer)] if importer is not None else (),
    )


def source_locator(entry: Path) -> Locator:
    """Map libsass source-comment positions to Origins.

    libsass writes file paths relative to the working directory and
    names the compiled string ``stdin``, which stands for *entry*.
    """
    entry_path = str(entry.resolve())

    def locate(line: int, file: str) -> Origin:
        if file == ENTRY_NAME:
            return Origin(entry_path, line)
        return Origin(str(Path(file).resolve()), line)

    return locate


class NestingStage(Stage):
    name = "nesting"

    def apply(self, state: ChainState) -> None:
        origin = state.source.origin
        locate = source_locator(origin)
        try:
            css = expand_nesting(state.text, str(origin.resolve().parent), state.importer)
        except sass.CompileError as e:
            message = str(e)
            source, line = str(origin), None
            m = _ERROR_LINE_RE.search(message)
            if m:
                located = locate(int(m.group(1)), m.group(2).strip())
                source, line = located.source, located.line
            missing = _MISSING_IMPORT_RE.search(message)
            if missing:
                raise ImportResolutionError(
                    f"failed to find '{missing.group(1)}'", source=source, line=line,
                ) from e
            summary = (message.strip().splitlines() or ["invalid stylesheet"])[0]
            raise StyleSyntaxError(summary, source=source, line=line) from e

        sheet = parse_stylesheet(css, locate)
        if state.source.banner:
            sheet.nodes[:0] = parse_stylesheet(state.source.banner).nodes
        state.sheet = sheet
