"""
Import handling — libsass inlines ``@import`` during the nesting stage;
this stage prepares the text and the importer it compiles with.

Two rewrites make plain-CSS import forms inlinable by libsass, each
kept on its original line so source comments still point at it:

  @import url(x.css);          →  @import "x.css";
  @import "x.css" print;       →  @media print { @import "x.css"; }

``SassImporter`` then resolves every local target relative to the
importing file (``x``, ``x.scss``, ``x.css``, ``_x.scss``, ``_x``,
``x/index.scss``, ``x/index.css``), inlines each file at most once and
records its text for ``sourcesContent``. Remote imports and targets it
cannot find are left to libsass, which keeps the former as written and
reports the latter as a compile error.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .base import ChainState, Stage
from .errors import ImportResolutionError
from .nodes import split_top_level

logger = logging.getLogger(__name__)

# libsass names the string being compiled "stdin"
ENTRY_NAME = "stdin"

_IMPORT_RE = re.compile(r"^(?P<indent>[ \t]*)@import\s+(?P<body>[^;\n]+);", re.IGNORECASE | re.MULTILINE)
_TARGET_RE = re.compile(
    r"""^(?:url\(\s*)?(?P<q>["']?)(?P<path>[^"')\s]+)(?P=q)\s*\)?\s*(?P<media>.*)$""",
    re.IGNORECASE,
)
_REMOTE_RE = re.compile(r"^(?:[a-z][a-z0-9+.-]*:)?//", re.IGNORECASE)


def resolve_import(target: str, base_dir: Path) -> Path | None:
    """Find the file an import target refers to, or None."""
    path = base_dir / target
    candidates = [
        path,
        path.with_name(path.name + ".scss"),
        path.with_name(path.name + ".css"),
        path.with_name("_" + path.name + ".scss"),
        path.with_name("_" + path.name),
        path / "index.scss",
        path / "index.css",
    ]
    for candidate in candidates:
        if candidate.is_file():
            return candidate.resolve()
    return None


def normalize_imports(text: str) -> str:
    """Rewrite local ``url()`` and media-qualified imports into Sass form."""

    def rewrite(m: re.Match) -> str:
        targets = []
        media = ""
        for part in split_top_level(m.group("body")):
            parsed = _TARGET_RE.match(part.strip())
            if parsed is None or _REMOTE_RE.match(parsed.group("path")):
                return m.group(0)
            targets.append(parsed.group("path"))
            media = parsed.group("media").strip()

        statement = "@import " + ", ".join(f'"{t}"' for t in targets) + ";"
        if media:
            statement = f"@media {media} {{ {statement} }}"
        return m.group("indent") + statement

    return _IMPORT_RE.sub(rewrite, text)


class SassImporter:
    """libsass ``importers=`` callback for one entry stylesheet.

    Called as ``importer(target, prev)`` where ``prev`` is the importing
    file (``"stdin"`` for the entry text). Returns ``[(path, source)]``
    to inline a file, ``[]`` to drop a repeated import, or None to let
    libsass handle the target itself.
    """

    def __init__(self, entry: Path, entry_text: str):
        self.entry = entry.resolve()
        self.seen: set[Path] = {self.entry}
        self.sources: dict[str, str] = {str(self.entry): entry_text}

    def __call__(self, target: str, prev: str = ENTRY_NAME):
        if _REMOTE_RE.match(target):
            return None
        base_dir = self.entry.parent if prev == ENTRY_NAME else Path(prev).parent
        resolved = resolve_import(target, base_dir)
        if resolved is None:
            return None
        if resolved in self.seen:
            logger.debug("Skipping repeated import of %s from %s", resolved, prev)
            return []
        self.seen.add(resolved)

        try:
            text = resolved.read_text(encoding="utf-8")
        except OSError as e:
            raise ImportResolutionError(f"cannot read '{target}': {e}", source=prev) from e
        logger.debug("Inlining %s into %s", resolved, prev)
        self.sources[str(resolved)] = text
        return [(str(resolved), text)]


class ImportStage(Stage):
    name = "imports"

    def apply(self, state: ChainState) -> None:
        state.text = normalize_imports(state.text)
        state.importer = SassImporter(state.source.origin, state.source.text)
        state.sources = state.importer.sources
