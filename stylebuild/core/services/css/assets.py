"""
Asset copying — files referenced through ``url()`` are copied into the
distribution directory and the references rewritten to point at them.

Names come from a template: ``[name]`` (file stem), ``[ext]`` (extension
without the dot) and ``[hash]`` (first 8 hex digits of the content's
SHA-1). ``data:``, remote and fragment-only URLs are left alone.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import shutil
from pathlib import Path

from .base import ChainState, Stage
from .nodes import Origin, iter_declarations, replace_calls

logger = logging.getLogger(__name__)

_SKIP_RE = re.compile(r"^(?:[a-z][a-z0-9+.-]*:|//|#)", re.IGNORECASE)
_NEEDS_QUOTES_RE = re.compile(r"[\s()'\"]")


def asset_name(template: str, path: Path) -> str:
    """Expand a ``[name].[ext]``-style template for *path*."""
    name = template.replace("[name]", path.stem).replace("[ext]", path.suffix.lstrip("."))
    if "[hash]" in name:
        digest = hashlib.sha1(path.read_bytes()).hexdigest()[:8]
        name = name.replace("[hash]", digest)
    return name


def _split_suffix(target: str) -> tuple[str, str]:
    """Separate ``?query`` / ``#fragment`` from the file part."""
    for i, ch in enumerate(target):
        if ch in "?#":
            return target[:i], target[i:]
    return target, ""


class AssetCopyStage(Stage):
    """Copy url() targets into *dest_dir*.

    Missing files produce a warning and keep the original reference.
    """

    name = "assets"

    def __init__(self, dest_dir: Path, template: str = "[name].[ext]"):
        self.dest_dir = dest_dir
        self.template = template

    def apply(self, state: ChainState) -> None:
        sheet = state.require_sheet()
        copied: dict[Path, Path] = {}
        css_dir = state.source.destination.resolve().parent

        for owner, decl in iter_declarations(sheet.nodes):
            if "url(" not in decl.value.lower():
                continue
            base_dir = state.base_dir(owner.origin)
            decl.value = replace_calls(
                decl.value, "url",
                lambda inner: self._rewrite(inner, base_dir, css_dir, owner.origin, state, copied),
            )

    def _rewrite(
        self,
        inner: str,
        base_dir: Path,
        css_dir: Path,
        origin: Origin | None,
        state: ChainState,
        copied: dict[Path, Path],
    ) -> str:
        raw = inner.strip()
        quoted = len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'"
        target = raw[1:-1] if quoted else raw
        if not target or _SKIP_RE.match(target):
            return f"url({inner})"

        file_part, suffix = _split_suffix(target)
        source = (base_dir / file_part).resolve()
        if not source.is_file():
            where = f"{origin.source}:{origin.line}" if origin else str(state.source.origin)
            state.warn(f"{where}: asset not found: {target}")
            return f"url({inner})"

        dest = copied.get(source)
        if dest is None:
            dest = self._copy(source)
            copied[source] = dest
            state.assets.append(dest)

        rel = Path(os.path.relpath(dest, css_dir)).as_posix() + suffix
        if _NEEDS_QUOTES_RE.search(rel):
            return f'url("{rel}")'
        return f"url({rel})"

    def _copy(self, source: Path) -> Path:
        dest = (self.dest_dir / asset_name(self.template, source)).resolve()
        dest.parent.mkdir(parents=True, exist_ok=True)
        if dest != source:
            shutil.copyfile(source, dest)
            logger.debug("Copied asset %s -> %s", source, dest)
        return dest
