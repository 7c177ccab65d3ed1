"""
SVG inlining — ``svg-load("icon.svg", fill=#000)`` becomes a data URI.

Parameters set (or replace) attributes on the root ``<svg>`` element.
The path resolves against the file the rule was written in.
"""

from __future__ import annotations

import re
from pathlib import Path

from .base import ChainState, Stage
from .errors import SvgLoadError
from .nodes import Origin, iter_declarations, replace_calls, split_top_level

_PARAM_RE = re.compile(r"^\s*([-\w:]+)\s*=\s*(.+?)\s*$", re.DOTALL)
_ROOT_TAG_RE = re.compile(r"<svg\b[^>]*>", re.IGNORECASE)
_STRIP_RES = (
    re.compile(r"<\?xml.*?\?>", re.DOTALL),
    re.compile(r"<!DOCTYPE[^>]*>", re.IGNORECASE),
    re.compile(r"<!--.*?-->", re.DOTALL),
)

# "%" first so later escapes are not double-encoded
_URI_ESCAPES = (
    ("%", "%25"),
    ('"', "'"),
    ("#", "%23"),
    ("{", "%7B"),
    ("}", "%7D"),
    ("<", "%3C"),
    (">", "%3E"),
)


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return text


def set_root_attributes(svg: str, params: dict[str, str]) -> str:
    """Set attributes on the root ``<svg>`` tag, replacing existing ones."""
    m = _ROOT_TAG_RE.search(svg)
    if m is None:
        raise SvgLoadError("no <svg> element found")
    tag = m.group(0)
    for name, value in params.items():
        attr_re = re.compile(r"\s" + re.escape(name) + r"\s*=\s*([\"']).*?\1", re.DOTALL)
        replacement = f' {name}="{value}"'
        if attr_re.search(tag):
            tag = attr_re.sub(lambda _m: replacement, tag, count=1)
        elif tag.endswith("/>"):
            tag = tag[:-2].rstrip() + replacement + "/>"
        else:
            tag = tag[:-1].rstrip() + replacement + ">"
    return svg[:m.start()] + tag + svg[m.end():]


def encode_svg(svg: str) -> str:
    """Minimal-escape ``data:`` URI for an SVG document."""
    for pattern in _STRIP_RES:
        svg = pattern.sub("", svg)
    svg = re.sub(r">\s+<", "><", svg)
    svg = re.sub(r"\s+", " ", svg).strip()
    for raw, escaped in _URI_ESCAPES:
        svg = svg.replace(raw, escaped)
    return f'url("data:image/svg+xml;charset=utf-8,{svg}")'


def load_svg(arguments: str, base_dir: Path, origin: Origin | None = None) -> str:
    """Resolve one ``svg-load(...)`` argument list to a ``url(data:…)`` value."""
    args = split_top_level(arguments)
    target = _unquote(args[0])
    source = origin.source if origin else None
    line = origin.line if origin else None

    params: dict[str, str] = {}
    for arg in args[1:]:
        m = _PARAM_RE.match(arg)
        if m is None:
            raise SvgLoadError(f"invalid svg-load() parameter {arg.strip()!r}", source=source, line=line)
        params[m.group(1)] = _unquote(m.group(2))

    path = base_dir / target
    if not path.is_file():
        raise SvgLoadError(f"cannot find '{target}'", source=source, line=line)
    try:
        svg = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SvgLoadError(f"cannot read '{target}': {e}", source=source, line=line) from e

    if params:
        svg = set_root_attributes(svg, params)
    return encode_svg(svg)


class SvgInlineStage(Stage):
    name = "svg"

    def apply(self, state: ChainState) -> None:
        sheet = state.require_sheet()
        for owner, decl in iter_declarations(sheet.nodes):
            if "svg-load(" not in decl.value.lower():
                continue
            base_dir = state.base_dir(owner.origin)
            decl.value = replace_calls(
                decl.value, "svg-load",
                lambda inner: load_svg(inner, base_dir, owner.origin),
            )
