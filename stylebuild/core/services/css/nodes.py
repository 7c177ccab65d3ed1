"""
Stylesheet tree — the structure the transform stages rewrite.

The nesting stage hands libsass' expanded output to ``parse_stylesheet``;
every later stage walks and mutates the resulting tree, and
``render.render_stylesheet`` turns it back into text.

Node types
──────────
  Stylesheet  — top-level container (plus the ``minified`` render flag)
  Rule        — ``selector { declarations }``
  AtRule      — ``@name params;`` or ``@name params { … }``
  Declaration — ``prop: value [!important]``
  Comment     — ``/* text */``

Rules and at-rules carry an ``Origin`` recovered from the
``/* line N, file */`` comments libsass writes before each block.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterator, Union

from .errors import StyleSyntaxError


@dataclass(frozen=True)
class Origin:
    """Position of a node in its original source file (line is 1-based)."""

    source: str
    line: int
    column: int = 0


@dataclass
class Comment:
    text: str
    origin: Origin | None = None

    @property
    def preserved(self) -> bool:
        """``/*! … */`` comments survive minification."""
        return self.text.startswith("!")


@dataclass
class Declaration:
    prop: str
    value: str
    important: bool = False
    origin: Origin | None = None

    @property
    def is_custom_property(self) -> bool:
        return self.prop.startswith("--")


@dataclass
class Rule:
    selector: str
    nodes: list[Union[Declaration, Comment]] = field(default_factory=list)
    origin: Origin | None = None

    def declarations(self) -> list[Declaration]:
        return [n for n in self.nodes if isinstance(n, Declaration)]


@dataclass
class AtRule:
    name: str
    params: str = ""
    nodes: list | None = None           # None → statement (@charset, @import)
    origin: Origin | None = None

    @property
    def is_keyframes(self) -> bool:
        return self.name.lower().endswith("keyframes")


Node = Union[Rule, AtRule, Declaration, Comment]


@dataclass
class Stylesheet:
    nodes: list[Node] = field(default_factory=list)
    minified: bool = False


# At-rules whose block holds rules rather than declarations
_RULE_BLOCK_AT_RULES = frozenset({
    "media", "supports", "document", "-moz-document", "layer", "container", "scope",
})

_SOURCE_COMMENT_RE = re.compile(r"^\s*line (\d+), (.*?)\s*$")
_IMPORTANT_RE = re.compile(r"\s*!\s*important\s*$", re.IGNORECASE)
_AT_NAME_RE = re.compile(r"[-\w]+")

# (line, file) from a libsass source comment → Origin
Locator = Callable[[int, str], Union[Origin, None]]


# ── Text scanning helpers ───────────────────────────────────────────


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split *text* on *sep* outside quotes, parentheses and brackets."""
    parts: list[str] = []
    depth = 0
    quote: str | None = None
    start = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch in "([":
            depth += 1
        elif ch in ")]":
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append(text[start:i])
            start = i + 1
        i += 1
    parts.append(text[start:])
    return parts


def _matching_paren(text: str, open_idx: int) -> int:
    """Index of the ``)`` closing the ``(`` at *open_idx*, or -1."""
    depth = 0
    quote: str | None = None
    i = open_idx
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def find_calls(value: str, name: str) -> list[tuple[int, int, str]]:
    """Locate outermost ``name(...)`` calls in a value.

    Returns ``(start, end, inner)`` triples where ``value[start:end]`` is
    the whole call and ``inner`` the text between the parentheses.
    """
    calls: list[tuple[int, int, str]] = []
    pattern = re.compile(r"(?<![-\w])" + re.escape(name) + r"\(", re.IGNORECASE)
    pos = 0
    while True:
        m = pattern.search(value, pos)
        if m is None:
            return calls
        open_idx = m.end() - 1
        close_idx = _matching_paren(value, open_idx)
        if close_idx < 0:
            raise StyleSyntaxError(f"unclosed {name}() in {value!r}")
        calls.append((m.start(), close_idx + 1, value[open_idx + 1:close_idx]))
        pos = close_idx + 1


def replace_calls(value: str, name: str, fn: Callable[[str], str]) -> str:
    """Replace every outermost ``name(...)`` call with ``fn(inner)``."""
    calls = find_calls(value, name)
    if not calls:
        return value
    out: list[str] = []
    last = 0
    for start, end, inner in calls:
        out.append(value[last:start])
        out.append(fn(inner))
        last = end
    out.append(value[last:])
    return "".join(out)


def protected_segments(value: str) -> list[tuple[str, bool]]:
    """Split a value into ``(text, protected)`` chunks.

    Quoted strings and ``url(...)`` calls are protected: whitespace and
    colour rewrites must not touch them.
    """
    segments: list[tuple[str, bool]] = []
    urls = find_calls(value, "url")
    last = 0
    for start, end, _inner in urls:
        segments.extend(_split_strings(value[last:start]))
        segments.append((value[start:end], True))
        last = end
    segments.extend(_split_strings(value[last:]))
    return [s for s in segments if s[0]]


def _split_strings(text: str) -> list[tuple[str, bool]]:
    out: list[tuple[str, bool]] = []
    buf_start = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            j = i + 1
            while j < len(text) and text[j] != ch:
                j += 2 if text[j] == "\\" else 1
            out.append((text[buf_start:i], False))
            out.append((text[i:j + 1], True))
            i = buf_start = j + 1
            continue
        i += 1
    out.append((text[buf_start:], False))
    return out


# ── Tree walking ────────────────────────────────────────────────────


def iter_rules(nodes: list, skip_keyframes: bool = False) -> Iterator[Rule]:
    """Yield every Rule, descending into at-rule blocks."""
    for node in nodes:
        if isinstance(node, Rule):
            yield node
        elif isinstance(node, AtRule) and node.nodes:
            if skip_keyframes and node.is_keyframes:
                continue
            yield from iter_rules(node.nodes, skip_keyframes)


def iter_declarations(nodes: list) -> Iterator[tuple[Union[Rule, AtRule], Declaration]]:
    """Yield ``(owner, declaration)`` for rules and declaration-block at-rules."""
    for node in nodes:
        if isinstance(node, Rule):
            for decl in node.declarations():
                yield node, decl
        elif isinstance(node, AtRule) and node.nodes:
            for child in node.nodes:
                if isinstance(child, Declaration):
                    yield node, child
            yield from iter_declarations(node.nodes)


def prune_empty(nodes: list) -> list:
    """Drop rules without declarations and at-rule blocks left empty."""
    kept: list = []
    for node in nodes:
        if isinstance(node, Rule):
            if node.declarations():
                kept.append(node)
        elif isinstance(node, AtRule) and node.nodes is not None:
            node.nodes = prune_empty(node.nodes)
            if any(not isinstance(n, Comment) for n in node.nodes):
                kept.append(node)
        else:
            kept.append(node)
    return kept


# ── Parser ──────────────────────────────────────────────────────────


def parse_stylesheet(text: str, locate: Locator | None = None) -> Stylesheet:
    """Parse flat (already un-nested) CSS into a Stylesheet.

    Args:
        text: CSS text, typically libsass expanded output.
        locate: Maps the line and file of a ``/* line N, file */``
            source comment to an Origin. Those comments are consumed,
            not kept.

    Raises:
        StyleSyntaxError: On unbalanced blocks or malformed declarations.
    """
    return Stylesheet(nodes=_Parser(text, locate).parse())


class _Parser:
    def __init__(self, text: str, locate: Locator | None):
        self.text = text
        self.pos = 0
        self.locate = locate
        self.pending: Origin | None = None

    def parse(self) -> list:
        return self._parse_rules(top=True)

    # ── blocks ──

    def _parse_rules(self, top: bool) -> list:
        nodes: list = []
        while True:
            self._skip_ws()
            if self.pos >= len(self.text):
                if top:
                    return nodes
                raise StyleSyntaxError("unclosed block at end of stylesheet")
            ch = self.text[self.pos]
            if self.text.startswith("/*", self.pos):
                comment = self._read_comment()
                if comment is not None:
                    nodes.append(comment)
            elif ch == "}":
                if top:
                    raise StyleSyntaxError(f"unexpected '}}' at offset {self.pos}")
                self.pos += 1
                return nodes
            elif ch == "@":
                nodes.append(self._parse_at_rule())
            elif ch == ";":
                self.pos += 1
            else:
                nodes.append(self._parse_rule())

    def _parse_rule(self) -> Rule:
        origin = self._take_origin()
        selector, stop = self._read_until("{;}")
        if stop != "{":
            raise StyleSyntaxError(f"expected '{{' after {selector.strip()!r}")
        self.pos += 1
        return Rule(selector=selector.strip(), nodes=self._parse_declarations(), origin=origin)

    def _parse_at_rule(self) -> AtRule:
        origin = self._take_origin()
        self.pos += 1
        m = _AT_NAME_RE.match(self.text, self.pos)
        if m is None:
            raise StyleSyntaxError(f"malformed at-rule at offset {self.pos}")
        name = m.group(0)
        self.pos = m.end()
        params, stop = self._read_until("{;}")
        params = params.strip()
        if stop != "{":
            if stop == ";":
                self.pos += 1
            return AtRule(name=name, params=params, nodes=None, origin=origin)

        self.pos += 1
        lowered = name.lower()
        if lowered in _RULE_BLOCK_AT_RULES or lowered.endswith("keyframes"):
            children = self._parse_rules(top=False)
        else:
            children = self._parse_declarations()
        return AtRule(name=name, params=params, nodes=children, origin=origin)

    def _parse_declarations(self) -> list:
        nodes: list = []
        while True:
            self._skip_ws()
            if self.pos >= len(self.text):
                raise StyleSyntaxError("unclosed declaration block at end of stylesheet")
            ch = self.text[self.pos]
            if self.text.startswith("/*", self.pos):
                comment = self._read_comment()
                if comment is not None:
                    nodes.append(comment)
                continue
            if ch == "}":
                self.pos += 1
                return nodes
            if ch == ";":
                self.pos += 1
                continue
            raw, stop = self._read_until(";}")
            if stop is None:
                raise StyleSyntaxError("unclosed declaration block at end of stylesheet")
            if stop == ";":
                self.pos += 1
            nodes.append(_make_declaration(raw))

    # ── tokens ──

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _read_comment(self) -> Comment | None:
        end = self.text.find("*/", self.pos + 2)
        if end < 0:
            raise StyleSyntaxError(f"unclosed comment at offset {self.pos}")
        body = self.text[self.pos + 2:end]
        self.pos = end + 2
        m = _SOURCE_COMMENT_RE.match(body)
        if m:
            if self.locate is not None:
                self.pending = self.locate(int(m.group(1)), m.group(2))
            return None
        return Comment(text=body)

    def _read_until(self, stops: str) -> tuple[str, str | None]:
        """Read up to the first stop char outside strings/parens/comments."""
        start = self.pos
        text = self.text
        depth = 0
        quote: str | None = None
        i = self.pos
        while i < len(text):
            ch = text[i]
            if quote:
                if ch == "\\":
                    i += 2
                    continue
                if ch == quote:
                    quote = None
            elif ch in "\"'":
                quote = ch
            elif text.startswith("/*", i):
                end = text.find("*/", i + 2)
                i = len(text) if end < 0 else end + 2
                continue
            elif ch in "([":
                depth += 1
            elif ch in ")]":
                depth -= 1
            elif depth <= 0 and ch in stops:
                self.pos = i
                return text[start:i], ch
            i += 1
        self.pos = len(text)
        return text[start:], None

    def _take_origin(self) -> Origin | None:
        origin, self.pending = self.pending, None
        return origin


def _make_declaration(raw: str) -> Declaration:
    raw = raw.strip()
    idx = raw.find(":")
    if idx <= 0:
        raise StyleSyntaxError(f"invalid declaration {raw!r}")
    prop = raw[:idx].strip()
    value = raw[idx + 1:].strip()
    important = False
    if not prop.startswith("--"):
        m = _IMPORTANT_RE.search(value)
        if m:
            important = True
            value = value[:m.start()].rstrip()
    return Declaration(prop=prop, value=value, important=important)
