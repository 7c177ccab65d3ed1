"""
Stylesheet renderer — tree back to text, recording source map positions.

Two layouts: the readable one used before minification (and for
debugging a chain without the minify stage), and the compact one the
minify stage switches on.
"""

from __future__ import annotations

from .nodes import AtRule, Comment, Declaration, Rule, Stylesheet
from .sourcemap import SourceMapBuilder


class _Writer:
    def __init__(self, source_map: SourceMapBuilder | None):
        self.parts: list[str] = []
        self.line = 0
        self.col = 0
        self.source_map = source_map

    def write(self, text: str) -> None:
        self.parts.append(text)
        newlines = text.count("\n")
        if newlines:
            self.line += newlines
            self.col = len(text) - text.rfind("\n") - 1
        else:
            self.col += len(text)

    def mark(self, node) -> None:
        if self.source_map is not None and node.origin is not None:
            self.source_map.add(self.line, self.col, node.origin)

    def getvalue(self) -> str:
        return "".join(self.parts)


def render_stylesheet(sheet: Stylesheet, source_map: SourceMapBuilder | None = None) -> str:
    writer = _Writer(source_map)
    if sheet.minified:
        _compact(sheet.nodes, writer)
    else:
        _pretty(sheet.nodes, writer, "")
    return writer.getvalue()


def _declaration(decl: Declaration, sep: str) -> str:
    text = f"{decl.prop}{sep}{decl.value}"
    if decl.important:
        text += " !important" if sep != ":" else "!important"
    return text


def _at_rule_head(node: AtRule) -> str:
    return f"@{node.name} {node.params}" if node.params else f"@{node.name}"


# ── compact ──


def _compact(nodes: list, w: _Writer) -> None:
    prev_decl = False
    for node in nodes:
        if isinstance(node, Declaration):
            if prev_decl:
                w.write(";")
            w.mark(node)
            w.write(_declaration(node, ":"))
            prev_decl = True
            continue

        # A declaration followed by anything else still needs its ";"
        if prev_decl:
            w.write(";")
        prev_decl = False
        w.mark(node)
        if isinstance(node, Comment):
            w.write(f"/*{node.text}*/")
        elif isinstance(node, Rule):
            w.write(node.selector + "{")
            _compact(node.nodes, w)
            w.write("}")
        elif isinstance(node, AtRule):
            if node.nodes is None:
                w.write(_at_rule_head(node) + ";")
            else:
                w.write(_at_rule_head(node) + "{")
                _compact(node.nodes, w)
                w.write("}")


# ── readable ──


def _pretty(nodes: list, w: _Writer, indent: str) -> None:
    for node in nodes:
        w.write(indent)
        w.mark(node)
        if isinstance(node, Declaration):
            w.write(_declaration(node, ": ") + ";\n")
        elif isinstance(node, Comment):
            w.write(f"/*{node.text}*/\n")
        elif isinstance(node, Rule):
            w.write(node.selector + " {\n")
            _pretty(node.nodes, w, indent + "  ")
            w.write(indent + "}\n")
        elif isinstance(node, AtRule):
            if node.nodes is None:
                w.write(_at_rule_head(node) + ";\n")
            else:
                w.write(_at_rule_head(node) + " {\n")
                _pretty(node.nodes, w, indent + "  ")
                w.write(indent + "}\n")
