"""
Minification — compacts the tree and switches rendering to the dense form.

Kept: ``/*! … */`` comments (the version banner). Dropped: other
comments, ``@charset`` and empty rules. Strings and ``url()`` contents
are never touched.
"""

from __future__ import annotations

import re

from .base import ChainState, Stage
from .nodes import AtRule, Comment, Rule, prune_empty, protected_segments

_WS_RE = re.compile(r"\s+")
_SELECTOR_COMBINATOR_RE = re.compile(r"\s*([>+~,])\s*")
_VALUE_COMMA_RE = re.compile(r"\s*,\s*")
_PAREN_WS_RE = re.compile(r"\(\s+|\s+\)")
_LEADING_ZERO_RE = re.compile(r"(^|[^\w.#])0+\.(\d)")
_HEX_RE = re.compile(r"#[0-9a-fA-F]{3,8}\b")
_WORD_RE = re.compile(r"(?<![-\w#.])([a-zA-Z]+)(?![-\w(])")
_COLOR_PROP_RE = re.compile(
    r"color|background|border|outline|fill|stroke|shadow|column-rule|text-decoration",
    re.IGNORECASE,
)

# Keywords with a shorter hex form and hex values with a shorter keyword
_NAMED_TO_HEX = {
    "black": "#000",
    "white": "#fff",
    "yellow": "#ff0",
    "fuchsia": "#f0f",
    "magenta": "#f0f",
    "aqua": "#0ff",
    "cyan": "#0ff",
}
_HEX_TO_NAMED = {
    "#f00": "red",
    "#808080": "gray",
    "#008000": "green",
    "#800000": "maroon",
    "#000080": "navy",
    "#808000": "olive",
    "#800080": "purple",
    "#c0c0c0": "silver",
    "#008080": "teal",
    "#ffa500": "orange",
    "#d2b48c": "tan",
}


def shorten_hex(match: re.Match) -> str:
    hex_value = match.group(0).lower()
    if len(hex_value) == 7 and hex_value[1] == hex_value[2] and hex_value[3] == hex_value[4] \
            and hex_value[5] == hex_value[6]:
        hex_value = "#" + hex_value[1] + hex_value[3] + hex_value[5]
    return _HEX_TO_NAMED.get(hex_value, hex_value)


def _map_unprotected(text: str, fn) -> str:
    return "".join(seg if protected else fn(seg) for seg, protected in protected_segments(text))


def minify_selector(selector: str) -> str:
    def squeeze(seg: str) -> str:
        return _SELECTOR_COMBINATOR_RE.sub(r"\1", _WS_RE.sub(" ", seg))

    return _map_unprotected(selector, squeeze).strip()


def minify_value(value: str, prop: str = "") -> str:
    colors = bool(_COLOR_PROP_RE.search(prop))

    def squeeze(seg: str) -> str:
        seg = _WS_RE.sub(" ", seg)
        seg = _VALUE_COMMA_RE.sub(",", seg)
        seg = _PAREN_WS_RE.sub(lambda m: m.group(0).strip(), seg)
        seg = _LEADING_ZERO_RE.sub(r"\1.\2", seg)
        if colors:
            seg = _HEX_RE.sub(shorten_hex, seg)
            seg = _WORD_RE.sub(lambda m: _NAMED_TO_HEX.get(m.group(1).lower(), m.group(1)), seg)
        return seg

    return _map_unprotected(value, squeeze).strip()


def minify_params(params: str) -> str:
    params = _WS_RE.sub(" ", params).strip()
    params = re.sub(r"\s*:\s*", ":", params)
    params = _VALUE_COMMA_RE.sub(",", params)
    return _PAREN_WS_RE.sub(lambda m: m.group(0).strip(), params)


def _minify_nodes(nodes: list) -> list:
    kept: list = []
    for node in nodes:
        if isinstance(node, Comment):
            if node.preserved:
                kept.append(node)
            continue
        if isinstance(node, Rule):
            node.selector = minify_selector(node.selector)
            node.nodes = _minify_nodes(node.nodes)
        elif isinstance(node, AtRule):
            if node.name.lower() == "charset":
                continue  # output is always written as UTF-8
            node.params = minify_params(node.params)
            if node.nodes is not None:
                node.nodes = _minify_nodes(node.nodes)
        else:
            if not node.is_custom_property:
                node.value = minify_value(node.value, node.prop)
            node.prop = node.prop.strip()
        kept.append(node)
    return kept


class MinifyStage(Stage):
    name = "minify"

    def apply(self, state: ChainState) -> None:
        sheet = state.require_sheet()
        sheet.nodes = prune_empty(_minify_nodes(sheet.nodes))
        sheet.minified = True
