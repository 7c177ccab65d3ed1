"""
calc() folding — reduces arithmetic whose units are compatible.

``calc(10px + 2px * 3)`` becomes ``16px``; ``calc(100% - 10px)`` cannot be
reduced at build time and is left as written.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .base import ChainState, Stage
from .nodes import iter_declarations, replace_calls

PRECISION = 5

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?([a-z%]*)", re.IGNORECASE)


class _Unfoldable(Exception):
    pass


@dataclass
class Quantity:
    value: float
    unit: str = ""

    def __str__(self) -> str:
        value = round(self.value, PRECISION)
        if value == 0:
            value = 0.0  # no "-0"
        if value == int(value):
            text = str(int(value))
        else:
            text = f"{value:.{PRECISION}f}".rstrip("0").rstrip(".")
        return text + self.unit


def _tokenize(expr: str) -> list:
    tokens: list = []
    i = 0
    while i < len(expr):
        ch = expr[i]
        if ch.isspace():
            i += 1
            continue
        if expr[i:i + 5].lower() == "calc(":
            tokens.append("(")
            i += 5
            continue
        if ch in "()*/":
            tokens.append(ch)
            i += 1
            continue
        if ch in "+-":
            prev = tokens[-1] if tokens else None
            signed = prev is None or (isinstance(prev, str) and prev in "(+-*/")
            if not (signed and i + 1 < len(expr) and (expr[i + 1].isdigit() or expr[i + 1] == ".")):
                tokens.append(ch)
                i += 1
                continue
        m = _NUMBER_RE.match(expr, i)
        if m is None or m.end() == i:
            raise _Unfoldable(expr[i:])
        number = m.group(0)
        unit = m.group(1)
        tokens.append(Quantity(float(number[:len(number) - len(unit)]), unit.lower()))
        i = m.end()
    return tokens


class _Evaluator:
    def __init__(self, tokens: list):
        self.tokens = tokens
        self.pos = 0

    def run(self) -> Quantity:
        result = self._expr()
        if self.pos != len(self.tokens):
            raise _Unfoldable("trailing tokens")
        return result

    def _peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _expr(self) -> Quantity:
        left = self._term()
        while self._peek() in ("+", "-"):
            op = self.tokens[self.pos]
            self.pos += 1
            right = self._term()
            if left.unit != right.unit:
                raise _Unfoldable("mixed units")
            value = left.value + right.value if op == "+" else left.value - right.value
            left = Quantity(value, left.unit)
        return left

    def _term(self) -> Quantity:
        left = self._factor()
        while self._peek() in ("*", "/"):
            op = self.tokens[self.pos]
            self.pos += 1
            right = self._factor()
            if op == "*":
                if left.unit and right.unit:
                    raise _Unfoldable("unit * unit")
                left = Quantity(left.value * right.value, left.unit or right.unit)
            else:
                if right.value == 0:
                    raise _Unfoldable("division by zero")
                if not right.unit:
                    left = Quantity(left.value / right.value, left.unit)
                elif left.unit == right.unit:
                    left = Quantity(left.value / right.value, "")
                else:
                    raise _Unfoldable("unit / unit")
        return left

    def _factor(self) -> Quantity:
        token = self._peek()
        if isinstance(token, Quantity):
            self.pos += 1
            return token
        if token == "(":
            self.pos += 1
            inner = self._expr()
            if self._peek() != ")":
                raise _Unfoldable("unbalanced parentheses")
            self.pos += 1
            return inner
        raise _Unfoldable(f"unexpected {token!r}")


def fold_expression(expr: str) -> str | None:
    """Reduce a calc() body to a single value, or None if it cannot be."""
    try:
        return str(_Evaluator(_tokenize(expr)).run())
    except _Unfoldable:
        return None


def fold_calc(value: str) -> str:
    """Fold every reducible ``calc()`` in a declaration value."""

    def fold(inner: str) -> str:
        folded = fold_expression(inner)
        return folded if folded is not None else f"calc({inner})"

    return replace_calls(value, "calc", fold)


class CalcStage(Stage):
    name = "calc"

    def apply(self, state: ChainState) -> None:
        sheet = state.require_sheet()
        for _owner, decl in iter_declarations(sheet.nodes):
            if not decl.is_custom_property and "calc(" in decl.value.lower():
                decl.value = fold_calc(decl.value)
