"""
Selector scoping — namespaces every rule under a container class.

``.button`` becomes ``.winXP .button``. Selectors in the exception list
(compared as exact strings, so ``body > .x`` is not exempt) get the
class appended instead: ``body`` becomes ``body.winXP`` so a themed
surface keeps its own top-level styling.
"""

from __future__ import annotations

from collections.abc import Iterable

from .base import ChainState, Stage
from .nodes import Stylesheet, iter_rules, split_top_level

DEFAULT_EXCEPTIONS = ("body", ".surface")


def scope_selector(selector: str, prefix: str, exceptions: Iterable[str] = DEFAULT_EXCEPTIONS) -> str:
    """Scope one (comma-free) selector."""
    if selector in exceptions:
        return selector + prefix
    return f"{prefix} {selector}"


def scope_stylesheet(
    sheet: Stylesheet,
    prefix: str,
    exceptions: Iterable[str] = DEFAULT_EXCEPTIONS,
) -> None:
    exceptions = frozenset(exceptions)
    joiner = "," if sheet.minified else ", "
    # keyframe selectors (from, 50%) are not element selectors
    for rule in iter_rules(sheet.nodes, skip_keyframes=True):
        rule.selector = joiner.join(
            scope_selector(part.strip(), prefix, exceptions)
            for part in split_top_level(rule.selector)
        )


class ScopeStage(Stage):
    name = "scope"

    def __init__(self, prefix: str, exceptions: Iterable[str] = DEFAULT_EXCEPTIONS):
        self.prefix = prefix
        self.exceptions = tuple(exceptions)

    def apply(self, state: ChainState) -> None:
        scope_stylesheet(state.require_sheet(), self.prefix, self.exceptions)
