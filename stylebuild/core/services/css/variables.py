"""
Variable resolution — substitutes ``var(--name[, fallback])`` with values.

Lookup order: custom properties declared in the same rule, then those
declared on ``:root``. Custom property declarations are removed once
every reference has been substituted.
"""

from __future__ import annotations

import re

from .base import ChainState, Stage
from .errors import UnresolvedVariableError
from .nodes import (
    AtRule,
    Declaration,
    Origin,
    Rule,
    iter_declarations,
    iter_rules,
    prune_empty,
    replace_calls,
    split_top_level,
)

_VAR_RE = re.compile(r"^\s*(--[-\w]+)\s*(?:,(.*))?$", re.DOTALL)


def collect_root_variables(nodes: list) -> dict[str, str]:
    """Custom properties declared on ``:root`` (later wins)."""
    variables: dict[str, str] = {}
    for rule in iter_rules(nodes):
        if any(s.strip() == ":root" for s in split_top_level(rule.selector)):
            for decl in rule.declarations():
                if decl.is_custom_property:
                    variables[decl.prop] = decl.value
    return variables


def resolve_value(
    value: str,
    scope: dict[str, str],
    origin: Origin | None = None,
    _stack: tuple[str, ...] = (),
) -> str:
    """Substitute every ``var()`` in *value* using *scope*.

    Raises:
        UnresolvedVariableError: On undefined variables without a
            fallback, and on circular references.
    """
    source = origin.source if origin else None
    line = origin.line if origin else None

    def substitute(inner: str) -> str:
        m = _VAR_RE.match(inner)
        if m is None:
            raise UnresolvedVariableError(f"malformed var({inner})", source=source, line=line)
        name, fallback = m.group(1), m.group(2)
        if name in _stack:
            chain = " -> ".join(_stack + (name,))
            raise UnresolvedVariableError(f"circular variable reference {chain}", source=source, line=line)
        if name in scope:
            return resolve_value(scope[name], scope, origin, _stack + (name,))
        if fallback is not None:
            return resolve_value(fallback.strip(), scope, origin, _stack)
        raise UnresolvedVariableError(
            f"variable '{name}' is undefined and used without a fallback",
            source=source, line=line,
        )

    return replace_calls(value, "var", substitute)


def _strip_custom_properties(nodes: list) -> None:
    for node in nodes:
        if isinstance(node, (Rule, AtRule)) and node.nodes:
            node.nodes = [
                n for n in node.nodes
                if not (isinstance(n, Declaration) and n.is_custom_property)
            ]
            _strip_custom_properties(node.nodes)


class VariablesStage(Stage):
    name = "variables"

    def apply(self, state: ChainState) -> None:
        sheet = state.require_sheet()
        root_vars = collect_root_variables(sheet.nodes)

        for owner, decl in iter_declarations(sheet.nodes):
            if decl.is_custom_property or "var(" not in decl.value.lower():
                continue
            local = {
                n.prop: n.value for n in owner.nodes or []
                if isinstance(n, Declaration) and n.is_custom_property
            }
            decl.value = resolve_value(decl.value, {**root_vars, **local}, owner.origin)

        _strip_custom_properties(sheet.nodes)
        sheet.nodes = prune_empty(sheet.nodes)
