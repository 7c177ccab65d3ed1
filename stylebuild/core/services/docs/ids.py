"""
Per-render identifier counter for the documentation template.

A fresh counter is created for every render, so ids restart at 1 and
two renders never share state.
"""

from __future__ import annotations


class IdCounter:
    """Monotonic counter: ``next_id()`` returns 1, 2, 3, …"""

    def __init__(self) -> None:
        self._value = 0

    def next_id(self) -> int:
        self._value += 1
        return self._value

    def current_id(self) -> int:
        return self._value
