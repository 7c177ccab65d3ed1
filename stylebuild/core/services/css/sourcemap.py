"""
Source map v3 writer.

Mappings are recorded as ``(generated line, generated column) → Origin``
while the renderer writes text, then encoded with base64 VLQ.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from .nodes import Origin

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"


def encode_vlq(value: int) -> str:
    """Encode one signed integer as a base64 VLQ digit string."""
    vlq = ((-value) << 1) | 1 if value < 0 else value << 1
    digits = []
    while True:
        digit = vlq & 0x1F
        vlq >>= 5
        if vlq:
            digit |= 0x20
        digits.append(_BASE64[digit])
        if not vlq:
            return "".join(digits)


class SourceMapBuilder:
    """Collects mappings for one generated file.

    Args:
        file: Generated file name, as written in the map's ``file`` field.
        map_dir: Directory the map is written to; ``sources`` are
            relative to it.
    """

    def __init__(self, file: str, map_dir: Path):
        self.file = file
        self.map_dir = map_dir
        self._sources: list[str] = []
        self._source_index: dict[str, int] = {}
        self._mappings: list[tuple[int, int, int, int, int]] = []

    @property
    def sources(self) -> list[str]:
        return list(self._sources)

    def add(self, gen_line: int, gen_col: int, origin: Origin) -> None:
        """Map a 0-based generated position to an origin (1-based line)."""
        idx = self._source_index.get(origin.source)
        if idx is None:
            idx = len(self._sources)
            self._sources.append(origin.source)
            self._source_index[origin.source] = idx
        self._mappings.append((gen_line, gen_col, idx, max(origin.line - 1, 0), origin.column))

    def encode_mappings(self) -> str:
        lines: list[str] = []
        prev_source = prev_line = prev_col = 0
        current_line = 0
        segments: list[str] = []
        prev_gen_col = 0

        for gen_line, gen_col, source, line, col in sorted(self._mappings):
            while current_line < gen_line:
                lines.append(",".join(segments))
                segments = []
                prev_gen_col = 0
                current_line += 1
            segments.append(
                encode_vlq(gen_col - prev_gen_col)
                + encode_vlq(source - prev_source)
                + encode_vlq(line - prev_line)
                + encode_vlq(col - prev_col)
            )
            prev_gen_col, prev_source, prev_line, prev_col = gen_col, source, line, col

        lines.append(",".join(segments))
        return ";".join(lines)

    def to_json(self, contents: dict[str, str] | None = None) -> str:
        """Serialize the map, embedding ``sourcesContent`` when available."""
        contents = contents or {}
        data: dict = {
            "version": 3,
            "sources": [self._relative(s) for s in self._sources],
            "names": [],
            "mappings": self.encode_mappings(),
            "file": self.file,
        }
        if contents:
            data["sourcesContent"] = [contents.get(s) for s in self._sources]
        return json.dumps(data)

    def _relative(self, source: str) -> str:
        try:
            rel = os.path.relpath(source, self.map_dir)
        except ValueError:  # different drive on Windows
            rel = source
        return Path(rel).as_posix()
