"""Fragments — nested, position-tagged output pieces and source map assembly."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Union

from .nodes import SourceLocation

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VLQ_SHIFT = 5
_VLQ_CONTINUATION = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_CONTINUATION - 1


@dataclass
class Fragment:
    """Output text pieces, optionally tagged with the originating node's start."""

    parts: list[Union[str, Fragment]] = field(default_factory=list)
    loc: SourceLocation | None = None

    def __str__(self) -> str:
        return "".join(str(p) for p in self.parts)


@dataclass(frozen=True)
class Mapping:
    """One output position (0-based line/col) mapped back to the input."""

    generated_line: int
    generated_col: int
    source_line: int
    source_col: int


def encode_vlq(value: int) -> str:
    """Base64 VLQ encoding of a signed integer, as used by source maps."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        out.append(_BASE64[digit])
        if not vlq:
            return "".join(out)


@dataclass
class SourceMap:
    """Output → input position map, serializable as a version 3 source map."""

    file: str
    source: str
    source_content: str = ""
    mappings: list[Mapping] = field(default_factory=list)

    def add(self, generated_line: int, generated_col: int, loc: SourceLocation) -> None:
        mapping = Mapping(generated_line, generated_col, loc.start_line - 1, loc.start_col)
        last = self.mappings[-1] if self.mappings else None
        if (
            last is not None
            and last.generated_line == generated_line
            and last.generated_col == generated_col
        ):
            return
        self.mappings.append(mapping)

    def lookup(self, generated_line: int, generated_col: int) -> Mapping | None:
        """Closest mapping at or before the given output position on that line."""
        best = None
        for mapping in self.mappings:
            if mapping.generated_line != generated_line:
                continue
            if mapping.generated_col <= generated_col:
                best = mapping
        return best

    def encode_mappings(self) -> str:
        lines: list[str] = []
        previous_source_line = 0
        previous_source_col = 0
        by_line: dict[int, list[Mapping]] = {}
        for mapping in self.mappings:
            by_line.setdefault(mapping.generated_line, []).append(mapping)
        last_line = max(by_line) if by_line else -1
        for line in range(last_line + 1):
            previous_col = 0
            segments = []
            for mapping in by_line.get(line, []):
                segment = (
                    encode_vlq(mapping.generated_col - previous_col)
                    + encode_vlq(0)
                    + encode_vlq(mapping.source_line - previous_source_line)
                    + encode_vlq(mapping.source_col - previous_source_col)
                )
                segments.append(segment)
                previous_col = mapping.generated_col
                previous_source_line = mapping.source_line
                previous_source_col = mapping.source_col
            lines.append(",".join(segments))
        return ";".join(lines)

    def to_dict(self) -> dict:
        return {
            "version": 3,
            "file": self.file,
            "sources": [self.source],
            "sourcesContent": [self.source_content],
            "names": [],
            "mappings": self.encode_mappings(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def assemble(root: Fragment, source_map: SourceMap) -> str:
    """Flatten *root* depth-first into text, recording mappings as it goes."""
    chunks: list[str] = []
    line = 0
    col = 0
    stack: list[Union[str, Fragment]] = [root]
    while stack:
        item = stack.pop()
        if isinstance(item, Fragment):
            if item.loc is not None and not item.loc.is_unknown():
                source_map.add(line, col, item.loc)
            stack.extend(reversed(item.parts))
            continue
        if not item:
            continue
        chunks.append(item)
        newlines = item.count("\n")
        if newlines:
            line += newlines
            col = len(item) - item.rfind("\n") - 1
        else:
            col += len(item)
    return "".join(chunks)
