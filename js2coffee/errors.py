"""Compile errors — one structured failure value per compilation."""

from __future__ import annotations

from .nodes import SourceLocation
from . import constants


def format_message(
    description: str, loc: SourceLocation | None, filename: str
) -> str:
    """Prefix *description* with `filename:line:col` when a location is known."""
    if loc is None or loc.is_unknown():
        return f"{filename}: {description}"
    return f"{filename}:{loc.start_line}:{loc.start_col}: {description}"


class CompileError(Exception):
    """A fatal translation error carrying position and source context.

    ``message`` reads ``<filename>:<line>:<col>: <description>``; when the
    offending node is synthetic (no location) the position part is omitted.
    """

    def __init__(
        self,
        description: str,
        loc: SourceLocation | None = None,
        filename: str = constants.DEFAULT_FILENAME,
        source: str = "",
    ):
        self.description = description
        self.loc = loc if loc is not None and not loc.is_unknown() else None
        self.filename = filename
        self.source = source
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return format_message(self.description, self.loc, self.filename)

    def excerpt(self, context: int = 2) -> str:
        """Render the offending line with up to *context* preceding lines and a caret."""
        if self.loc is None or not self.source:
            return ""
        lines = self.source.splitlines()
        line_no = self.loc.start_line
        if line_no > len(lines):
            return ""
        first = max(1, line_no - context)
        width = len(str(line_no))
        out = [f"{n:>{width}}: {lines[n - 1]}" for n in range(first, line_no + 1)]
        out.append(" " * (width + 2 + self.loc.start_col) + "^")
        return "\n".join(out)

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "description": self.description,
            "filename": self.filename,
            "loc": self.loc.model_dump() if self.loc else None,
            "excerpt": self.excerpt(),
        }


class ParseError(CompileError):
    """The external parser rejected the input."""


class UnsupportedConstructError(CompileError):
    """The input uses a construct CoffeeScript cannot express."""


class UnknownNodeError(CompileError):
    """A node tag reached the generator that no renderer handles."""
