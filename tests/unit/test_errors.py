"""Tests for the CompileError hierarchy."""

from __future__ import annotations

from js2coffee.errors import (
    CompileError,
    ParseError,
    UnknownNodeError,
    UnsupportedConstructError,
    format_message,
)
from js2coffee.nodes import NO_SOURCE_LOCATION, SourceLocation

SOURCE = "a();\nb();\nwith (x) {}\n"
LOC = SourceLocation(start_line=3, start_col=0, end_line=3, end_col=11)


class TestMessage:
    def test_with_location(self):
        error = CompileError("bad", LOC, "x.js", SOURCE)
        assert error.message == "x.js:3:0: bad"
        assert str(error) == "x.js:3:0: bad"

    def test_without_location(self):
        assert CompileError("bad").message == "input.js: bad"

    def test_unknown_location_is_dropped(self):
        error = CompileError("bad", NO_SOURCE_LOCATION)
        assert error.loc is None
        assert error.message == "input.js: bad"

    def test_format_message(self):
        assert format_message("w", LOC, "f.js") == "f.js:3:0: w"


class TestExcerpt:
    def test_context_and_caret(self):
        error = CompileError("bad", LOC, "x.js", SOURCE)
        assert error.excerpt() == "1: a();\n2: b();\n3: with (x) {}\n   ^"

    def test_caret_follows_column(self):
        loc = SourceLocation(start_line=1, start_col=2, end_line=1, end_col=3)
        error = CompileError("bad", loc, source="abcd")
        assert error.excerpt(context=0) == "1: abcd\n     ^"

    def test_no_source_no_excerpt(self):
        assert CompileError("bad", LOC).excerpt() == ""


class TestHierarchy:
    def test_subclasses(self):
        for cls in (ParseError, UnsupportedConstructError, UnknownNodeError):
            assert issubclass(cls, CompileError)

    def test_to_dict(self):
        data = UnsupportedConstructError("bad", LOC, "x.js", SOURCE).to_dict()
        assert data["message"] == "x.js:3:0: bad"
        assert data["loc"]["start_line"] == 3
        assert data["filename"] == "x.js"
        assert data["excerpt"].endswith("^")
