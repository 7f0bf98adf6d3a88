"""Tests for SwitchTransforms — fall-through consolidation and terminators."""

from __future__ import annotations

import pytest

from js2coffee import js2coffee, parse_js
from js2coffee.build_types import BuildOptions
from js2coffee.errors import UnsupportedConstructError
from js2coffee.transforms.switches import SwitchTransforms


def _consolidate(source: str):
    program = parse_js(source)
    return SwitchTransforms(BuildOptions(), source).run(program).body[0]


class TestConsolidation:
    def test_empty_cases_merge_into_list(self):
        switch = _consolidate("switch (x) { case 1: case 2: f(); break; }")
        assert len(switch.cases) == 1
        test = switch.cases[0].test
        assert test.type == "CoffeeListExpression"
        assert [e.raw for e in test.expressions] == ["1", "2"]

    def test_trailing_break_is_stripped(self):
        switch = _consolidate("switch (x) { case 1: f(); break; }")
        assert [s.type for s in switch.cases[0].consequent] == ["ExpressionStatement"]

    def test_return_is_kept(self):
        function = _consolidate("function g() { switch (x) { case 1: return 2; } }")
        switch = function.body.body[0]
        assert [s.type for s in switch.cases[0].consequent] == ["ReturnStatement"]

    def test_default_passes_through(self):
        switch = _consolidate("switch (x) { case 1: a(); break; default: b(); }")
        assert switch.cases[1].test is None
        assert len(switch.cases[1].consequent) == 1

    def test_when_count_matches_non_empty_cases(self):
        source = (
            "switch (x) { case 1: case 2: a(); break; case 3: b(); break;"
            " case 4: case 5: case 6: c(); break; }"
        )
        assert js2coffee(source).count("when ") == 3


class TestTerminators:
    def test_missing_terminator_is_an_error(self):
        with pytest.raises(UnsupportedConstructError) as info:
            js2coffee("switch (x) {\n  case 1: a();\n}")
        assert info.value.loc.start_line == 2

    def test_nested_break_does_not_count(self):
        with pytest.raises(UnsupportedConstructError):
            js2coffee("switch (x) { case 1: if (y) { break; } }")

    def test_throw_terminates(self):
        assert js2coffee("switch (x) { case 1: throw e; }") == (
            "switch x\n  when 1\n    throw e\n"
        )

    def test_default_needs_no_terminator(self):
        assert js2coffee("switch (x) { default: a(); }") == "switch x\n  else\n    a()\n"


class TestRendering:
    def test_fall_through_group(self):
        assert js2coffee("switch(x){case 1: case 2: f(); break;}") == (
            "switch x\n  when 1, 2\n    f()\n"
        )

    def test_default_clause(self):
        source = "switch (x) { case 1: a(); break; default: b(); }"
        assert js2coffee(source) == "switch x\n  when 1\n    a()\n  else\n    b()\n"

    def test_return_in_function(self):
        source = "function f(x) { switch (x) { case 1: return 2; } }"
        assert js2coffee(source) == "f = (x) ->\n  switch x\n    when 1\n      return 2\n"


class TestDefaultPlacement:
    def test_terminated_default_moves_to_the_end(self):
        source = "switch (x) { default: g(); break; case 1: h(); break; }"
        assert js2coffee(source) == "switch x\n  when 1\n    h()\n  else\n    g()\n"

    def test_moved_default_keeps_its_break_stripped(self):
        switch = _consolidate("switch (x) { default: g(); break; case 1: h(); break; }")
        assert [c.test is None for c in switch.cases] == [False, True]
        assert [s.type for s in switch.cases[1].consequent] == ["ExpressionStatement"]

    def test_empty_default_before_a_case_is_an_error(self):
        with pytest.raises(UnsupportedConstructError, match="'default' must be the last"):
            js2coffee("switch (x) { default: case 1: h(); break; }")

    def test_default_falling_through_is_an_error(self):
        with pytest.raises(UnsupportedConstructError) as info:
            js2coffee("switch (x) {\n  default: g();\n  case 1: h(); break;\n}")
        assert info.value.loc.start_line == 2

    def test_trailing_empty_case_after_moved_default_is_kept(self):
        source = "switch (x) { default: g(); break; case 1: }"
        assert js2coffee(source) == (
            "switch x\n  when 1\n    undefined\n  else\n    g()\n"
        )
