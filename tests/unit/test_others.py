"""Tests for OtherTransforms — operators, literals, declarations and calls."""

from __future__ import annotations

import pytest

from js2coffee import build, js2coffee
from js2coffee.errors import UnsupportedConstructError


class TestOperators:
    def test_strict_equality(self):
        assert js2coffee("a === b;") == "a == b\n"

    def test_strict_inequality(self):
        assert js2coffee("a !== b;") == "a != b\n"

    def test_typeof_comparison(self):
        assert js2coffee('typeof x === "string";') == 'typeof x == "string"\n'


class TestUndefined:
    def test_void_becomes_undefined(self):
        assert js2coffee("x = void 0;") == "x = undefined\n"

    def test_undefined_identifier_is_escaped(self):
        assert js2coffee("x = undefined;") == "x = `undefined`\n"

    def test_undefined_property_name_is_not_escaped(self):
        assert js2coffee("x = a.undefined;") == "x = a.undefined\n"

    def test_declaration_without_init(self):
        assert js2coffee("var a;") == "a = undefined\n"

    def test_void_replacement_keeps_its_span(self):
        result = build("x = void 0;")
        assert result.code == "x = undefined\n"
        mapping = result.map.lookup(0, 4)
        assert (mapping.generated_col, mapping.source_col) == (4, 4)


class TestShadowing:
    def test_redeclaration_in_same_scope(self):
        result = build("var a = 1; var a = 2; var a = 3;")
        assert result.code == "`var a`\na = 1\na = 2\na = 3\n"
        assert len(result.warnings) == 1

    def test_redeclaration_of_enclosing_name(self):
        source = "var a = 1;\nx = function() { var a = 2; };"
        assert js2coffee(source) == "a = 1\nx = ->\n  `var a`\n  a = 2\n"

    def test_redeclaration_of_enclosing_parameter(self):
        source = "function f(a) { var g = function() { var a = 1; }; }"
        result = build(source)
        assert result.code == "f = (a) ->\n  g = ->\n    `var a`\n    a = 1\n"
        assert len(result.warnings) == 1

    def test_var_naming_own_parameter_is_same_binding(self):
        result = build("function f(a) { var a = 1; }")
        assert result.code == "f = (a) ->\n  a = 1\n"
        assert result.warnings == []

    def test_distinct_names_are_untouched(self):
        result = build("var a = 1; var b = 2;")
        assert result.code == "a = 1\nb = 2\n"
        assert result.warnings == []

    def test_for_in_variable_gets_no_initializer(self):
        assert js2coffee("for (var k in o) { f(k); }") == "for k of o\n  f k\n"


class TestRejected:
    def test_with(self):
        with pytest.raises(UnsupportedConstructError) as info:
            js2coffee("with (x) { y = 1; }")
        assert info.value.loc.start_line == 1
        assert info.value.loc.start_col == 0
        assert "with" in info.value.message

    def test_labeled_statement(self):
        with pytest.raises(UnsupportedConstructError, match="labeled"):
            js2coffee("outer: for (;;) { break outer; }")


class TestLiterals:
    def test_regex_starting_with_equals(self):
        assert js2coffee("x = /=a/g;") == 'x = new RegExp("=a", "g")\n'

    def test_plain_regex(self):
        assert js2coffee("x = /ab/;") == "x = /ab/\n"

    def test_interpolation_is_escaped(self):
        assert js2coffee('x = "#{a}";') == 'x = "\\#{a}"\n'

    def test_single_quotes_are_left_alone(self):
        assert js2coffee("x = '#{a}';") == "x = '#{a}'\n"


class TestCalls:
    def test_statement_call_is_bare(self):
        assert js2coffee("f(a, b);") == "f a, b\n"

    def test_call_without_arguments_keeps_parens(self):
        assert js2coffee("f();") == "f()\n"

    def test_nested_call_keeps_parens(self):
        assert js2coffee("f(g(x));") == "f g(x)\n"

    def test_expression_call_keeps_parens(self):
        assert js2coffee("x = f(a);") == "x = f(a)\n"

    def test_trailing_function_argument(self):
        assert js2coffee("run(function() { a(); });") == "run ->\n  a()\n"

    def test_leading_function_argument(self):
        assert js2coffee("setTimeout(function() { a(); }, 10);") == (
            "setTimeout (->\n  a()\n), 10\n"
        )
