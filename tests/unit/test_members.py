"""Tests for MemberTransforms — implicit self and prototype access."""

from __future__ import annotations

from js2coffee import js2coffee, parse_js
from js2coffee.build_types import BuildOptions
from js2coffee.constants import FLAG_IMPLICIT_SELF, FLAG_PARENS
from js2coffee.transforms.members import MemberTransforms


def _rewrite(source: str):
    return MemberTransforms(BuildOptions(), source).run(parse_js(source))


class TestImplicitSelf:
    def test_this_member_is_flagged(self):
        expr = _rewrite("this.x;").body[0].expression
        assert FLAG_IMPLICIT_SELF in expr.flags

    def test_this_property(self):
        assert js2coffee("this.x = 1;") == "@x = 1\n"

    def test_this_computed(self):
        assert js2coffee("this[k] = 1;") == "@[k] = 1\n"

    def test_bare_this(self):
        assert js2coffee("x = this;") == "x = this\n"


class TestPrototype:
    def test_prototype_chain_collapses(self):
        expr = _rewrite("A.prototype.b;").body[0].expression
        assert expr.type == "CoffeePrototypeExpression"
        assert expr.object.name == "A"
        assert expr.property.name == "b"

    def test_prototype_assignment(self):
        assert js2coffee("A.prototype.b = function() {};") == "A::b = ->\n"

    def test_this_prototype(self):
        assert js2coffee("this.prototype.y;") == "@::y\n"

    def test_computed_prototype_is_left_alone(self):
        assert js2coffee("A.prototype[b];") == "A.prototype[b]\n"


class TestFunctionParens:
    def test_function_as_member_object(self):
        expr = _rewrite("(function() {}).call(this);").body[0].expression
        assert FLAG_PARENS in expr.callee.object.flags

    def test_function_call_member(self):
        assert js2coffee("(function() { a(); }).call(this);") == (
            "(->\n  a()\n).call this\n"
        )

    def test_immediately_invoked(self):
        assert js2coffee("(function() { a(); })();") == "(->\n  a()\n)()\n"
