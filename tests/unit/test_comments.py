"""Tests for CommentTransforms — splicing comments into statement lists."""

from __future__ import annotations

from js2coffee import js2coffee, parse_js
from js2coffee.build_types import BuildOptions
from js2coffee.transforms.comments import CommentTransforms, rewrite_block_value


def _attach(source: str):
    program = parse_js(source)
    return CommentTransforms(BuildOptions(), source).run(program)


class TestPlacement:
    def test_comment_between_statements(self):
        program = _attach("a();\n// between\nb();\n")
        assert [s.type for s in program.body] == [
            "ExpressionStatement",
            "LineComment",
            "ExpressionStatement",
        ]
        assert program.body[1].value == " between"

    def test_leading_and_trailing_comments(self):
        program = _attach("// first\na();\n// last\n")
        assert [s.type for s in program.body] == [
            "LineComment",
            "ExpressionStatement",
            "LineComment",
        ]

    def test_comment_inside_function_stays_inside(self):
        program = _attach("function f() {\n  // hi\n  a();\n}\n")
        assert [s.type for s in program.body] == ["FunctionDeclaration"]
        assert [s.type for s in program.body[0].body.body] == [
            "LineComment",
            "ExpressionStatement",
        ]

    def test_comment_in_switch_case(self):
        program = _attach("switch (x) {\ncase 1:\n  // one\n  a();\n  break;\n}\n")
        consequent = program.body[0].cases[0].consequent
        assert consequent[0].type == "LineComment"

    def test_each_comment_placed_once(self):
        program = _attach("if (a) {\n  // inner\n  b();\n}\n// outer\nc();\n")
        assert [s.type for s in program.body] == [
            "IfStatement",
            "LineComment",
            "ExpressionStatement",
        ]
        inner = program.body[0].consequent.body
        assert [s.type for s in inner] == ["LineComment", "ExpressionStatement"]


class TestBlockValues:
    def test_single_line_untouched(self):
        assert rewrite_block_value(" plain ") == " plain "

    def test_star_prefixes_become_hashes(self):
        assert rewrite_block_value("*\n * Doc\n * more\n ") == "*\n# Doc\n# more\n"

    def test_indented_star_prefix(self):
        assert rewrite_block_value("*\n     * Doc\n     ") == "*\n# Doc\n"


class TestRendering:
    def test_line_comments(self):
        assert js2coffee("// one\na();\n// two\nb();\n") == "# one\na()\n# two\nb()\n"

    def test_doc_comment(self):
        assert js2coffee("/**\n * Doc\n */\nf();\n") == "###*\n# Doc\n###\nf()\n"

    def test_inline_block_comment(self):
        assert js2coffee("/* x */\na();\n") == "### x ###\na()\n"

    def test_comment_in_function_body(self):
        source = "function f() {\n  // hi\n  a();\n}\n"
        assert js2coffee(source) == "f = ->\n  # hi\n  a()\n"

    def test_comments_disabled(self):
        assert js2coffee("// one\na();\n", comments=False) == "a()\n"
