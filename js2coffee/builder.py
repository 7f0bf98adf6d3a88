"""CoffeeBuilder — render a rewritten tree into CoffeeScript text and a source map."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Union

from .build_types import BuildOptions
from .errors import UnknownNodeError, UnsupportedConstructError
from .fragments import Fragment, SourceMap, assemble
from .nodes import Node, assignment_statement
from . import constants

logger = logging.getLogger(__name__)

Part = Union[str, Fragment]

# Binding strength, loosest first. Binary operators slot in between
# the conditional and unary levels via constants.BINARY_PRECEDENCE.
PREC_SEQUENCE = 0
PREC_ASSIGN = 1
PREC_CONDITIONAL = 2
_BINARY_OFFSET = 2
PREC_UNARY = 13
PREC_POSTFIX = 14
PREC_CALL = 15
PREC_PRIMARY = 16

PREC_ARGUMENT = PREC_CONDITIONAL + 1


def output_filename(filename: str) -> str:
    if filename.endswith(".js"):
        return filename[: -len(".js")] + ".coffee"
    return filename + ".coffee"


def _join(items: list[Part], separator: str) -> list[Part]:
    parts: list[Part] = []
    for i, item in enumerate(items):
        if i:
            parts.append(separator)
        parts.append(item)
    return parts


def _statements_of(node: Node | None) -> list[Node]:
    """Statements of a loop/if/try body, whatever shape the body has."""
    if node is None or node.type == "EmptyStatement":
        return []
    if node.type == "BlockStatement":
        return node.body
    return [node]


def _is_function(node: Node) -> bool:
    return node.type in constants.FUNCTION_TYPES


class CoffeeBuilder:
    """Renders each node to a ``Fragment`` and assembles them into text.

    Indentation is a level counter raised around nested bodies. Every
    fragment is tagged with its node's start position, which becomes a
    source map segment at assembly time. Tags with no renderer (including
    forms the passes should have lowered away) raise ``UnknownNodeError``.
    """

    def __init__(self, options: BuildOptions | None = None, source: str = ""):
        self.options = options or BuildOptions()
        self.source = source
        self._level = 0
        self._RENDER_DISPATCH: dict[str, Callable[[Node], list[Part]]] = {
            # statements
            "Program": self._render_program,
            "ExpressionStatement": self._render_expression_statement,
            "BlockStatement": self._render_block,
            "VariableDeclaration": self._render_var_declaration,
            "VariableDeclarator": self._render_declarator,
            "ReturnStatement": self._render_return,
            "ThrowStatement": self._render_throw,
            "BreakStatement": self._render_jump,
            "ContinueStatement": self._render_jump,
            "DebuggerStatement": self._render_debugger,
            "IfStatement": self._render_if,
            "WhileStatement": self._render_while,
            "CoffeeLoopStatement": self._render_loop,
            "ForInStatement": self._render_for_in,
            "SwitchStatement": self._render_switch,
            "SwitchCase": self._render_case,
            "TryStatement": self._render_try,
            "LineComment": self._render_line_comment,
            "BlockComment": self._render_block_comment,
            # expressions
            "Identifier": self._render_identifier,
            "Literal": self._render_literal,
            "ThisExpression": self._render_this,
            "ArrayExpression": self._render_array,
            "ObjectExpression": self._render_object,
            "Property": self._render_property,
            "FunctionExpression": self._render_function,
            "SequenceExpression": self._render_sequence,
            "UnaryExpression": self._render_unary,
            "BinaryExpression": self._render_binary,
            "LogicalExpression": self._render_binary,
            "AssignmentExpression": self._render_assignment,
            "UpdateExpression": self._render_update,
            "ConditionalExpression": self._render_conditional,
            "CallExpression": self._render_call,
            "NewExpression": self._render_new,
            "MemberExpression": self._render_member,
            "CoffeePrototypeExpression": self._render_prototype,
            "CoffeeEscapedExpression": self._render_escaped,
            "CoffeeListExpression": self._render_list,
        }

    # ── entry points ─────────────────────────────────────────────

    def build(self, program: Node) -> tuple[str, SourceMap]:
        fragment = self.render(program)
        source_map = SourceMap(
            file=output_filename(self.options.filename),
            source=self.options.filename,
            source_content=self.source,
        )
        code = assemble(fragment, source_map)
        logger.debug(
            "Generated %d chars with %d mappings", len(code), len(source_map.mappings)
        )
        return code, source_map

    def render(self, node: Node) -> Fragment:
        handler = self._RENDER_DISPATCH.get(node.type)
        if handler is None:
            raise UnknownNodeError(
                f"no renderer for node type '{node.type}'",
                node.loc,
                self.options.filename,
                self.source,
            )
        return Fragment(handler(node), node.loc)

    # ── layout helpers ───────────────────────────────────────────

    def _indent(self) -> str:
        return self.options.indent * self._level

    @contextmanager
    def _indented(self) -> Iterator[None]:
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    def _body(self, statements: list[Node], empty: str = "undefined") -> list[Part]:
        """Render *statements* one per line, one level deeper than the header."""
        statements = [s for s in statements if s.type != "EmptyStatement"]
        parts: list[Part] = []
        with self._indented():
            for statement in statements:
                parts += ["\n", self._indent(), self.render(statement)]
            if empty and all(s.type in constants.COMMENT_TYPES for s in statements):
                parts += ["\n", self._indent(), empty]
        return parts

    def _loop_body(self, statements: list[Node]) -> list[Part]:
        return self._body(statements, empty="continue")

    # ── precedence ───────────────────────────────────────────────

    def _precedence(self, node: Node) -> int:
        kind = node.type
        if kind == "AssignmentExpression":
            return PREC_ASSIGN
        if kind == "ConditionalExpression":
            return PREC_CONDITIONAL
        if kind in ("BinaryExpression", "LogicalExpression"):
            return constants.BINARY_PRECEDENCE.get(node.operator, 0) + _BINARY_OFFSET
        if kind == "UnaryExpression":
            return PREC_UNARY
        if kind == "UpdateExpression":
            return PREC_UNARY if node.prefix else PREC_POSTFIX
        if kind == "FunctionExpression":
            return PREC_PRIMARY if constants.FLAG_PARENS in node.flags else PREC_ASSIGN
        if kind == "ObjectExpression":
            count = len(node.properties)
            if count == 1 and constants.FLAG_BRACED not in node.flags:
                return PREC_ASSIGN
            if count > 1 and constants.FLAG_FINAL in node.flags:
                return PREC_ASSIGN
            return PREC_PRIMARY
        if kind == "NewExpression" and not node.arguments:
            return PREC_UNARY
        if kind in ("CallExpression", "NewExpression", "MemberExpression"):
            return PREC_CALL
        if kind == "CoffeePrototypeExpression":
            return PREC_CALL
        return PREC_PRIMARY

    def _expr(self, node: Node, min_prec: int = PREC_SEQUENCE) -> Fragment:
        fragment = self.render(node)
        if self._precedence(node) < min_prec:
            return Fragment(["(", fragment, ")"])
        return fragment

    def _argument(self, node: Node, min_prec: int = PREC_ARGUMENT) -> Fragment:
        # Functions and implicit objects read naturally as trailing arguments;
        # the passes flag the ones that need wrapping or braces.
        if _is_function(node) or node.type == "ObjectExpression":
            return self.render(node)
        return self._expr(node, min_prec)

    # ── statements ───────────────────────────────────────────────

    def _render_program(self, node: Node) -> list[Part]:
        parts: list[Part] = []
        for statement in node.body:
            if statement.type == "EmptyStatement":
                continue
            parts += [self.render(statement), "\n"]
        return parts

    def _render_expression_statement(self, node: Node) -> list[Part]:
        expression = node.expression
        if expression.type == "SequenceExpression":
            items: list[Part] = [self._expr(e) for e in expression.expressions]
            return _join(items, "\n" + self._indent())
        return [self._expr(expression)]

    def _render_block(self, node: Node) -> list[Part]:
        items: list[Part] = [
            self.render(s) for s in node.body if s.type != "EmptyStatement"
        ]
        return _join(items, "\n" + self._indent())

    def _render_var_declaration(self, node: Node) -> list[Part]:
        items: list[Part] = [self.render(d) for d in node.declarations]
        return _join(items, "\n" + self._indent())

    def _render_declarator(self, node: Node) -> list[Part]:
        if node.init is None:
            return [self.render(node.id)]
        return [self.render(node.id), " = ", self._expr(node.init, PREC_ASSIGN)]

    def _render_return(self, node: Node) -> list[Part]:
        if node.argument is None:
            return ["return"]
        return ["return ", self._expr(node.argument)]

    def _render_throw(self, node: Node) -> list[Part]:
        return ["throw ", self._expr(node.argument)]

    def _render_jump(self, node: Node) -> list[Part]:
        if node.label is not None:
            raise UnsupportedConstructError(
                "labeled break and continue are not supported",
                node.loc,
                self.options.filename,
                self.source,
            )
        return ["break" if node.type == "BreakStatement" else "continue"]

    def _render_debugger(self, node: Node) -> list[Part]:
        return ["debugger"]

    def _render_if(self, node: Node) -> list[Part]:
        parts: list[Part] = ["if ", self._expr(node.test)]
        parts += self._body(_statements_of(node.consequent))
        alternate = node.alternate
        if alternate is None:
            return parts
        if alternate.type == "IfStatement":
            parts += ["\n", self._indent(), "else ", self.render(alternate)]
        else:
            parts += ["\n", self._indent(), "else"]
            parts += self._body(_statements_of(alternate))
        return parts

    def _render_while(self, node: Node) -> list[Part]:
        return ["while ", self._expr(node.test)] + self._loop_body(
            _statements_of(node.body)
        )

    def _render_loop(self, node: Node) -> list[Part]:
        return ["loop"] + self._loop_body(_statements_of(node.body))

    def _render_for_in(self, node: Node) -> list[Part]:
        left = node.left
        statements = list(_statements_of(node.body))
        if left.type == "VariableDeclaration":
            name = self.render(left.declarations[0].id)
        else:
            name = self._expr(left, PREC_CALL)
            # Keep the loop variable visible in the enclosing scope.
            statements.insert(0, assignment_statement(left, left))
        parts: list[Part] = ["for ", name, " of ", self._expr(node.right)]
        return parts + self._loop_body(statements)

    def _render_switch(self, node: Node) -> list[Part]:
        parts: list[Part] = ["switch ", self._expr(node.discriminant)]
        with self._indented():
            for case in node.cases:
                parts += ["\n", self._indent(), self.render(case)]
        return parts

    def _render_case(self, node: Node) -> list[Part]:
        if node.test is None:
            header: list[Part] = ["else"]
        else:
            header = ["when ", self._expr(node.test, PREC_ARGUMENT)]
        return header + self._body(node.consequent)

    def _render_try(self, node: Node) -> list[Part]:
        parts: list[Part] = ["try"] + self._body(_statements_of(node.block))
        handler = node.handler
        if handler is not None:
            parts += ["\n", self._indent(), "catch"]
            if handler.param is not None:
                parts += [" ", self.render(handler.param)]
            parts += self._body(_statements_of(handler.body))
        if node.finalizer is not None:
            parts += ["\n", self._indent(), "finally"]
            parts += self._body(_statements_of(node.finalizer))
        return parts

    def _render_line_comment(self, node: Node) -> list[Part]:
        return ["#", node.value]

    def _render_block_comment(self, node: Node) -> list[Part]:
        lines = node.value.split("\n")
        parts: list[Part] = ["###", lines[0]]
        for line in lines[1:]:
            parts += ["\n", self._indent(), line]
        parts.append("###")
        return parts

    # ── expressions ──────────────────────────────────────────────

    def _render_identifier(self, node: Node) -> list[Part]:
        return [node.name]

    def _render_literal(self, node: Node) -> list[Part]:
        raw = getattr(node, "raw", None)
        if raw is not None:
            return [raw]
        value = node.value
        if value is None:
            return ["null"]
        if isinstance(value, bool):
            return ["true" if value else "false"]
        return [str(value)]

    def _render_this(self, node: Node) -> list[Part]:
        return ["this"]

    def _render_array(self, node: Node) -> list[Part]:
        items: list[Part] = [self._expr(e, PREC_ARGUMENT) for e in node.elements]
        return ["["] + _join(items, ", ") + ["]"]

    def _render_object(self, node: Node) -> list[Part]:
        properties = node.properties
        if not properties:
            return ["{}"]
        braced = constants.FLAG_BRACED in node.flags
        if len(properties) == 1 and not braced:
            return [self.render(properties[0])]
        if len(properties) == 1 and not _is_function(properties[0].value):
            return ["{ ", self.render(properties[0]), " }"]
        if constants.FLAG_FINAL in node.flags:
            items: list[Part] = [self.render(p) for p in properties]
            return _join(items, "\n" + self._indent())
        parts: list[Part] = ["{"]
        with self._indented():
            for prop in properties:
                parts += ["\n", self._indent(), self.render(prop)]
        parts += ["\n", self._indent(), "}"]
        return parts

    def _render_property(self, node: Node) -> list[Part]:
        return [self.render(node.key), ": ", self._expr(node.value, PREC_ASSIGN)]

    def _render_function(self, node: Node) -> list[Part]:
        parts: list[Part] = []
        if node.params:
            params: list[Part] = [self.render(p) for p in node.params]
            parts += ["("] + _join(params, ", ") + [") "]
        parts.append("->")
        statements = [s for s in _statements_of(node.body) if s.type != "EmptyStatement"]
        if statements:
            parts += self._body(statements, empty="")
        if constants.FLAG_PARENS in node.flags:
            closing = ["\n", self._indent(), ")"] if statements else [")"]
            return ["("] + parts + closing
        return parts

    def _render_sequence(self, node: Node) -> list[Part]:
        items: list[Part] = [self._expr(e, PREC_ASSIGN) for e in node.expressions]
        return ["("] + _join(items, "; ") + [")"]

    def _render_unary(self, node: Node) -> list[Part]:
        operator = node.operator
        argument = node.argument
        if operator in constants.WORD_UNARY_OPERATORS:
            return [operator, " ", self._expr(argument, PREC_UNARY)]
        inner = self._expr(argument, PREC_UNARY)
        # Keep "- -x" and "+ ++x" from fusing into another operator.
        if operator in ("-", "+") and str(inner).startswith(operator):
            inner = Fragment(["(", inner, ")"])
        return [operator, inner]

    def _render_binary(self, node: Node) -> list[Part]:
        precedence = self._precedence(node)
        operator = constants.COFFEE_OPERATORS.get(node.operator, node.operator)
        return [
            self._expr(node.left, precedence),
            f" {operator} ",
            self._expr(node.right, precedence + 1),
        ]

    def _render_assignment(self, node: Node) -> list[Part]:
        return [
            self._expr(node.left, PREC_CALL),
            f" {node.operator} ",
            self._expr(node.right, PREC_ASSIGN),
        ]

    def _render_update(self, node: Node) -> list[Part]:
        if node.prefix:
            return [node.operator, self._expr(node.argument, PREC_POSTFIX)]
        return [self._expr(node.argument, PREC_CALL), node.operator]

    def _render_conditional(self, node: Node) -> list[Part]:
        return [
            "if ",
            self._expr(node.test, PREC_ARGUMENT),
            " then ",
            self._expr(node.consequent, PREC_ARGUMENT),
            " else ",
            self._expr(node.alternate, PREC_CONDITIONAL),
        ]

    def _arguments(self, node: Node, enclosed: bool = True) -> list[Part]:
        last = len(node.arguments) - 1
        items: list[Part] = []
        for i, argument in enumerate(node.arguments):
            # The closing paren ends a trailing inline "if".
            min_prec = PREC_ASSIGN if enclosed and i == last else PREC_ARGUMENT
            items.append(self._argument(argument, min_prec))
        return _join(items, ", ")

    def _render_call(self, node: Node) -> list[Part]:
        callee = self._expr(node.callee, PREC_CALL)
        if constants.FLAG_STATEMENT in node.flags and node.arguments:
            return [callee, " "] + self._arguments(node, enclosed=False)
        return [callee, "("] + self._arguments(node) + [")"]

    def _render_new(self, node: Node) -> list[Part]:
        if node.callee.type == "CallExpression":
            callee = Fragment(["(", self.render(node.callee), ")"])
        else:
            callee = self._expr(node.callee, PREC_CALL)
        if not node.arguments:
            return ["new ", callee]
        return ["new ", callee, "("] + self._arguments(node) + [")"]

    def _member_object(self, node: Node) -> Fragment:
        raw = getattr(node, "raw", None)
        if node.type == "Literal" and isinstance(raw, str) and raw.isdigit():
            return Fragment(["(", self.render(node), ")"])
        return self._expr(node, PREC_CALL)

    def _render_member(self, node: Node) -> list[Part]:
        implicit = (
            constants.FLAG_IMPLICIT_SELF in node.flags
            and node.object.type == "ThisExpression"
        )
        if node.computed:
            prefix: list[Part] = ["@"] if implicit else [self._member_object(node.object)]
            return prefix + ["[", self._expr(node.property), "]"]
        if implicit:
            return ["@", self.render(node.property)]
        return [self._member_object(node.object), ".", self.render(node.property)]

    def _render_prototype(self, node: Node) -> list[Part]:
        if node.object.type == "ThisExpression":
            return ["@::", self.render(node.property)]
        return [self._member_object(node.object), "::", self.render(node.property)]

    def _render_escaped(self, node: Node) -> list[Part]:
        return ["`", node.value, "`"]

    def _render_list(self, node: Node) -> list[Part]:
        items: list[Part] = [self._expr(e, PREC_ARGUMENT) for e in node.expressions]
        return _join(items, ", ")
