"""Syntax tree model — tagged nodes, source spans, and detached comments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from pydantic import BaseModel


class SourceLocation(BaseModel):
    """Structured source span: 1-based lines, 0-based columns, byte offsets."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int
    start_offset: int = 0
    end_offset: int = 0

    def is_unknown(self) -> bool:
        return (
            self.start_line == 0
            and self.start_col == 0
            and self.end_line == 0
            and self.end_col == 0
        )

    def __str__(self) -> str:
        if self.is_unknown():
            return "<unknown>"
        return f"{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


NO_SOURCE_LOCATION = SourceLocation(start_line=0, start_col=0, end_line=0, end_col=0)


@dataclass
class Comment:
    """A comment lifted out of the token stream, not yet part of the tree."""

    kind: str  # "Block" or "Line"
    value: str
    loc: SourceLocation

    def to_dict(self) -> dict:
        return {"kind": self.kind, "value": self.value}


# Child fields per tag, in traversal order. This is the closed tag set:
# anything not listed here cannot be rendered.
NODE_FIELDS: dict[str, tuple[str, ...]] = {
    # statements
    "Program": ("body",),
    "ExpressionStatement": ("expression",),
    "BlockStatement": ("body",),
    "EmptyStatement": (),
    "DebuggerStatement": (),
    "WithStatement": ("object", "body"),
    "ReturnStatement": ("argument",),
    "LabeledStatement": ("label", "body"),
    "BreakStatement": ("label",),
    "ContinueStatement": ("label",),
    "IfStatement": ("test", "consequent", "alternate"),
    "SwitchStatement": ("discriminant", "cases"),
    "SwitchCase": ("test", "consequent"),
    "ThrowStatement": ("argument",),
    "TryStatement": ("block", "handler", "finalizer"),
    "CatchClause": ("param", "body"),
    "WhileStatement": ("test", "body"),
    "DoWhileStatement": ("body", "test"),
    "ForStatement": ("init", "test", "update", "body"),
    "ForInStatement": ("left", "right", "body"),
    "FunctionDeclaration": ("id", "params", "body"),
    "VariableDeclaration": ("declarations",),
    "VariableDeclarator": ("id", "init"),
    # expressions
    "ThisExpression": (),
    "ArrayExpression": ("elements",),
    "ObjectExpression": ("properties",),
    "Property": ("key", "value"),
    "FunctionExpression": ("id", "params", "body"),
    "SequenceExpression": ("expressions",),
    "UnaryExpression": ("argument",),
    "BinaryExpression": ("left", "right"),
    "AssignmentExpression": ("left", "right"),
    "UpdateExpression": ("argument",),
    "LogicalExpression": ("left", "right"),
    "ConditionalExpression": ("test", "consequent", "alternate"),
    "CallExpression": ("callee", "arguments"),
    "NewExpression": ("callee", "arguments"),
    "MemberExpression": ("object", "property"),
    "Identifier": (),
    "Literal": (),
    # introduced by the rewrite passes
    "CoffeeListExpression": ("expressions",),
    "CoffeeEscapedExpression": (),
    "CoffeePrototypeExpression": ("object", "property"),
    "CoffeeLoopStatement": ("body",),
    "BlockComment": (),
    "LineComment": (),
}


class Node:
    """A tagged tree node.

    Child fields are listed in ``NODE_FIELDS``; any other keyword becomes a
    plain attribute (``operator``, ``name``, ``raw`` ...). ``flags`` holds
    hints set by the passes, mostly read by the code generator.
    """

    def __init__(self, type: str, loc: SourceLocation | None = None, **attrs: Any):
        self.type = type
        self.loc = loc
        self.flags: set[str] = set()
        for name in NODE_FIELDS.get(type, ()):
            setattr(self, name, None)
        for name, value in attrs.items():
            setattr(self, name, value)

    def child_fields(self) -> tuple[str, ...]:
        return NODE_FIELDS.get(self.type, ())

    def children(self) -> Iterator[Node]:
        """Yield direct child nodes in traversal order."""
        for name in self.child_fields():
            value = getattr(self, name, None)
            if isinstance(value, list):
                yield from (item for item in value if isinstance(item, Node))
            elif isinstance(value, Node):
                yield value

    def to_dict(self, include_loc: bool = False) -> dict:
        d: dict[str, Any] = {"type": self.type}
        for key, value in vars(self).items():
            if key in ("type", "loc", "flags"):
                continue
            d[key] = _dump(value, include_loc)
        if self.flags:
            d["flags"] = sorted(self.flags)
        if include_loc and self.loc is not None:
            d["loc"] = str(self.loc)
        return d

    def __repr__(self) -> str:
        label = getattr(self, "name", None) or getattr(self, "operator", None)
        suffix = f" {label!r}" if label else ""
        return f"<Node {self.type}{suffix} @ {self.loc or '<synthetic>'}>"


def _dump(value: Any, include_loc: bool) -> Any:
    if isinstance(value, Node):
        return value.to_dict(include_loc)
    if isinstance(value, Comment):
        return value.to_dict()
    if isinstance(value, list):
        return [_dump(v, include_loc) for v in value]
    return value


# ── builders ─────────────────────────────────────────────────────


def identifier(name: str, loc: SourceLocation | None = None) -> Node:
    return Node("Identifier", loc, name=name)


def empty_statement(loc: SourceLocation | None = None) -> Node:
    return Node("EmptyStatement", loc)


def block(body: list[Node], loc: SourceLocation | None = None) -> Node:
    return Node("BlockStatement", loc, body=body)


def expression_statement(expression: Node, loc: SourceLocation | None = None) -> Node:
    return Node("ExpressionStatement", loc, expression=expression)


def assignment_statement(
    left: Node, right: Node, loc: SourceLocation | None = None
) -> Node:
    """Build ``left = right`` as a statement."""
    assign = Node("AssignmentExpression", loc, operator="=", left=left, right=right)
    return expression_statement(assign, loc)


def escaped(value: str, loc: SourceLocation | None = None) -> Node:
    return Node("CoffeeEscapedExpression", loc, value=value)


def string_literal(value: str) -> Node:
    raw = '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return Node("Literal", None, value=value, raw=raw, regex=None)


def statement_list(node: Node) -> list[Node]:
    """Return the mutable statement list owned by *node*."""
    if node.type == "SwitchCase":
        return node.consequent
    return node.body
