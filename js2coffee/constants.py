"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

DEFAULT_FILENAME = "input.js"
DEFAULT_INDENT = "  "

TREE_SITTER_LANGUAGE = "javascript"

# ── advisory render flags ────────────────────────────────────────

FLAG_BRACED = "braced"
FLAG_FINAL = "final"
FLAG_IMPLICIT_SELF = "implicit_self"
FLAG_STATEMENT = "statement"
FLAG_PARENS = "parens"
# Pass-made `undefined` that must render bare, never escaped.
FLAG_SYNTHETIC = "synthetic"

# ── node tags that own a scope ───────────────────────────────────

SCOPE_TYPES: frozenset[str] = frozenset(
    {"Program", "FunctionDeclaration", "FunctionExpression"}
)

FUNCTION_TYPES: frozenset[str] = frozenset(
    {"FunctionDeclaration", "FunctionExpression"}
)

STATEMENT_LIST_OWNERS: frozenset[str] = frozenset(
    {"Program", "BlockStatement", "SwitchCase"}
)

COMMENT_TYPES: frozenset[str] = frozenset({"BlockComment", "LineComment"})

CASE_TERMINATORS: frozenset[str] = frozenset(
    {"BreakStatement", "ReturnStatement", "ThrowStatement", "ContinueStatement"}
)

UNDEFINED = "undefined"
PROTOTYPE = "prototype"

# ── operators ────────────────────────────────────────────────────

STRICT_OPERATORS: dict[str, str] = {"===": "==", "!==": "!="}

COFFEE_OPERATORS: dict[str, str] = {"&&": "and", "||": "or", "in": "of"}

WORD_UNARY_OPERATORS: frozenset[str] = frozenset({"typeof", "delete", "void"})

BINARY_PRECEDENCE: dict[str, int] = {
    "||": 1,
    "&&": 2,
    "|": 3,
    "^": 4,
    "&": 5,
    "==": 6,
    "!=": 6,
    "===": 6,
    "!==": 6,
    "<": 7,
    ">": 7,
    "<=": 7,
    ">=": 7,
    "instanceof": 7,
    "in": 7,
    "<<": 8,
    ">>": 8,
    ">>>": 8,
    "+": 9,
    "-": 9,
    "*": 10,
    "/": 10,
    "%": 10,
}
