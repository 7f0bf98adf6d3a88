"""OtherTransforms — operator, literal, declaration and call normalization."""

from __future__ import annotations

import logging
import re

from ..nodes import (
    Node,
    SourceLocation,
    escaped,
    expression_statement,
    identifier,
    string_literal,
)
from ..traverse import Scope, TransformerBase
from .. import constants

logger = logging.getLogger(__name__)

_INTERPOLATION = re.compile(r"(?<!\\)#\{")


def _is_binding_site(node: Node, parent: Node | None) -> bool:
    """True when *node* names something rather than reads a value."""
    if parent is None:
        return False
    if parent.type in ("MemberExpression", "CoffeePrototypeExpression"):
        return parent.property is node and not getattr(parent, "computed", False)
    if parent.type == "Property":
        return parent.key is node
    if parent.type == "VariableDeclarator":
        return parent.id is node
    if parent.type in constants.FUNCTION_TYPES:
        return parent.id is node or any(p is node for p in parent.params)
    if parent.type == "CatchClause":
        return parent.param is node
    if parent.type == "AssignmentExpression":
        return parent.left is node
    return False


def _synthetic_undefined(loc: SourceLocation | None = None) -> Node:
    node = identifier(constants.UNDEFINED, loc)
    node.flags.add(constants.FLAG_SYNTHETIC)
    return node


class OtherTransforms(TransformerBase):
    """Assorted rewrites that need no cross-node bookkeeping beyond the scope.

    Re-declaring a name already bound in the current or an enclosing scope
    gets one escaped ``var name`` at the top of the scope, so the new
    binding stays local once the declaration keyword is gone. Parameters
    count as bindings for nested scopes; a ``var`` naming a parameter of
    its own function is the same binding.
    """

    def __init__(self, options, source=""):
        super().__init__(options, source)
        self._ENTER_DISPATCH.update(
            {
                "BinaryExpression": self._downgrade_strict_operator,
                "UnaryExpression": self._replace_void,
                "Identifier": self._escape_undefined,
                "VariableDeclaration": self._enter_declaration,
                "LabeledStatement": self._reject_labeled,
                "WithStatement": self._reject_with,
                "Literal": self._enter_literal,
                "ExpressionStatement": self._enter_statement,
                "CallExpression": self._enter_call,
                "NewExpression": self._enter_call,
            }
        )

    def on_scope_enter(self, scope: Scope) -> None:
        super().on_scope_enter(scope)
        self.ctx["preamble"] = []
        self.ctx["shadowed"] = set()
        params = {p.name for p in getattr(scope.node, "params", None) or ()}
        self.ctx["params"] = params
        scope.names.update(params)

    def on_scope_exit(self, scope: Scope) -> None:
        preamble = self.ctx["preamble"]
        if preamble:
            scope.body[0:0] = preamble
        super().on_scope_exit(scope)

    # ── operators ────────────────────────────────────────────────

    def _downgrade_strict_operator(self, node: Node, parent: Node | None) -> None:
        node.operator = constants.STRICT_OPERATORS.get(node.operator, node.operator)

    def _replace_void(self, node: Node, parent: Node | None) -> Node | None:
        if node.operator != "void":
            return None
        return _synthetic_undefined(node.loc)

    def _escape_undefined(self, node: Node, parent: Node | None) -> Node | None:
        if node.name != constants.UNDEFINED:
            return None
        if constants.FLAG_SYNTHETIC in node.flags:
            return None
        if _is_binding_site(node, parent):
            return None
        return escaped(constants.UNDEFINED, node.loc)

    # ── declarations ─────────────────────────────────────────────

    def _enter_declaration(self, node: Node, parent: Node | None) -> None:
        in_for_in = (
            parent is not None
            and parent.type == "ForInStatement"
            and parent.left is node
        )
        for declarator in node.declarations:
            self._record_name(declarator)
            if declarator.init is None and not in_for_in:
                declarator.init = _synthetic_undefined()

    def _record_name(self, declarator: Node) -> None:
        scope = self.scope
        if scope is None:
            return
        name = declarator.id.name
        if name in self.ctx["params"]:
            return
        if name not in scope.names:
            scope.names.add(name)
            return
        shadowed = self.ctx["shadowed"]
        if name in shadowed:
            return
        shadowed.add(name)
        self.ctx["preamble"].append(expression_statement(escaped(f"var {name}")))
        self.warn(declarator, f"'{name}' is declared again; emitting 'var {name}'")

    # ── rejected statements ──────────────────────────────────────

    def _reject_labeled(self, node: Node, parent: Node | None) -> None:
        raise self.syntax_error(node, "labeled statements are not supported")

    def _reject_with(self, node: Node, parent: Node | None) -> None:
        raise self.syntax_error(node, "'with' statements are not supported")

    # ── literals ─────────────────────────────────────────────────

    def _enter_literal(self, node: Node, parent: Node | None) -> Node | None:
        regex = getattr(node, "regex", None)
        if regex is not None:
            if not regex["pattern"].startswith("="):
                return None
            arguments = [string_literal(regex["pattern"])]
            if regex["flags"]:
                arguments.append(string_literal(regex["flags"]))
            return Node(
                "NewExpression",
                node.loc,
                callee=identifier("RegExp"),
                arguments=arguments,
            )
        raw = getattr(node, "raw", None)
        if isinstance(raw, str) and raw.startswith('"'):
            node.raw = _INTERPOLATION.sub(r"\\#{", raw)
        return None

    # ── calls ────────────────────────────────────────────────────

    def _enter_statement(self, node: Node, parent: Node | None) -> None:
        if node.expression.type == "CallExpression":
            node.expression.flags.add(constants.FLAG_STATEMENT)

    def _enter_call(self, node: Node, parent: Node | None) -> None:
        for argument in node.arguments[:-1]:
            if argument.type in constants.FUNCTION_TYPES:
                argument.flags.add(constants.FLAG_PARENS)
