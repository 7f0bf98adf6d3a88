"""FunctionTransforms — hoist named functions to the top of their scope."""

from __future__ import annotations

import logging

from ..nodes import (
    Node,
    assignment_statement,
    empty_statement,
    identifier,
    statement_list,
)
from ..traverse import Scope, TransformerBase
from .. import constants

logger = logging.getLogger(__name__)


class FunctionTransforms(TransformerBase):
    """Rewrites ``function f() {}`` into ``f = ->`` placed before the scope body.

    Hoisting happens on exit of the function node, after its own scope has
    been popped, so the assignment lands in the enclosing scope's queue.
    Nested functions are therefore hoisted within their own scope first.
    Comments sitting directly above a declaration travel with it.
    """

    def __init__(self, options, source=""):
        super().__init__(options, source)
        self._ENTER_DISPATCH.update(
            {
                "FunctionDeclaration": self._drop_undefined_param,
                "FunctionExpression": self._drop_undefined_param,
            }
        )
        self._EXIT_DISPATCH.update(
            {
                "FunctionDeclaration": self._hoist_declaration,
                "FunctionExpression": self._hoist_expression,
            }
        )

    def on_scope_enter(self, scope: Scope) -> None:
        super().on_scope_enter(scope)
        self.ctx["prebody"] = []

    def on_scope_exit(self, scope: Scope) -> None:
        prebody = self.ctx["prebody"]
        if prebody:
            logger.debug("Hoisting %d functions", len(prebody))
            scope.body[0:0] = prebody
        super().on_scope_exit(scope)

    # ── rules ────────────────────────────────────────────────────

    def _drop_undefined_param(self, node: Node, parent: Node | None) -> None:
        for i, param in enumerate(node.params):
            if param.name != constants.UNDEFINED:
                continue
            if i != len(node.params) - 1:
                raise self.syntax_error(
                    param, "'undefined' is only allowed as the last parameter"
                )
            node.params.pop()

    def _hoist_declaration(self, node: Node, parent: Node | None) -> Node:
        self._take_leading_comments(node, parent)
        self._queue(node)
        return empty_statement()

    def _hoist_expression(self, node: Node, parent: Node | None) -> Node | None:
        if node.id is None:
            return None
        reference = identifier(node.id.name, node.loc)
        self._queue(node)
        return reference

    def _take_leading_comments(self, node: Node, parent: Node | None) -> None:
        """Move the comments directly above a declaration along with it."""
        if parent is None or parent.type not in constants.STATEMENT_LIST_OWNERS:
            return
        items = statement_list(parent)
        index = next((i for i, item in enumerate(items) if item is node), None)
        if index is None:
            return
        start = index
        while start > 0 and items[start - 1].type in constants.COMMENT_TYPES:
            start -= 1
        for i in range(start, index):
            self.ctx["prebody"].append(items[i])
            items[i] = empty_statement()

    def _queue(self, node: Node) -> None:
        function = Node(
            "FunctionExpression",
            node.loc,
            id=None,
            params=node.params,
            body=node.body,
        )
        function.flags |= node.flags
        name = identifier(node.id.name, node.id.loc)
        self.ctx["prebody"].append(assignment_statement(name, function, node.loc))
