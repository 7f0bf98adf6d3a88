"""LoopTransforms — lower C-style and do-while loops into while/loop forms."""

from __future__ import annotations

import logging

from ..nodes import Node, block, expression_statement
from ..traverse import TransformerBase
from .. import constants

logger = logging.getLogger(__name__)

_LOOP_TYPES: frozenset[str] = frozenset(
    {
        "ForStatement",
        "ForInStatement",
        "WhileStatement",
        "DoWhileStatement",
        "CoffeeLoopStatement",
    }
)


def _expression_statements(expression: Node) -> list[Node]:
    if expression.type == "SequenceExpression":
        return [expression_statement(e, e.loc) for e in expression.expressions]
    return [expression_statement(expression, expression.loc)]


def _body_block(body: Node | None, loc=None) -> Node:
    if body is None or body.type == "EmptyStatement":
        return block([], loc)
    if body.type == "BlockStatement":
        return body
    return block([body], body.loc)


def _contains_continue(node: Node) -> bool:
    """True if *node* holds a ``continue`` bound to the enclosing loop."""
    for child in node.children():
        if child.type == "ContinueStatement":
            return True
        if child.type in constants.FUNCTION_TYPES or child.type in _LOOP_TYPES:
            continue
        if _contains_continue(child):
            return True
    return False


def _is_true(node: Node | None) -> bool:
    return node is None or (node.type == "Literal" and node.value is True)


class LoopTransforms(TransformerBase):
    def __init__(self, options, source=""):
        super().__init__(options, source)
        self._ENTER_DISPATCH.update(
            {
                "ForStatement": self._lower_for,
                "WhileStatement": self._lower_while,
                "DoWhileStatement": self._lower_do_while,
            }
        )

    def _lower_for(self, node: Node, parent: Node | None) -> Node:
        """``for (init; test; update) body`` → ``init; while test { body; update }``."""
        statements: list[Node] = []
        if node.init is not None:
            if node.init.type == "VariableDeclaration":
                statements.append(node.init)
            else:
                statements.extend(_expression_statements(node.init))

        body = _body_block(node.body, node.loc)
        if node.update is not None:
            if _contains_continue(body):
                self.warn(node, "'continue' inside a for loop skips its update")
            body.body.extend(_expression_statements(node.update))

        loop = Node("WhileStatement", node.loc, test=node.test, body=body)
        statements.append(loop)
        return block(statements, node.loc)

    def _lower_while(self, node: Node, parent: Node | None) -> Node | None:
        if not _is_true(node.test):
            return None
        return Node(
            "CoffeeLoopStatement", node.loc, body=_body_block(node.body, node.loc)
        )

    def _lower_do_while(self, node: Node, parent: Node | None) -> Node:
        """``do body while (test)`` → ``loop body; break unless test``."""
        body = _body_block(node.body, node.loc)
        negated = Node(
            "UnaryExpression",
            node.test.loc,
            operator="!",
            argument=node.test,
            prefix=True,
        )
        exit_check = Node(
            "IfStatement",
            node.test.loc,
            test=negated,
            consequent=Node("BreakStatement", None, label=None),
            alternate=None,
        )
        body.body.append(exit_check)
        return Node("CoffeeLoopStatement", node.loc, body=body)
