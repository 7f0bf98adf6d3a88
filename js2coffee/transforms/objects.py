"""ObjectTransforms — decide which object literals keep their braces."""

from __future__ import annotations

from ..nodes import Node
from ..traverse import TransformerBase
from .. import constants


def _brace(node: Node | None) -> None:
    if node is not None and node.type == "ObjectExpression":
        node.flags.add(constants.FLAG_BRACED)


class ObjectTransforms(TransformerBase):
    """Flags object literals whose implicit-brace form would be ambiguous.

    An object standing alone as a statement is braced, unless it is the last
    statement of its scope, where it is flagged final and laid out as bare
    ``key: value`` lines. Objects inside arrays, objects returned, and
    objects passed before the last call argument are always braced.
    """

    def __init__(self, options, source=""):
        super().__init__(options, source)
        self._ENTER_DISPATCH.update(
            {
                "ExpressionStatement": self._enter_statement,
                "ArrayExpression": self._enter_array,
                "ReturnStatement": self._enter_return,
                "CallExpression": self._enter_call,
                "NewExpression": self._enter_call,
            }
        )

    def _enter_statement(self, node: Node, parent: Node | None) -> None:
        expression = node.expression
        if expression.type != "ObjectExpression":
            return
        scope = self.scope
        if scope is not None and scope.body and scope.body[-1] is node:
            expression.flags.add(constants.FLAG_FINAL)
        else:
            expression.flags.add(constants.FLAG_BRACED)

    def _enter_array(self, node: Node, parent: Node | None) -> None:
        for element in node.elements:
            _brace(element)

    def _enter_return(self, node: Node, parent: Node | None) -> None:
        _brace(node.argument)

    def _enter_call(self, node: Node, parent: Node | None) -> None:
        for argument in node.arguments[:-1]:
            _brace(argument)
