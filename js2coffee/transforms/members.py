"""MemberTransforms — ``this.x`` → ``@x`` and ``X.prototype.y`` → ``X::y``."""

from __future__ import annotations

from ..nodes import Node
from ..traverse import TransformerBase
from .. import constants


def _is_prototype_hop(node: Node) -> bool:
    return (
        node.type == "MemberExpression"
        and not node.computed
        and node.property.type == "Identifier"
        and node.property.name == constants.PROTOTYPE
    )


class MemberTransforms(TransformerBase):
    def __init__(self, options, source=""):
        super().__init__(options, source)
        self._ENTER_DISPATCH.update(
            {
                "MemberExpression": self._enter_member,
                "CallExpression": self._enter_call,
            }
        )
        for tag in constants.STATEMENT_LIST_OWNERS:
            self._EXIT_DISPATCH[tag] = None

    def _enter_member(self, node: Node, parent: Node | None) -> Node | None:
        replacement = None
        if not node.computed and _is_prototype_hop(node.object):
            replacement = Node(
                "CoffeePrototypeExpression",
                node.loc,
                object=node.object.object,
                property=node.property,
            )
            node = replacement

        if node.object.type == "ThisExpression":
            node.flags.add(constants.FLAG_IMPLICIT_SELF)
        if node.object.type in constants.FUNCTION_TYPES:
            node.object.flags.add(constants.FLAG_PARENS)
        return replacement

    def _enter_call(self, node: Node, parent: Node | None) -> None:
        if node.callee.type in constants.FUNCTION_TYPES:
            node.callee.flags.add(constants.FLAG_PARENS)
