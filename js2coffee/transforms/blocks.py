"""BlockTransforms — splice nested blocks into their parent statement list."""

from __future__ import annotations

from ..nodes import Node, statement_list
from ..traverse import TransformerBase
from .. import constants


class BlockTransforms(TransformerBase):
    def __init__(self, options, source=""):
        super().__init__(options, source)
        for tag in constants.STATEMENT_LIST_OWNERS:
            self._EXIT_DISPATCH[tag] = self._flatten

    def _flatten(self, node: Node, parent: Node | None) -> None:
        # Exit rules run post-order, so nested blocks are already flat.
        flat: list[Node] = []
        for item in statement_list(node):
            if item.type == "BlockStatement":
                flat.extend(item.body)
            elif item.type != "EmptyStatement":
                flat.append(item)
        statement_list(node)[:] = flat
