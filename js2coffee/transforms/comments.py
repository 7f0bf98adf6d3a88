"""CommentTransforms — splice detached comments into statement and case lists."""

from __future__ import annotations

import bisect
import logging
import math
import re

from ..nodes import Comment, Node
from ..traverse import TransformerBase

logger = logging.getLogger(__name__)

_STAR_PREFIX = re.compile(r"^\s*\*")


def rewrite_block_value(value: str) -> str:
    """Turn ``/** ... */`` line prefixes into ``#`` markers."""
    lines = value.split("\n")
    if len(lines) == 1:
        return value
    out = [lines[0]]
    for i, line in enumerate(lines[1:], start=1):
        if i == len(lines) - 1 and not line.strip():
            out.append("")
        else:
            out.append(_STAR_PREFIX.sub("#", line, count=1))
    return "\n".join(out)


def comment_node(comment: Comment) -> Node:
    if comment.kind == "Block":
        return Node("BlockComment", comment.loc, value=rewrite_block_value(comment.value))
    return Node("LineComment", comment.loc, value=comment.value)


class CommentTransforms(TransformerBase):
    """Places each comment before the first list item that follows it.

    Every statement list is merged against the range-sorted comment list in
    one left-to-right sweep. A comment is claimed only if it lies wholly in
    the gap between two items (or after the last item, inside the
    container), so comments nested inside an item are left for that item's
    own lists.
    """

    def __init__(self, options, source=""):
        super().__init__(options, source)
        self._comments: list[Comment] = []
        self._starts: list[int] = []
        self._placed: set[int] = set()
        self._ENTER_DISPATCH.update(
            {
                "Program": self._enter_program,
                "BlockStatement": self._enter_block,
                "SwitchStatement": self._enter_switch,
                "SwitchCase": self._enter_case,
            }
        )

    def _enter_program(self, node: Node, parent: Node | None) -> None:
        self._comments = list(getattr(node, "comments", None) or [])
        self._starts = [c.loc.start_offset for c in self._comments]
        self._placed = set()
        self._merge(node.body, 0, math.inf)

    def _enter_block(self, node: Node, parent: Node | None) -> None:
        if node.loc is not None:
            self._merge(node.body, node.loc.start_offset, node.loc.end_offset)

    def _enter_switch(self, node: Node, parent: Node | None) -> None:
        if node.loc is None:
            return
        left = node.loc.start_offset
        if node.discriminant is not None and node.discriminant.loc is not None:
            left = node.discriminant.loc.end_offset
        self._merge(node.cases, left, node.loc.end_offset)

    def _enter_case(self, node: Node, parent: Node | None) -> None:
        if node.loc is None:
            return
        left = node.loc.start_offset
        if node.test is not None and node.test.loc is not None:
            left = node.test.loc.end_offset
        self._merge(node.consequent, left, node.loc.end_offset)

    def _merge(self, items: list[Node], left: float, right: float) -> None:
        if len(self._placed) == len(self._comments):
            return
        merged: list[Node] = []
        for item in items:
            if item.loc is None:
                merged.append(item)
                continue
            merged.extend(self._take(left, item.loc.start_offset))
            merged.append(item)
            left = max(left, item.loc.end_offset)
        merged.extend(self._take(left, right))
        if len(merged) != len(items):
            logger.debug("Placed %d comments", len(merged) - len(items))
            items[:] = merged

    def _take(self, left: float, right: float) -> list[Node]:
        """Claim every unplaced comment lying wholly inside [left, right)."""
        taken = []
        i = bisect.bisect_left(self._starts, left)
        while i < len(self._comments) and self._starts[i] < right:
            comment = self._comments[i]
            if i not in self._placed and comment.loc.end_offset <= right:
                self._placed.add(i)
                taken.append(comment_node(comment))
            i += 1
        return taken
