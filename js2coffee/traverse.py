"""Traversal engine — depth-first walker, scope stack, and the pass base class."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from .build_types import BuildOptions
from .errors import UnsupportedConstructError, format_message
from .nodes import Node, statement_list
from . import constants

logger = logging.getLogger(__name__)


class _Skip:
    """Returned by an enter rule to stop descent into the node's children."""

    def __repr__(self) -> str:
        return "SKIP"


SKIP = _Skip()


@dataclass
class Scope:
    """One program or function body seen during a walk."""

    node: Node
    body: list[Node]
    parent: Scope | None = None
    names: set[str] = field(default_factory=set)


def scope_body(node: Node) -> list[Node]:
    """Statement list of a scope-owning node (program body or function block)."""
    if node.type == "Program":
        return node.body
    return node.body.body


class Walker:
    """Runs a bundle of transformers over a tree in one depth-first walk.

    For every node, each transformer's enter rule for the node's tag runs in
    bundle order. A rule returning a ``Node`` replaces the current node (later
    rules and the descent see the replacement); returning ``SKIP`` prevents
    descent. Scope-owning nodes push a ``Scope`` between the enter rules and
    the children and pop it before the exit rules.
    """

    def __init__(self, transformers: list[TransformerBase]):
        self.transformers = transformers
        self.scopes: list[Scope] = []
        for transformer in transformers:
            transformer.walker = self

    @property
    def scope(self) -> Scope | None:
        return self.scopes[-1] if self.scopes else None

    def run(self, root: Node) -> Node:
        logger.debug(
            "Walking with %s", ", ".join(type(t).__name__ for t in self.transformers)
        )
        return self._visit(root, None)

    # ── traversal ────────────────────────────────────────────────

    def _visit(self, node: Node, parent: Node | None) -> Node:
        skip = False
        for transformer in self.transformers:
            rule = transformer._ENTER_DISPATCH.get(node.type)
            if rule is None:
                continue
            result = rule(node, parent)
            if result is SKIP:
                skip = True
            elif isinstance(result, Node):
                node = result

        owns_scope = node.type in constants.SCOPE_TYPES
        if owns_scope:
            self._push_scope(node)
        if not skip:
            self._visit_children(node)
        if owns_scope:
            self._pop_scope()

        for transformer in self.transformers:
            rule = transformer._EXIT_DISPATCH.get(node.type)
            if rule is None:
                continue
            result = rule(node, parent)
            if isinstance(result, Node):
                node = result
        return node

    def _visit_children(self, node: Node) -> None:
        for name in node.child_fields():
            value = getattr(node, name, None)
            if isinstance(value, list):
                self._visit_list(value, node)
            elif isinstance(value, Node):
                replacement = self._visit(value, node)
                if replacement is not value:
                    setattr(node, name, replacement)

    def _visit_list(self, items: list, parent: Node) -> None:
        # Rules may splice the list while we are inside it, so the position of
        # the current item is re-read after every visit.
        i = 0
        while i < len(items):
            child = items[i]
            if not isinstance(child, Node):
                i += 1
                continue
            replacement = self._visit(child, parent)
            pos = _index_of(items, child, i)
            if pos is None:
                continue
            if replacement is not child:
                items[pos] = replacement
            i = pos + 1

    # ── scopes ───────────────────────────────────────────────────

    def _push_scope(self, node: Node) -> None:
        parent = self.scope
        names = set(parent.names) if parent is not None else set()
        scope = Scope(node=node, body=scope_body(node), parent=parent, names=names)
        self.scopes.append(scope)
        for transformer in self.transformers:
            transformer.on_scope_enter(scope)

    def _pop_scope(self) -> None:
        scope = self.scopes[-1]
        for transformer in reversed(self.transformers):
            transformer.on_scope_exit(scope)
        self.scopes.pop()


def _index_of(items: list, child: Node, hint: int) -> int | None:
    if hint < len(items) and items[hint] is child:
        return hint
    for pos, item in enumerate(items):
        if item is child:
            return pos
    return None


class TransformerBase:
    """Base class for rewrite passes.

    Subclasses extend ``_ENTER_DISPATCH`` / ``_EXIT_DISPATCH`` in their
    ``__init__``. Mapping a tag to ``None`` disables an inherited rule.
    Every pass inherits an exit rule that drops ``EmptyStatement``
    placeholders from statement lists.
    """

    def __init__(self, options: BuildOptions, source: str = ""):
        self.options = options
        self.source = source
        self.warnings: list[str] = []
        self.walker: Walker | None = None
        self._ctx_stack: list[dict[str, Any]] = [{}]
        self._ENTER_DISPATCH: dict[str, Callable | None] = {}
        self._EXIT_DISPATCH: dict[str, Callable | None] = {
            tag: self._drop_placeholders for tag in constants.STATEMENT_LIST_OWNERS
        }

    # ── state ────────────────────────────────────────────────────

    @property
    def scope(self) -> Scope | None:
        return self.walker.scope if self.walker is not None else None

    @property
    def ctx(self) -> dict[str, Any]:
        return self._ctx_stack[-1]

    def on_scope_enter(self, scope: Scope) -> None:
        self._ctx_stack.append(dict(self.ctx))

    def on_scope_exit(self, scope: Scope) -> None:
        self._ctx_stack.pop()

    def run(self, root: Node) -> Node:
        """Walk *root* with this pass alone."""
        return Walker([self]).run(root)

    # ── diagnostics ──────────────────────────────────────────────

    def syntax_error(self, node: Node, description: str) -> UnsupportedConstructError:
        return UnsupportedConstructError(
            description, node.loc, self.options.filename, self.source
        )

    def warn(self, node: Node, description: str) -> None:
        message = format_message(description, node.loc, self.options.filename)
        self.warnings.append(message)
        logger.warning(message)

    # ── inherited rules ──────────────────────────────────────────

    def _drop_placeholders(self, node: Node, parent: Node | None) -> None:
        items = statement_list(node)
        items[:] = [item for item in items if item.type != "EmptyStatement"]
