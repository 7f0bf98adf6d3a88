"""PrecedenceTransforms — placeholder pass; parentheses are decided at render time."""

from __future__ import annotations

from ..traverse import TransformerBase


class PrecedenceTransforms(TransformerBase):
    """Runs no rules of its own.

    It shares a walk with the other normalization passes, so the inherited
    placeholder cleanup is switched off here to keep it from running twice.
    """

    def __init__(self, options, source=""):
        super().__init__(options, source)
        for tag in list(self._EXIT_DISPATCH):
            self._EXIT_DISPATCH[tag] = None
