"""Rewrite passes and the ordered pipeline that runs them."""

from __future__ import annotations

import logging

from ..build_types import BuildOptions
from ..nodes import Node
from ..traverse import TransformerBase, Walker
from .blocks import BlockTransforms
from .comments import CommentTransforms
from .functions import FunctionTransforms
from .loops import LoopTransforms
from .members import MemberTransforms
from .objects import ObjectTransforms
from .others import OtherTransforms
from .precedence import PrecedenceTransforms
from .switches import SwitchTransforms

logger = logging.getLogger(__name__)

# Each inner list shares one walk. Order matters: functions must be hoisted
# before the normalization bundle rewrites bodies in their new position,
# and flattening cleans up the blocks that loop lowering introduces.
PIPELINE: list[list[type[TransformerBase]]] = [
    [CommentTransforms],
    [FunctionTransforms],
    [
        PrecedenceTransforms,
        LoopTransforms,
        SwitchTransforms,
        MemberTransforms,
        ObjectTransforms,
        OtherTransforms,
    ],
    [BlockTransforms],
]


def bundles_for(options: BuildOptions) -> list[list[type[TransformerBase]]]:
    if options.comments:
        return PIPELINE
    return [bundle for bundle in PIPELINE if CommentTransforms not in bundle]


def run_transforms(
    program: Node, options: BuildOptions, source: str = ""
) -> tuple[Node, list[str]]:
    """Run every pass bundle over *program* in order.

    Returns:
        The rewritten program and the warnings the passes recorded.
    """
    warnings: list[str] = []
    for bundle in bundles_for(options):
        transformers = [cls(options, source) for cls in bundle]
        logger.debug("Running %s", ", ".join(cls.__name__ for cls in bundle))
        program = Walker(transformers).run(program)
        for transformer in transformers:
            warnings.extend(transformer.warnings)
    return program, warnings


__all__ = [
    "PIPELINE",
    "BlockTransforms",
    "CommentTransforms",
    "FunctionTransforms",
    "LoopTransforms",
    "MemberTransforms",
    "ObjectTransforms",
    "OtherTransforms",
    "PrecedenceTransforms",
    "SwitchTransforms",
    "bundles_for",
    "run_transforms",
]
