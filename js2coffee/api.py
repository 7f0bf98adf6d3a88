"""Composable API functions for the JavaScript → CoffeeScript pipeline.

Each stage (parse, transform, generate) is callable on its own; ``build``
chains them and records timings.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from .build_types import BuildOptions, BuildResult, BuildStats
from .builder import CoffeeBuilder
from .estree import EstreeBuilder
from .fragments import SourceMap
from .nodes import Node
from .parser import Parser, TreeSitterParserFactory
from .transforms import bundles_for, run_transforms
from . import constants

logger = logging.getLogger(__name__)


def parse_js(source: str, filename: str = constants.DEFAULT_FILENAME) -> Node:
    """Parse JavaScript source into a ``Program`` node.

    Args:
        source: The JavaScript source text.
        filename: Label used in error messages.

    Returns:
        The ``Program`` node, with the source's comments on ``comments``.

    Raises:
        ParseError: The source does not parse.
        UnsupportedConstructError: The source uses syntax with no
            CoffeeScript counterpart (classes, arrow functions, ...).
    """
    tree = Parser(TreeSitterParserFactory()).parse(source)
    return EstreeBuilder(source, filename).build(tree)


def transform(
    program: Node, options: BuildOptions | None = None, source: str = ""
) -> tuple[Node, list[str]]:
    """Run the rewrite passes over *program* in place.

    Returns:
        The rewritten program and any warnings recorded along the way.
    """
    return run_transforms(program, options or BuildOptions(), source)


def generate(
    program: Node, options: BuildOptions | None = None, source: str = ""
) -> tuple[str, SourceMap]:
    """Render a rewritten program to CoffeeScript text and its source map."""
    return CoffeeBuilder(options or BuildOptions(), source).build(program)


def _run_pipeline(
    program_or_source: Node | str, source: str, options: BuildOptions
) -> BuildResult:
    stats = BuildStats(
        source_bytes=len(source.encode("utf-8")),
        source_lines=source.count("\n") + 1 if source else 0,
    )
    t_total = time.perf_counter()

    if isinstance(program_or_source, Node):
        program = program_or_source
    else:
        t0 = time.perf_counter()
        program = parse_js(source, options.filename)
        stats.parse_time = time.perf_counter() - t0

    t0 = time.perf_counter()
    program, warnings = transform(program, options, source)
    stats.transform_time = time.perf_counter() - t0
    stats.pass_count = sum(len(bundle) for bundle in bundles_for(options))

    t0 = time.perf_counter()
    code, source_map = generate(program, options, source)
    stats.generate_time = time.perf_counter() - t0

    stats.total_time = time.perf_counter() - t_total
    stats.output_lines = code.count("\n")
    stats.mapping_count = len(source_map.mappings)
    stats.warning_count = len(warnings)
    logger.info(
        "Built %s: %d lines → %d lines in %.1fms",
        options.filename,
        stats.source_lines,
        stats.output_lines,
        stats.total_time * 1000,
    )
    return BuildResult(
        code=code, map=source_map, ast=program, warnings=warnings, stats=stats
    )


def build(
    source: str,
    filename: str = constants.DEFAULT_FILENAME,
    comments: bool = True,
    indent: str = constants.DEFAULT_INDENT,
) -> BuildResult:
    """Translate JavaScript source to CoffeeScript.

    Args:
        source: The JavaScript source text.
        filename: Label for error messages and the source map.
        comments: When False, comments are dropped instead of carried over.
        indent: One level of output indentation.

    Returns:
        A BuildResult with the code, source map, rewritten tree, warnings
        and stage statistics.
    """
    options = BuildOptions(filename=filename, comments=comments, indent=indent)
    logger.info("Building %s (%d bytes)", filename, len(source))
    return _run_pipeline(source, source, options)


def build_tree(program: Node, source: str = "", **options: Any) -> BuildResult:
    """Translate an already-parsed ``Program`` node.

    Args:
        program: A tree in the shape ``parse_js`` produces. It is rewritten
            in place.
        source: Original text, used for error excerpts and the source map.
        **options: ``filename``, ``comments`` and ``indent``, as for ``build``.
    """
    return _run_pipeline(program, source, BuildOptions(**options))


def js2coffee(source: str, **options: Any) -> str:
    """Translate JavaScript source and return only the CoffeeScript text."""
    return build(source, **options).code
