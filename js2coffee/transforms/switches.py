"""SwitchTransforms — fold fall-through cases into multi-value ``when`` tests."""

from __future__ import annotations

import logging

from ..nodes import Node
from ..traverse import TransformerBase
from .. import constants

logger = logging.getLogger(__name__)


def _code_statements(statements: list[Node]) -> list[Node]:
    return [s for s in statements if s.type not in constants.COMMENT_TYPES]


def _is_terminated(case: Node) -> bool:
    statements = _code_statements(case.consequent)
    return bool(statements) and statements[-1].type in constants.CASE_TERMINATORS


def _strip_trailing_break(case: Node) -> None:
    for i in range(len(case.consequent) - 1, -1, -1):
        statement = case.consequent[i]
        if statement.type in constants.COMMENT_TYPES:
            continue
        if statement.type == "BreakStatement" and statement.label is None:
            del case.consequent[i]
        return


def _merged_test(tests: list[Node]) -> Node:
    if len(tests) == 1:
        return tests[0]
    return Node("CoffeeListExpression", None, expressions=tests)


class SwitchTransforms(TransformerBase):
    """Merges empty cases into the next non-empty one.

    ``case 1: case 2: f(); break;`` becomes a single case whose test is a
    ``CoffeeListExpression`` of ``1, 2``. Every non-default case must end in
    ``break``, ``return``, ``throw`` or ``continue`` at its top level.

    CoffeeScript only accepts ``else`` as the last clause, so a ``default``
    followed by other cases is moved to the end when it is terminated and
    rejected when it would fall through.
    """

    def __init__(self, options, source=""):
        super().__init__(options, source)
        self._ENTER_DISPATCH["SwitchStatement"] = self._consolidate

    def _consolidate(self, node: Node, parent: Node | None) -> None:
        cases: list[Node] = []
        pending_tests: list[Node] = []
        pending_comments: list[Node] = []
        default_case: Node | None = None
        default_moved = False

        for case in node.cases:
            if case.type in constants.COMMENT_TYPES:
                if pending_tests:
                    pending_comments.append(case)
                else:
                    cases.append(case)
                continue

            if case.test is None:
                if pending_tests:
                    logger.debug(
                        "Dropping %d fall-through tests into default",
                        len(pending_tests),
                    )
                pending_tests = []
                case.consequent[0:0] = pending_comments
                pending_comments = []
                default_case = case
                cases.append(case)
                continue

            if default_case is not None and not default_moved:
                self._detach_default(default_case, cases)
                default_moved = True

            statements = _code_statements(case.consequent)
            if not statements:
                pending_tests.append(case.test)
                pending_comments.extend(case.consequent)
                continue

            if statements[-1].type not in constants.CASE_TERMINATORS:
                raise self.syntax_error(
                    case, "switch case must end with break, return or throw"
                )

            if pending_tests:
                case.test = _merged_test(pending_tests + [case.test])
                pending_tests = []
            case.consequent[0:0] = pending_comments
            pending_comments = []
            _strip_trailing_break(case)
            cases.append(case)

        if default_moved and pending_tests:
            # These values must not reach the relocated default.
            cases.append(
                Node(
                    "SwitchCase",
                    pending_tests[0].loc,
                    test=_merged_test(pending_tests),
                    consequent=pending_comments,
                )
            )
            pending_comments = []
        elif pending_comments:
            # Trailing empty cases have nothing to fall into.
            cases.extend(pending_comments)
        if default_case is not None:
            _strip_trailing_break(default_case)
            if default_moved:
                cases.append(default_case)
        node.cases[:] = cases

    def _detach_default(self, default_case: Node, cases: list[Node]) -> None:
        if not _is_terminated(default_case):
            raise self.syntax_error(
                default_case,
                "'default' must be the last case unless it ends with break,"
                " return or throw",
            )
        logger.debug("Moving default clause to the end of the switch")
        cases[:] = [c for c in cases if c is not default_case]
