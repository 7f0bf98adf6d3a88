"""Tests for the traversal engine — dispatch, replacement, skipping and scopes."""

from __future__ import annotations

from js2coffee.build_types import BuildOptions
from js2coffee.errors import UnsupportedConstructError
from js2coffee.nodes import (
    Node,
    SourceLocation,
    block,
    empty_statement,
    expression_statement,
    identifier,
)
from js2coffee.traverse import SKIP, TransformerBase, Walker


def _program(*statements: Node) -> Node:
    return Node("Program", None, body=list(statements), comments=[])


def _function(*statements: Node) -> Node:
    return Node("FunctionExpression", None, id=None, params=[], body=block(list(statements)))


def _names(program: Node) -> list[str]:
    return [s.expression.name for s in program.body]


class _Recorder(TransformerBase):
    def __init__(self):
        super().__init__(BuildOptions())
        self.events: list[str] = []
        self._ENTER_DISPATCH["Identifier"] = self._enter_identifier
        self._EXIT_DISPATCH["ExpressionStatement"] = self._exit_statement

    def _enter_identifier(self, node, parent):
        self.events.append(f"enter {node.name}")

    def _exit_statement(self, node, parent):
        self.events.append(f"exit {node.expression.type}")


class TestDispatch:
    def test_enter_runs_before_exit(self):
        recorder = _Recorder()
        recorder.run(_program(expression_statement(identifier("a"))))
        assert recorder.events == ["enter a", "exit Identifier"]

    def test_children_visited_in_field_order(self):
        recorder = _Recorder()
        assign = Node(
            "AssignmentExpression",
            None,
            operator="=",
            left=identifier("left"),
            right=identifier("right"),
        )
        recorder.run(_program(expression_statement(assign)))
        assert recorder.events[:2] == ["enter left", "enter right"]

    def test_replacement_is_written_back(self):
        class Rename(TransformerBase):
            def __init__(self):
                super().__init__(BuildOptions())
                self._ENTER_DISPATCH["Identifier"] = lambda node, parent: identifier(
                    node.name.upper()
                )

        program = Rename().run(
            _program(expression_statement(identifier("a")), expression_statement(identifier("b")))
        )
        assert _names(program) == ["A", "B"]

    def test_exit_replacement_is_written_back(self):
        class Swap(TransformerBase):
            def __init__(self):
                super().__init__(BuildOptions())
                self._EXIT_DISPATCH["ExpressionStatement"] = (
                    lambda node, parent: expression_statement(identifier("swapped"))
                )

        program = Swap().run(_program(expression_statement(identifier("a"))))
        assert _names(program) == ["swapped"]

    def test_skip_prevents_descent(self):
        recorder = _Recorder()
        recorder._ENTER_DISPATCH["FunctionExpression"] = lambda node, parent: SKIP
        inner = expression_statement(identifier("inner"))
        outer = expression_statement(_function(inner))
        recorder.run(_program(outer, expression_statement(identifier("after"))))
        assert "enter inner" not in recorder.events
        assert "enter after" in recorder.events

    def test_parent_is_passed(self):
        seen = []

        class Parents(TransformerBase):
            def __init__(self):
                super().__init__(BuildOptions())
                self._ENTER_DISPATCH["Identifier"] = lambda node, parent: seen.append(
                    parent.type
                )

        Parents().run(_program(expression_statement(identifier("a"))))
        assert seen == ["ExpressionStatement"]


class TestListMutation:
    def test_removing_a_later_sibling_is_safe(self):
        visited = []

        class Remover(TransformerBase):
            def __init__(self):
                super().__init__(BuildOptions())
                self._ENTER_DISPATCH["ExpressionStatement"] = self._enter

            def _enter(self, node, parent):
                visited.append(node.expression.name)
                if node.expression.name == "a":
                    del parent.body[1]

        program = _program(
            expression_statement(identifier("a")),
            expression_statement(identifier("b")),
            expression_statement(identifier("c")),
        )
        Remover().run(program)
        assert visited == ["a", "c"]
        assert _names(program) == ["a", "c"]

    def test_inserting_before_the_current_item_does_not_revisit(self):
        visited = []

        class Inserter(TransformerBase):
            def __init__(self):
                super().__init__(BuildOptions())
                self._ENTER_DISPATCH["ExpressionStatement"] = self._enter

            def _enter(self, node, parent):
                visited.append(node.expression.name)
                if node.expression.name == "b":
                    parent.body.insert(0, expression_statement(identifier("new")))

        program = _program(
            expression_statement(identifier("a")),
            expression_statement(identifier("b")),
            expression_statement(identifier("c")),
        )
        Inserter().run(program)
        assert visited == ["a", "b", "c"]
        assert _names(program) == ["new", "a", "b", "c"]


class TestPlaceholders:
    def test_inherited_rule_drops_empty_statements(self):
        program = TransformerBase(BuildOptions()).run(
            _program(empty_statement(), expression_statement(identifier("a")))
        )
        assert [s.type for s in program.body] == ["ExpressionStatement"]

    def test_rule_can_be_disabled(self):
        class KeepPlaceholders(TransformerBase):
            def __init__(self):
                super().__init__(BuildOptions())
                self._EXIT_DISPATCH["Program"] = None

        program = KeepPlaceholders().run(_program(empty_statement()))
        assert [s.type for s in program.body] == ["EmptyStatement"]


class TestScopes:
    def test_scope_follows_functions(self):
        seen = []

        class Scopes(TransformerBase):
            def __init__(self):
                super().__init__(BuildOptions())
                self._ENTER_DISPATCH["Identifier"] = lambda node, parent: seen.append(
                    (node.name, self.scope.node.type, len(self.walker.scopes))
                )

        inner = expression_statement(identifier("inner"))
        Scopes().run(
            _program(
                expression_statement(identifier("top")),
                expression_statement(_function(inner)),
            )
        )
        assert seen == [("top", "Program", 1), ("inner", "FunctionExpression", 2)]

    def test_scope_body_is_the_live_statement_list(self):
        bodies = []

        class Bodies(TransformerBase):
            def on_scope_enter(self, scope):
                super().on_scope_enter(scope)
                bodies.append(scope.body)

        fn = _function(expression_statement(identifier("x")))
        program = _program(expression_statement(fn))
        Bodies(BuildOptions()).run(program)
        assert bodies[0] is program.body
        assert bodies[1] is fn.body.body

    def test_context_is_pushed_and_popped(self):
        depths = []

        class Context(TransformerBase):
            def __init__(self):
                super().__init__(BuildOptions())
                self._ENTER_DISPATCH["Identifier"] = lambda node, parent: depths.append(
                    self.ctx["depth"]
                )

            def on_scope_enter(self, scope):
                super().on_scope_enter(scope)
                self.ctx["depth"] = self.ctx.get("depth", 0) + 1

        transformer = Context()
        transformer.run(
            _program(
                expression_statement(_function(expression_statement(identifier("in")))),
                expression_statement(identifier("out")),
            )
        )
        assert depths == [2, 1]
        assert transformer._ctx_stack == [{}]

    def test_names_are_inherited_from_enclosing_scope(self):
        names = []

        class Names(TransformerBase):
            def on_scope_enter(self, scope):
                super().on_scope_enter(scope)
                names.append(set(scope.names))
                scope.names.add(scope.node.type)

        Names(BuildOptions()).run(
            _program(expression_statement(_function()))
        )
        assert names == [set(), {"Program"}]


class TestBundles:
    def test_later_pass_sees_replacement(self):
        seen = []

        class First(TransformerBase):
            def __init__(self):
                super().__init__(BuildOptions())
                self._ENTER_DISPATCH["Identifier"] = lambda node, parent: Node(
                    "ThisExpression", node.loc
                )

        class Second(TransformerBase):
            def __init__(self):
                super().__init__(BuildOptions())
                self._ENTER_DISPATCH["ThisExpression"] = lambda node, parent: seen.append(
                    node.type
                )

        Walker([First(), Second()]).run(_program(expression_statement(identifier("a"))))
        assert seen == ["ThisExpression"]


class TestDiagnostics:
    def test_syntax_error_carries_position_and_filename(self):
        transformer = TransformerBase(BuildOptions(filename="app.js"), "with (x) {}")
        loc = SourceLocation(start_line=1, start_col=0, end_line=1, end_col=11)
        error = transformer.syntax_error(Node("WithStatement", loc), "no with")
        assert isinstance(error, UnsupportedConstructError)
        assert error.message == "app.js:1:0: no with"
        assert "^" in error.excerpt()

    def test_warning_is_recorded(self):
        transformer = TransformerBase(BuildOptions())
        transformer.warn(identifier("a"), "careful")
        assert transformer.warnings == ["input.js: careful"]
