"""EstreeBuilder — tree-sitter JavaScript CST → ESTree-shaped ``Node`` tree."""

from __future__ import annotations

import logging
from typing import Callable

from .errors import ParseError, UnsupportedConstructError
from .nodes import Comment, Node, SourceLocation, identifier
from . import constants

logger = logging.getLogger(__name__)

_SKIPPED_TYPES: frozenset[str] = frozenset({"comment", "hash_bang_line"})

# Friendlier names for constructs CoffeeScript (or this translator) rejects.
_UNSUPPORTED_NAMES: dict[str, str] = {
    "arrow_function": "arrow functions",
    "class": "classes",
    "class_declaration": "classes",
    "template_string": "template strings",
    "spread_element": "spread arguments",
    "await_expression": "await",
    "yield_expression": "yield",
    "generator_function": "generator functions",
    "generator_function_declaration": "generator functions",
    "import_statement": "import statements",
    "export_statement": "export statements",
    "super": "super",
    "object_pattern": "destructuring",
    "array_pattern": "destructuring",
}


class EstreeBuilder:
    """Adapts a tree-sitter JavaScript parse tree into the translator's node model.

    Like the frontends it is modelled on, conversion is driven by two dispatch
    tables keyed on tree-sitter node types. Any node type missing from both
    tables is rejected as unsupported syntax.
    """

    def __init__(self, source: str, filename: str = constants.DEFAULT_FILENAME):
        self._text = source
        self._source = source.encode("utf-8")
        self._filename = filename
        self._STMT_DISPATCH: dict[str, Callable[..., Node]] = {
            "expression_statement": self._build_expression_statement,
            "variable_declaration": self._build_var_declaration,
            "lexical_declaration": self._build_var_declaration,
            "function_declaration": self._build_function_declaration,
            "statement_block": self._build_block,
            "if_statement": self._build_if,
            "while_statement": self._build_while,
            "do_statement": self._build_do_while,
            "for_statement": self._build_for,
            "for_in_statement": self._build_for_in,
            "switch_statement": self._build_switch,
            "try_statement": self._build_try,
            "return_statement": self._build_return,
            "throw_statement": self._build_throw,
            "break_statement": self._build_jump,
            "continue_statement": self._build_jump,
            "labeled_statement": self._build_labeled,
            "with_statement": self._build_with,
            "debugger_statement": self._build_debugger,
            "empty_statement": self._build_empty,
        }
        self._EXPR_DISPATCH: dict[str, Callable[..., Node]] = {
            "identifier": self._build_identifier,
            "undefined": self._build_identifier,
            "number": self._build_literal,
            "string": self._build_string,
            "regex": self._build_regex,
            "true": self._build_keyword_literal,
            "false": self._build_keyword_literal,
            "null": self._build_keyword_literal,
            "this": self._build_this,
            "parenthesized_expression": self._build_paren,
            "array": self._build_array,
            "object": self._build_object,
            "function_expression": self._build_function_expression,
            "function": self._build_function_expression,
            "member_expression": self._build_member,
            "subscript_expression": self._build_subscript,
            "call_expression": self._build_call,
            "new_expression": self._build_new,
            "binary_expression": self._build_binary,
            "unary_expression": self._build_unary,
            "update_expression": self._build_update,
            "assignment_expression": self._build_assignment,
            "augmented_assignment_expression": self._build_assignment,
            "ternary_expression": self._build_ternary,
            "sequence_expression": self._build_sequence,
        }

    # ── helpers ──────────────────────────────────────────────────

    def _node_text(self, node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8")

    def _loc(self, node) -> SourceLocation:
        s, e = node.start_point, node.end_point
        return SourceLocation(
            start_line=s[0] + 1,
            start_col=s[1],
            end_line=e[0] + 1,
            end_col=e[1],
            start_offset=node.start_byte,
            end_offset=node.end_byte,
        )

    def _named(self, node) -> list:
        return [c for c in node.named_children if c.type not in _SKIPPED_TYPES]

    def _unsupported(self, node, what: str = "") -> UnsupportedConstructError:
        what = what or _UNSUPPORTED_NAMES.get(node.type, f"'{node.type}'")
        return UnsupportedConstructError(
            f"{what} not supported", self._loc(node), self._filename, self._text
        )

    def _reject_optional_chain(self, node):
        if any(c.type in ("optional_chain", "?.") for c in node.children):
            raise self._unsupported(node, "optional chaining")

    # ── entry point ──────────────────────────────────────────────

    def build(self, tree) -> Node:
        root = tree.root_node
        if root.has_error:
            raise self._syntax_error(root)
        comments = sorted(
            self._collect_comments(root), key=lambda c: c.loc.start_offset
        )
        program = Node(
            "Program",
            self._loc(root),
            body=self._build_statements(root.named_children),
            comments=comments,
        )
        logger.debug(
            "Built program: %d statements, %d comments",
            len(program.body),
            len(comments),
        )
        return program

    def _syntax_error(self, root) -> ParseError:
        culprit = self._first_error(root) or root
        if culprit.is_missing:
            description = f"Missing '{culprit.type}'"
        else:
            snippet = self._node_text(culprit).strip().splitlines()
            token = snippet[0][:20] if snippet else ""
            description = f"Unexpected token {token!r}" if token else "Syntax error"
        return ParseError(description, self._loc(culprit), self._filename, self._text)

    def _first_error(self, node):
        if node.type == "ERROR" or node.is_missing:
            return node
        for child in node.children:
            if child.has_error or child.is_missing:
                found = self._first_error(child)
                if found is not None:
                    return found
        return None

    def _collect_comments(self, root) -> list[Comment]:
        comments: list[Comment] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "comment":
                text = self._node_text(node)
                if text.startswith("/*"):
                    comments.append(Comment("Block", text[2:-2], self._loc(node)))
                else:
                    comments.append(Comment("Line", text[2:], self._loc(node)))
                continue
            stack.extend(reversed(node.children))
        return comments

    # ── dispatchers ──────────────────────────────────────────────

    def _build_statements(self, nodes) -> list[Node]:
        return [self._stmt(c) for c in nodes if c.type not in _SKIPPED_TYPES]

    def _stmt(self, node) -> Node:
        handler = self._STMT_DISPATCH.get(node.type)
        if handler is None:
            raise self._unsupported(node)
        return handler(node)

    def _expr(self, node) -> Node:
        handler = self._EXPR_DISPATCH.get(node.type)
        if handler is None:
            raise self._unsupported(node)
        return handler(node)

    def _opt_expr(self, node) -> Node | None:
        return self._expr(node) if node is not None else None

    # ── statements ───────────────────────────────────────────────

    def _build_expression_statement(self, node) -> Node:
        inner = self._named(node)[0]
        return Node("ExpressionStatement", self._loc(node), expression=self._expr(inner))

    def _build_var_declaration(self, node) -> Node:
        if node.type == "lexical_declaration":
            kind_node = node.child_by_field_name("kind")
            kind = self._node_text(kind_node) if kind_node else "let"
        else:
            kind = "var"
        declarations = [
            self._build_declarator(c)
            for c in node.named_children
            if c.type == "variable_declarator"
        ]
        return Node(
            "VariableDeclaration", self._loc(node), declarations=declarations, kind=kind
        )

    def _build_declarator(self, node) -> Node:
        name_node = node.child_by_field_name("name")
        if name_node.type not in ("identifier", "undefined"):
            raise self._unsupported(name_node)
        return Node(
            "VariableDeclarator",
            self._loc(node),
            id=self._build_identifier(name_node),
            init=self._opt_expr(node.child_by_field_name("value")),
        )

    def _build_function_declaration(self, node) -> Node:
        self._reject_async(node)
        return Node(
            "FunctionDeclaration",
            self._loc(node),
            id=self._build_identifier(node.child_by_field_name("name")),
            params=self._build_params(node.child_by_field_name("parameters")),
            body=self._build_block(node.child_by_field_name("body")),
        )

    def _build_block(self, node) -> Node:
        return Node(
            "BlockStatement",
            self._loc(node),
            body=self._build_statements(node.named_children),
        )

    def _build_if(self, node) -> Node:
        alternative = node.child_by_field_name("alternative")
        alternate = None
        if alternative is not None:
            alternate = self._stmt(self._named(alternative)[0])
        return Node(
            "IfStatement",
            self._loc(node),
            test=self._expr(node.child_by_field_name("condition")),
            consequent=self._stmt(node.child_by_field_name("consequence")),
            alternate=alternate,
        )

    def _build_while(self, node) -> Node:
        return Node(
            "WhileStatement",
            self._loc(node),
            test=self._expr(node.child_by_field_name("condition")),
            body=self._stmt(node.child_by_field_name("body")),
        )

    def _build_do_while(self, node) -> Node:
        return Node(
            "DoWhileStatement",
            self._loc(node),
            body=self._stmt(node.child_by_field_name("body")),
            test=self._expr(node.child_by_field_name("condition")),
        )

    def _build_for(self, node) -> Node:
        """Lower for(init; cond; update), tolerating both grammar generations."""
        init_node = node.child_by_field_name("initializer")
        cond_node = node.child_by_field_name("condition")
        update_node = node.child_by_field_name("increment") or node.child_by_field_name(
            "update"
        )

        init = None
        if init_node is not None:
            if init_node.type in ("variable_declaration", "lexical_declaration"):
                init = self._stmt(init_node)
            elif init_node.type == "expression_statement":
                init = self._named(init_node)[0]
                init = self._expr(init)
            elif init_node.type not in ("empty_statement", ";"):
                init = self._expr(init_node)

        test = None
        if cond_node is not None:
            if cond_node.type == "expression_statement":
                test = self._expr(self._named(cond_node)[0])
            elif cond_node.type not in ("empty_statement", ";"):
                test = self._expr(cond_node)

        return Node(
            "ForStatement",
            self._loc(node),
            init=init,
            test=test,
            update=self._opt_expr(update_node),
            body=self._stmt(node.child_by_field_name("body")),
        )

    def _build_for_in(self, node) -> Node:
        operator = node.child_by_field_name("operator")
        if operator is not None and self._node_text(operator) == "of":
            raise self._unsupported(node, "for...of loops")
        kind_node = node.child_by_field_name("kind")
        left_node = node.child_by_field_name("left")
        if kind_node is not None:
            if left_node.type != "identifier":
                raise self._unsupported(left_node)
            declarator = Node(
                "VariableDeclarator",
                self._loc(left_node),
                id=self._build_identifier(left_node),
                init=None,
            )
            left = Node(
                "VariableDeclaration",
                self._loc(left_node),
                declarations=[declarator],
                kind=self._node_text(kind_node),
            )
        else:
            left = self._expr(left_node)
        return Node(
            "ForInStatement",
            self._loc(node),
            left=left,
            right=self._expr(node.child_by_field_name("right")),
            body=self._stmt(node.child_by_field_name("body")),
        )

    def _build_switch(self, node) -> Node:
        body = node.child_by_field_name("body")
        cases = [
            self._build_case(c)
            for c in body.named_children
            if c.type in ("switch_case", "switch_default")
        ]
        return Node(
            "SwitchStatement",
            self._loc(node),
            discriminant=self._expr(node.child_by_field_name("value")),
            cases=cases,
        )

    def _build_case(self, node) -> Node:
        value = node.child_by_field_name("value")
        statements = [
            c
            for c in node.named_children
            if c.type not in _SKIPPED_TYPES and (value is None or c != value)
        ]
        return Node(
            "SwitchCase",
            self._loc(node),
            test=self._opt_expr(value),
            consequent=self._build_statements(statements),
        )

    def _build_try(self, node) -> Node:
        handler = None
        catch_node = node.child_by_field_name("handler")
        if catch_node is not None:
            param_node = catch_node.child_by_field_name("parameter")
            if param_node is not None and param_node.type != "identifier":
                raise self._unsupported(param_node)
            handler = Node(
                "CatchClause",
                self._loc(catch_node),
                param=self._opt_expr(param_node),
                body=self._build_block(catch_node.child_by_field_name("body")),
            )
        finalizer = None
        finally_node = node.child_by_field_name("finalizer")
        if finally_node is not None:
            finalizer = self._build_block(finally_node.child_by_field_name("body"))
        return Node(
            "TryStatement",
            self._loc(node),
            block=self._build_block(node.child_by_field_name("body")),
            handler=handler,
            finalizer=finalizer,
        )

    def _build_return(self, node) -> Node:
        named = self._named(node)
        argument = self._expr(named[0]) if named else None
        return Node("ReturnStatement", self._loc(node), argument=argument)

    def _build_throw(self, node) -> Node:
        return Node(
            "ThrowStatement", self._loc(node), argument=self._expr(self._named(node)[0])
        )

    def _build_jump(self, node) -> Node:
        tag = "BreakStatement" if node.type == "break_statement" else "ContinueStatement"
        label_node = node.child_by_field_name("label")
        label = None
        if label_node is not None:
            label = identifier(self._node_text(label_node), self._loc(label_node))
        return Node(tag, self._loc(node), label=label)

    def _build_labeled(self, node) -> Node:
        label_node = node.child_by_field_name("label")
        body_node = node.child_by_field_name("body") or self._named(node)[-1]
        return Node(
            "LabeledStatement",
            self._loc(node),
            label=identifier(self._node_text(label_node), self._loc(label_node)),
            body=self._stmt(body_node),
        )

    def _build_with(self, node) -> Node:
        return Node(
            "WithStatement",
            self._loc(node),
            object=self._expr(node.child_by_field_name("object")),
            body=self._stmt(node.child_by_field_name("body")),
        )

    def _build_debugger(self, node) -> Node:
        return Node("DebuggerStatement", self._loc(node))

    def _build_empty(self, node) -> Node:
        return Node("EmptyStatement", self._loc(node))

    # ── functions ────────────────────────────────────────────────

    def _reject_async(self, node):
        if any(c.type == "async" for c in node.children):
            raise self._unsupported(node, "async functions")
        if any(c.type == "*" for c in node.children):
            raise self._unsupported(node, "generator functions")

    def _build_params(self, node) -> list[Node]:
        params = []
        for child in self._named(node):
            if child.type not in ("identifier", "undefined"):
                raise self._unsupported(child, "non-simple parameters")
            params.append(self._build_identifier(child))
        return params

    def _build_function_expression(self, node) -> Node:
        self._reject_async(node)
        name_node = node.child_by_field_name("name")
        return Node(
            "FunctionExpression",
            self._loc(node),
            id=self._build_identifier(name_node) if name_node else None,
            params=self._build_params(node.child_by_field_name("parameters")),
            body=self._build_block(node.child_by_field_name("body")),
        )

    # ── expressions ──────────────────────────────────────────────

    def _build_identifier(self, node) -> Node:
        return identifier(self._node_text(node), self._loc(node))

    def _build_literal(self, node) -> Node:
        text = self._node_text(node)
        return Node("Literal", self._loc(node), value=text, raw=text, regex=None)

    def _build_string(self, node) -> Node:
        text = self._node_text(node)
        return Node("Literal", self._loc(node), value=text[1:-1], raw=text, regex=None)

    def _build_regex(self, node) -> Node:
        text = self._node_text(node)
        pattern = node.child_by_field_name("pattern")
        flags = node.child_by_field_name("flags")
        regex = {
            "pattern": self._node_text(pattern) if pattern else "",
            "flags": self._node_text(flags) if flags else "",
        }
        return Node("Literal", self._loc(node), value=text, raw=text, regex=regex)

    def _build_keyword_literal(self, node) -> Node:
        text = self._node_text(node)
        value = {"true": True, "false": False, "null": None}[text]
        return Node("Literal", self._loc(node), value=value, raw=text, regex=None)

    def _build_this(self, node) -> Node:
        return Node("ThisExpression", self._loc(node))

    def _build_paren(self, node) -> Node:
        named = self._named(node)
        if len(named) == 1:
            return self._expr(named[0])
        return Node(
            "SequenceExpression",
            self._loc(node),
            expressions=[self._expr(c) for c in named],
        )

    def _build_array(self, node) -> Node:
        previous = "["
        for child in node.children:
            if child.type == "," and previous in ("[", ","):
                raise self._unsupported(node, "array holes")
            if child.type not in _SKIPPED_TYPES:
                previous = child.type
        return Node(
            "ArrayExpression",
            self._loc(node),
            elements=[self._expr(c) for c in self._named(node)],
        )

    def _build_object(self, node) -> Node:
        properties = [self._build_property(c) for c in self._named(node)]
        return Node("ObjectExpression", self._loc(node), properties=properties)

    def _build_property(self, node) -> Node:
        if node.type == "pair":
            return Node(
                "Property",
                self._loc(node),
                key=self._build_key(node.child_by_field_name("key")),
                value=self._expr(node.child_by_field_name("value")),
                kind="init",
            )
        if node.type == "shorthand_property_identifier":
            return Node(
                "Property",
                self._loc(node),
                key=self._build_identifier(node),
                value=self._build_identifier(node),
                kind="init",
            )
        if node.type == "method_definition":
            if any(c.type in ("get", "set") for c in node.children):
                raise self._unsupported(node, "getters and setters")
            self._reject_async(node)
            function = Node(
                "FunctionExpression",
                self._loc(node),
                id=None,
                params=self._build_params(node.child_by_field_name("parameters")),
                body=self._build_block(node.child_by_field_name("body")),
            )
            return Node(
                "Property",
                self._loc(node),
                key=self._build_key(node.child_by_field_name("name")),
                value=function,
                kind="init",
            )
        raise self._unsupported(node)

    def _build_key(self, node) -> Node:
        if node.type == "property_identifier":
            return self._build_identifier(node)
        if node.type == "string":
            return self._build_string(node)
        if node.type == "number":
            return self._build_literal(node)
        raise self._unsupported(node, "computed property names")

    def _build_member(self, node) -> Node:
        self._reject_optional_chain(node)
        prop = node.child_by_field_name("property")
        if prop.type == "private_property_identifier":
            raise self._unsupported(prop, "private fields")
        return Node(
            "MemberExpression",
            self._loc(node),
            object=self._expr(node.child_by_field_name("object")),
            property=self._build_identifier(prop),
            computed=False,
        )

    def _build_subscript(self, node) -> Node:
        self._reject_optional_chain(node)
        return Node(
            "MemberExpression",
            self._loc(node),
            object=self._expr(node.child_by_field_name("object")),
            property=self._expr(node.child_by_field_name("index")),
            computed=True,
        )

    def _build_arguments(self, node) -> list[Node]:
        if node is None:
            return []
        if node.type != "arguments":
            raise self._unsupported(node)
        return [self._expr(c) for c in self._named(node)]

    def _build_call(self, node) -> Node:
        self._reject_optional_chain(node)
        return Node(
            "CallExpression",
            self._loc(node),
            callee=self._expr(node.child_by_field_name("function")),
            arguments=self._build_arguments(node.child_by_field_name("arguments")),
        )

    def _build_new(self, node) -> Node:
        return Node(
            "NewExpression",
            self._loc(node),
            callee=self._expr(node.child_by_field_name("constructor")),
            arguments=self._build_arguments(node.child_by_field_name("arguments")),
        )

    def _operator(self, node) -> str:
        op_node = node.child_by_field_name("operator")
        return self._node_text(op_node)

    def _build_binary(self, node) -> Node:
        operator = self._operator(node)
        if operator == "??":
            raise self._unsupported(node, "nullish coalescing")
        tag = "LogicalExpression" if operator in ("&&", "||") else "BinaryExpression"
        return Node(
            tag,
            self._loc(node),
            operator=operator,
            left=self._expr(node.child_by_field_name("left")),
            right=self._expr(node.child_by_field_name("right")),
        )

    def _build_unary(self, node) -> Node:
        return Node(
            "UnaryExpression",
            self._loc(node),
            operator=self._operator(node),
            argument=self._expr(node.child_by_field_name("argument")),
            prefix=True,
        )

    def _build_update(self, node) -> Node:
        operator = self._operator(node)
        return Node(
            "UpdateExpression",
            self._loc(node),
            operator=operator,
            argument=self._expr(node.child_by_field_name("argument")),
            prefix=node.children[0].type == operator,
        )

    def _build_assignment(self, node) -> Node:
        left_node = node.child_by_field_name("left")
        if left_node.type in ("object_pattern", "array_pattern"):
            raise self._unsupported(left_node)
        operator = "=" if node.type == "assignment_expression" else self._operator(node)
        return Node(
            "AssignmentExpression",
            self._loc(node),
            operator=operator,
            left=self._expr(left_node),
            right=self._expr(node.child_by_field_name("right")),
        )

    def _build_ternary(self, node) -> Node:
        return Node(
            "ConditionalExpression",
            self._loc(node),
            test=self._expr(node.child_by_field_name("condition")),
            consequent=self._expr(node.child_by_field_name("consequence")),
            alternate=self._expr(node.child_by_field_name("alternative")),
        )

    def _build_sequence(self, node) -> Node:
        return Node(
            "SequenceExpression",
            self._loc(node),
            expressions=[self._expr(c) for c in self._flatten_sequence(node)],
        )

    def _flatten_sequence(self, node) -> list:
        items = []
        for child in self._named(node):
            if child.type == "sequence_expression":
                items.extend(self._flatten_sequence(child))
            else:
                items.append(child)
        return items
