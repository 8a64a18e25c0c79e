"""
C and C++ parser built on tree-sitter-cpp.

The tree-sitter grammar is mapped onto the ``NodeKind`` vocabulary. Three
spots are reshaped so the tree reads like a classic C++ grammar:

* the specifiers in front of a function declarator are wrapped in a
  ``DECL_SPECIFIER_SEQ`` node, and the ``A::`` part of a qualified name
  in a ``NESTED_NAME_SPECIFIER`` node;
* an ``else_clause`` is flattened into its ``if_statement``; the
  statement after ``else`` and every statement of a block are wrapped
  in their own ``STATEMENT`` node;
* a chain of the same logical operator (``a && b && c``) is a single
  logical expression node.
"""

import logging
from typing import Dict, List, Optional, Tuple

import tree_sitter_cpp as tscpp
from tree_sitter import Language, Node, Parser

from cogscan.core.nodes import AstNode, NodeKind
from cogscan.parsers import register_parser
from cogscan.parsers.base import BaseParser

logger = logging.getLogger(__name__)

CPP_LANGUAGE = Language(tscpp.language())

_TYPE_KINDS: Dict[str, NodeKind] = {
    "translation_unit": NodeKind.TRANSLATION_UNIT,
    "function_definition": NodeKind.FUNCTION_DEFINITION,
    "parameter_list": NodeKind.PARAMETERS_AND_QUALIFIERS,
    "catch_clause": NodeKind.HANDLER,
    "for_statement": NodeKind.ITERATION_STATEMENT,
    "for_range_loop": NodeKind.ITERATION_STATEMENT,
    "while_statement": NodeKind.ITERATION_STATEMENT,
    "do_statement": NodeKind.ITERATION_STATEMENT,
    "lambda_expression": NodeKind.LAMBDA_EXPRESSION,
    "if_statement": NodeKind.SELECTION_STATEMENT,
    "switch_statement": NodeKind.SELECTION_STATEMENT,
    "if": NodeKind.IF,
    "else": NodeKind.ELSE,
    "goto": NodeKind.GOTO,
    "?": NodeKind.QUEST,
    "identifier": NodeKind.IDENTIFIER,
    "field_identifier": NodeKind.IDENTIFIER,
    "type_identifier": NodeKind.IDENTIFIER,
    "namespace_identifier": NodeKind.IDENTIFIER,
    "statement_identifier": NodeKind.IDENTIFIER,
}

_LOGICAL_OPERATORS: Dict[str, NodeKind] = {
    "&&": NodeKind.LOGICAL_AND_EXPRESSION,
    "and": NodeKind.LOGICAL_AND_EXPRESSION,
    "||": NodeKind.LOGICAL_OR_EXPRESSION,
    "or": NodeKind.LOGICAL_OR_EXPRESSION,
}

_SKIPPED_TYPES = {"comment"}

_BRACES = {"{", "}"}

# a tree-sitter node and the AstNode it was converted to
Pending = Tuple[Node, AstNode]


def _logical_kind(node: Node) -> Optional[NodeKind]:
    if node.type != "binary_expression":
        return None
    operator = node.child_by_field_name("operator")
    if operator is None:
        return None
    return _LOGICAL_OPERATORS.get(operator.type)


@register_parser("cpp")
class CppParser(BaseParser):
    """
    Parser for C++ source code using tree-sitter.

    The tree is converted with an explicit stack, so long expression
    chains do not run into the interpreter's recursion limit.
    """

    def __init__(self):
        self._parser = Parser(CPP_LANGUAGE)

    @property
    def language(self) -> str:
        return "cpp"

    def parse(self, source: str, file_path: str = "<unknown>") -> Optional[AstNode]:
        """Parse C++ source code into a normalized AST."""
        data = source.encode("utf-8")
        tree = self._parser.parse(data)
        root = tree.root_node
        if root.has_error:
            logger.warning("Syntax errors in %s, scoring the recovered tree", file_path)

        ast = self._make_node(root, data, self._get_node_kind(root))
        stack: List[Pending] = [(root, ast)]
        while stack:
            node, ast_node = stack.pop()
            stack.extend(reversed(self._expand(node, ast_node, data)))
        return ast

    def _expand(self, node: Node, ast_node: AstNode, source: bytes) -> List[Pending]:
        """Attach the converted children of ``node`` and return them for expansion."""
        if node.type == "function_definition":
            return self._expand_function_definition(node, ast_node, source)
        if node.type == "qualified_identifier":
            return self._expand_qualified_identifier(node, ast_node, source)
        if node.type == "if_statement":
            return self._expand_if_statement(node, ast_node, source)
        if node.type == "compound_statement":
            return self._expand_compound_statement(node, ast_node, source)

        pending = []
        parent_logical = _logical_kind(node)
        for child in self._children(node):
            kind = None
            # a && b && c is parsed left-nested; the inner links belong to the outer chain
            if parent_logical is not None and _logical_kind(child) is parent_logical:
                kind = NodeKind.OTHER
            pending.append(self._attach(ast_node, child, source, kind))
        return pending

    def _expand_function_definition(self, node: Node, ast_node: AstNode, source: bytes) -> List[Pending]:
        declarator = node.child_by_field_name("declarator")
        body = node.child_by_field_name("body")
        children = self._children(node)

        split = 0
        if declarator is not None:
            split = next((i for i, child in enumerate(children) if child.id == declarator.id), len(children))

        pending = self._attach_group(ast_node, NodeKind.DECL_SPECIFIER_SEQ, children[:split], source)
        for child in children[split:]:
            kind = NodeKind.FUNCTION_BODY if body is not None and child.id == body.id else None
            pending.append(self._attach(ast_node, child, source, kind))
        return pending

    def _expand_qualified_identifier(self, node: Node, ast_node: AstNode, source: bytes) -> List[Pending]:
        name = node.child_by_field_name("name")
        pending: List[Pending] = []
        scope: List[Node] = []
        for child in self._children(node):
            if name is not None and child.id == name.id:
                pending += self._attach_group(ast_node, NodeKind.NESTED_NAME_SPECIFIER, scope, source)
                pending.append(self._attach(ast_node, child, source))
                scope = []
            else:
                scope.append(child)
        pending += self._attach_group(ast_node, NodeKind.NESTED_NAME_SPECIFIER, scope, source)
        return pending

    def _expand_if_statement(self, node: Node, ast_node: AstNode, source: bytes) -> List[Pending]:
        pending: List[Pending] = []
        after_else = False
        for child in self._flatten_else(node):
            if after_else:
                pending += self._attach_group(ast_node, NodeKind.STATEMENT, [child], source)
            else:
                pending.append(self._attach(ast_node, child, source))
            after_else = child.type == "else"
        return pending

    def _expand_compound_statement(self, node: Node, ast_node: AstNode, source: bytes) -> List[Pending]:
        # each statement of a block gets its own node, so the one before it is never ``else``
        pending: List[Pending] = []
        for child in self._children(node):
            if child.type in _BRACES:
                pending.append(self._attach(ast_node, child, source))
            else:
                pending += self._attach_group(ast_node, NodeKind.STATEMENT, [child], source)
        return pending

    def _flatten_else(self, node: Node) -> List[Node]:
        children: List[Node] = []
        for child in self._children(node):
            if child.type == "else_clause":
                children.extend(self._children(child))
            else:
                children.append(child)
        return children

    def _children(self, node: Node) -> List[Node]:
        return [child for child in node.children if child.type not in _SKIPPED_TYPES]

    def _get_node_kind(self, node: Node) -> NodeKind:
        logical = _logical_kind(node)
        if logical is not None:
            return logical
        return _TYPE_KINDS.get(node.type, NodeKind.OTHER)

    def _attach(self, parent: AstNode, node: Node, source: bytes, kind: Optional[NodeKind] = None) -> Pending:
        if kind is None:
            kind = self._get_node_kind(node)
        return node, parent.add_child(self._make_node(node, source, kind))

    def _attach_group(self, parent: AstNode, kind: NodeKind, nodes: List[Node], source: bytes) -> List[Pending]:
        """Attach ``nodes`` below a new ``kind`` wrapper spanning all of them."""
        if not nodes:
            return []
        first, last = nodes[0], nodes[-1]
        wrapper = parent.add_child(AstNode(
            kind=kind,
            start_line=first.start_point[0] + 1,
            end_line=last.end_point[0] + 1,
            start_column=first.start_point[1],
            end_column=last.end_point[1],
        ))
        return [self._attach(wrapper, node, source) for node in nodes]

    def _make_node(self, node: Node, source: bytes, kind: NodeKind) -> AstNode:
        value = None
        if node.child_count == 0:
            value = source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
        return AstNode(
            kind=kind,
            value=value,
            start_line=node.start_point[0] + 1,
            end_line=node.end_point[0] + 1,
            start_column=node.start_point[1],
            end_column=node.end_point[1],
            raw_type=node.type,
        )


register_parser("c")(CppParser)
