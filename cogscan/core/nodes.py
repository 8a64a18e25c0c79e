"""
AST node model used by the complexity scorer.

Grammar adapters translate their concrete syntax trees into ``AstNode``
instances drawn from the closed ``NodeKind`` vocabulary. Each node is
classified once, at construction, into a ``Category`` bitset so the scorer
never has to search kind lists while walking.
"""

import itertools
from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Dict, Iterable, Iterator, List, Optional


class NodeKind(Enum):
    """Node types understood by the scorer."""
    TRANSLATION_UNIT = "translation_unit"
    FUNCTION_DEFINITION = "function_definition"
    DECL_SPECIFIER_SEQ = "decl_specifier_seq"
    NESTED_NAME_SPECIFIER = "nested_name_specifier"
    PARAMETERS_AND_QUALIFIERS = "parameters_and_qualifiers"
    FUNCTION_BODY = "function_body"
    STATEMENT = "statement"

    HANDLER = "handler"
    ITERATION_STATEMENT = "iteration_statement"
    LAMBDA_EXPRESSION = "lambda_expression"
    LOGICAL_AND_EXPRESSION = "logical_and_expression"
    LOGICAL_OR_EXPRESSION = "logical_or_expression"
    SELECTION_STATEMENT = "selection_statement"

    IF = "if"
    ELSE = "else"
    GOTO = "goto"
    QUEST = "?"
    IDENTIFIER = "identifier"

    OTHER = "other"


class Category(IntFlag):
    """Scoring categories a node kind can belong to."""
    NONE = 0
    DESCENDANT_SCAN = 1
    FLAT_INCREMENT = 2
    NESTING_LEVEL = 4
    NESTING_INCREMENT = 8


_SCAN = Category.DESCENDANT_SCAN
_FLAT = Category.FLAT_INCREMENT
_LEVEL = Category.NESTING_LEVEL
_PENALTY = Category.NESTING_INCREMENT

KIND_CATEGORIES: Dict[NodeKind, Category] = {
    NodeKind.HANDLER: _SCAN | _FLAT | _LEVEL | _PENALTY,
    NodeKind.ITERATION_STATEMENT: _SCAN | _FLAT | _LEVEL | _PENALTY,
    NodeKind.LAMBDA_EXPRESSION: _SCAN | _LEVEL,
    NodeKind.LOGICAL_AND_EXPRESSION: _SCAN | _FLAT,
    NodeKind.LOGICAL_OR_EXPRESSION: _SCAN | _FLAT,
    NodeKind.SELECTION_STATEMENT: _SCAN | _FLAT | _LEVEL | _PENALTY,
    NodeKind.ELSE: _SCAN | _FLAT,
    NodeKind.GOTO: _SCAN | _FLAT,
    NodeKind.QUEST: _SCAN | _FLAT | _LEVEL | _PENALTY,
    NodeKind.IDENTIFIER: _SCAN,
}


def kinds_in(category: Category) -> List[NodeKind]:
    """Return the node kinds whose category includes ``category``."""
    return [kind for kind, cats in KIND_CATEGORIES.items() if cats & category]


DESCENDANT_KINDS = frozenset(kinds_in(Category.DESCENDANT_SCAN))

_node_counter = itertools.count()


@dataclass(eq=False)
class AstNode:
    """
    A node of the analysed syntax tree.

    Leaf nodes carry the literal token text in ``value``. Inner nodes
    report the first token below them through ``token``. Identity is the
    ``index`` assigned at construction, so two structurally equal nodes
    are still distinct.
    """
    kind: NodeKind
    value: Optional[str] = None
    start_line: int = 0
    end_line: int = 0
    start_column: int = 0
    end_column: int = 0
    children: List["AstNode"] = field(default_factory=list, repr=False)
    parent: Optional["AstNode"] = field(default=None, repr=False)
    raw_type: Optional[str] = None
    index: int = field(default_factory=lambda: next(_node_counter))
    category: Category = field(init=False)

    def __post_init__(self):
        self.category = KIND_CATEGORIES.get(self.kind, Category.NONE)
        for child in self.children:
            child.parent = self

    def __repr__(self) -> str:
        return f"AstNode(kind={self.kind.value!r}, value={self.value!r}, line={self.start_line})"

    def __hash__(self) -> int:
        return self.index

    def add_child(self, child: "AstNode") -> "AstNode":
        """Append a child and return it."""
        child.parent = self
        self.children.append(child)
        return child

    def has(self, category: Category) -> bool:
        return bool(self.category & category)

    @property
    def token(self) -> Optional["AstNode"]:
        """The first leaf at or below this node."""
        node = self
        while node.children:
            node = node.children[0]
        return node if node.value is not None else None

    @property
    def token_value(self) -> str:
        token = self.token
        return token.value if token is not None else ""

    def descendants(self, kinds: Optional[Iterable[NodeKind]] = None) -> List["AstNode"]:
        """All descendants of the given kinds, pre-order (document order)."""
        wanted = None if kinds is None else frozenset(kinds)
        return [node for node in self._walk() if wanted is None or node.kind in wanted]

    def _walk(self) -> Iterator["AstNode"]:
        stack = list(reversed(self.children))
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def has_ancestor(self, *kinds: NodeKind) -> bool:
        node = self.parent
        while node is not None:
            if node.kind in kinds:
                return True
            node = node.parent
        return False

    @property
    def previous_sibling(self) -> Optional["AstNode"]:
        if self.parent is None:
            return None
        siblings = self.parent.children
        for position, sibling in enumerate(siblings):
            if sibling is self:
                return siblings[position - 1] if position > 0 else None
        return None

    def previous_ast_node(self) -> Optional["AstNode"]:
        """Previous sibling, or the parent's previous node when this is the first child."""
        node = self
        while node is not None:
            sibling = node.previous_sibling
            if sibling is not None:
                return sibling
            node = node.parent
        return None

    def text(self) -> str:
        """Concatenated token text below this node, separated by single spaces."""
        if self.value is not None and not self.children:
            return self.value
        return " ".join(leaf.value for leaf in self._walk() if leaf.value is not None and not leaf.children)
