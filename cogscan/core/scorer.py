"""
Cognitive Complexity scoring.

The scorer is an ``AstVisitor``. The walker hands it every subscribed node
in its own order; for each node the scorer descends into the node's
watched descendants itself, so nesting is tracked along the real tree
shape, and remembers what it has already scored so nodes the walker
delivers later are not counted twice.

Scoring rules:

* handlers, loops, selections, ``else``, ``goto``, ``?`` and logical
  ``&&``/``||`` expressions add 1;
* handlers, loops, selections and ``?`` also add the nesting depth they
  appear at;
* handlers, loops, lambdas, selections and ``?`` deepen the nesting of
  what they contain;
* an ``if`` that directly follows ``else`` is a continuation of the
  enclosing chain and neither adds nor deepens anything;
* an identifier spelled like the enclosing function adds 1 (recursion).
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from cogscan.core.functions import find_function_identifier
from cogscan.core.nodes import DESCENDANT_KINDS, AstNode, Category, NodeKind
from cogscan.core.source import Metric
from cogscan.core.walker import AstVisitor

logger = logging.getLogger(__name__)


class ScoringError(Exception):
    """Raised when the scorer is driven in an order it cannot handle."""


class NoEnclosingFunctionError(ScoringError):
    """An identifier was scored before any function definition was seen."""

    def __init__(self, node: AstNode):
        self.node = node
        super().__init__(
            f"identifier {node.value!r} at line {node.start_line} is not inside a function definition"
        )


@dataclass
class ScoringContext:
    """Mutable state of one scoring pass over one source unit."""
    nesting: int = 0
    visited: Set[int] = field(default_factory=set)
    function_identifier: Optional[AstNode] = None

    def is_visited(self, node: AstNode) -> bool:
        return node.index in self.visited

    def mark_visited(self, node: AstNode) -> None:
        self.visited.add(node.index)


def is_else_if(node: AstNode) -> bool:
    """True for a selection statement that continues an ``else`` branch."""
    if node.kind is not NodeKind.SELECTION_STATEMENT:
        return False
    token = node.token
    if token is None or token.kind is not NodeKind.IF or node.parent is None:
        return False
    previous = node.parent.previous_ast_node()
    return previous is not None and previous.kind is NodeKind.ELSE


DEFAULT_SUBSCRIPTIONS = (
    NodeKind.FUNCTION_DEFINITION,
    *sorted(DESCENDANT_KINDS, key=lambda kind: kind.value),
)


class CognitiveComplexityScorer(AstVisitor):
    """Accumulates Cognitive Complexity on the active source-code unit."""

    class Builder:

        def __init__(self):
            self._metric = Metric.COGNITIVE_COMPLEXITY
            self._kinds: List[NodeKind] = list(DEFAULT_SUBSCRIPTIONS)
            self._strict = False

        def set_metric(self, metric: Metric) -> "CognitiveComplexityScorer.Builder":
            self._metric = metric
            return self

        def subscribe_to(self, *kinds: NodeKind) -> "CognitiveComplexityScorer.Builder":
            for kind in kinds:
                if kind not in self._kinds:
                    self._kinds.append(kind)
            return self

        def subscribe_to_all(self, kinds: Iterable[NodeKind]) -> "CognitiveComplexityScorer.Builder":
            self._kinds = list(dict.fromkeys(kinds))
            return self

        def strict(self, flag: bool = True) -> "CognitiveComplexityScorer.Builder":
            self._strict = flag
            return self

        def build(self) -> "CognitiveComplexityScorer":
            return CognitiveComplexityScorer(self._metric, self._kinds, strict=self._strict)

    def __init__(
        self,
        metric: Metric = Metric.COGNITIVE_COMPLEXITY,
        kinds: Optional[Iterable[NodeKind]] = None,
        strict: bool = False,
    ):
        super().__init__()
        self.metric = metric
        self.kinds = list(kinds) if kinds is not None else list(DEFAULT_SUBSCRIPTIONS)
        self.strict = strict
        self.context = ScoringContext()

    @classmethod
    def builder(cls) -> "CognitiveComplexityScorer.Builder":
        return cls.Builder()

    def init(self) -> None:
        self.subscribe_to(*self.kinds)

    def visit_file(self, ast: Optional[AstNode]) -> None:
        self.context = ScoringContext()

    def visit_node(self, node: AstNode) -> None:
        ctx = self.context
        if ctx.is_visited(node):
            return
        ctx.mark_visited(node)

        if node.kind is NodeKind.FUNCTION_DEFINITION:
            resolved = find_function_identifier(node, ctx.function_identifier)
            if resolved is ctx.function_identifier:
                logger.debug("No name found for function at line %d, keeping previous", node.start_line)
            ctx.function_identifier = resolved

        watched = node.descendants(DESCENDANT_KINDS)
        continuation = is_else_if(node)
        nests = node.has(Category.NESTING_LEVEL) and not continuation

        if nests:
            ctx.nesting += 1
        for descendant in watched:
            self.visit_node(descendant)
        if nests:
            ctx.nesting -= 1

        for descendant in watched:
            ctx.mark_visited(descendant)

        if node.kind is NodeKind.IDENTIFIER and self._is_recursive_call(node):
            self._add(1)

        if continuation:
            return
        if node.has(Category.FLAT_INCREMENT):
            self._add(1)
        if node.has(Category.NESTING_INCREMENT):
            self._add(ctx.nesting)

    def _is_recursive_call(self, node: AstNode) -> bool:
        current = self.context.function_identifier
        if current is None:
            if self.strict:
                raise NoEnclosingFunctionError(node)
            logger.debug("Identifier %r at line %d is outside any function", node.value, node.start_line)
            return False
        return node.index != current.index and node.value == current.value

    def _add(self, amount: int) -> None:
        if amount:
            self.get_context().peek_source_code().add(self.metric, amount)
