"""
Depth-first AST driver.

The walker delivers nodes to visitors that subscribed to their kind and
owns the stack of active source-code units. Visitors are called in the
order they were registered on the way down and in reverse order on the
way back up, so a unit-building visitor registered first is always on the
stack before metric visitors see a node.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from cogscan.core.nodes import AstNode, NodeKind
from cogscan.core.functions import function_name
from cogscan.core.source import Metric, SourceCode, SourceCodeStack, SourceFile, SourceFunction

logger = logging.getLogger(__name__)


class AstVisitor:
    """
    Base class for visitors driven by ``AstWalker``.

    Subclasses call ``subscribe_to`` from ``init`` and override the hooks
    they need.
    """

    def __init__(self):
        self._context: Optional["AstWalker"] = None
        self._subscriptions: List[NodeKind] = []

    def set_context(self, context: "AstWalker") -> None:
        self._context = context

    def get_context(self) -> "AstWalker":
        if self._context is None:
            raise RuntimeError(f"{type(self).__name__} is not attached to a walker")
        return self._context

    def subscribe_to(self, *kinds: NodeKind) -> None:
        for kind in kinds:
            if kind not in self._subscriptions:
                self._subscriptions.append(kind)

    @property
    def subscriptions(self) -> List[NodeKind]:
        return list(self._subscriptions)

    def init(self) -> None:
        pass

    def visit_file(self, ast: Optional[AstNode]) -> None:
        pass

    def leave_file(self, ast: Optional[AstNode]) -> None:
        pass

    def visit_node(self, node: AstNode) -> None:
        pass

    def leave_node(self, node: AstNode) -> None:
        pass


class AstWalker:
    """Walks one AST and dispatches nodes to subscribed visitors."""

    def __init__(self, visitors: Iterable[AstVisitor], root: Optional[SourceCode] = None):
        self.visitors = list(visitors)
        self._stack: Optional[SourceCodeStack] = SourceCodeStack(root) if root is not None else None
        self._dispatch: Dict[NodeKind, List[AstVisitor]] = defaultdict(list)
        for visitor in self.visitors:
            visitor.set_context(self)
            visitor.init()
            for kind in visitor.subscriptions:
                self._dispatch[kind].append(visitor)

    def peek_source_code(self) -> SourceCode:
        if self._stack is None:
            raise RuntimeError("no active source code unit")
        return self._stack.peek()

    def add_source_code(self, unit: SourceCode) -> SourceCode:
        if self._stack is None:
            self._stack = SourceCodeStack(unit)
            return unit
        return self._stack.push(unit)

    def pop_source_code(self) -> SourceCode:
        if self._stack is None:
            raise RuntimeError("no active source code unit")
        return self._stack.pop()

    def walk_and_visit(self, ast: Optional[AstNode], source_file: SourceFile) -> SourceFile:
        """Visit every node of ``ast`` with ``source_file`` as the active unit."""
        logger.debug("Walking %s with %d visitor(s)", source_file.key, len(self.visitors))
        self.add_source_code(source_file)
        try:
            for visitor in self.visitors:
                visitor.visit_file(ast)
            if ast is not None:
                self._visit(ast)
            for visitor in reversed(self.visitors):
                visitor.leave_file(ast)
        finally:
            while len(self._stack) > 1:
                if self._stack.pop() is source_file:
                    break
        return source_file

    def _visit(self, root: AstNode) -> None:
        # (node, leaving) pairs; a node is left once all of its children have been left
        stack = [(root, False)]
        while stack:
            node, leaving = stack.pop()
            subscribers = self._dispatch.get(node.kind, ())
            if leaving:
                for visitor in reversed(subscribers):
                    visitor.leave_node(node)
                continue
            for visitor in subscribers:
                visitor.visit_node(node)
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))


class SourceCodeBuilderVisitor(AstVisitor):
    """Pushes a ``SourceFunction`` unit for every function definition."""

    def __init__(self, key_prefix: str = ""):
        super().__init__()
        self.key_prefix = key_prefix

    def init(self) -> None:
        self.subscribe_to(NodeKind.FUNCTION_DEFINITION)

    def visit_node(self, node: AstNode) -> None:
        name = function_name(node)
        unit = SourceFunction(
            key=f"{self.key_prefix}{name}:{node.start_line}",
            name=name,
            start_line=node.start_line,
            end_line=node.end_line,
        )
        self.get_context().add_source_code(unit)
        unit.add(Metric.FUNCTIONS)

    def leave_node(self, node: AstNode) -> None:
        self.get_context().pop_source_code()
