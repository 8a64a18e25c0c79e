"""
Source-code units and the metrics they accumulate.

A scan builds a small tree of units (project, files, functions). Visitors
never hold a unit directly: they add to whatever unit is on top of the
walker's stack when an increment fires.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class Metric(Enum):
    """Metrics accumulated on source-code units."""
    COGNITIVE_COMPLEXITY = "cognitive_complexity"
    FUNCTIONS = "functions"


@dataclass(eq=False)
class SourceCode:
    """Base source-code unit."""
    key: str
    name: str
    start_line: int = 0
    end_line: int = 0
    metrics: Dict[Metric, int] = field(default_factory=dict)
    children: List["SourceCode"] = field(default_factory=list)
    parent: Optional["SourceCode"] = field(default=None, repr=False)

    def add(self, metric: Metric, amount: int = 1) -> None:
        self.metrics[metric] = self.metrics.get(metric, 0) + amount

    def get_int(self, metric: Metric) -> int:
        return self.metrics.get(metric, 0)

    def aggregate(self, metric: Metric) -> int:
        """This unit's own value plus the aggregate of every child."""
        return self.get_int(metric) + sum(child.aggregate(metric) for child in self.children)

    def add_child(self, child: "SourceCode") -> "SourceCode":
        child.parent = self
        self.children.append(child)
        return child

    def iter_units(self) -> Iterator["SourceCode"]:
        """Depth-first iteration over descendant units."""
        for child in self.children:
            yield child
            yield from child.iter_units()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "metrics": {metric.value: value for metric, value in self.metrics.items()},
        }


@dataclass(eq=False)
class SourceFunction(SourceCode):
    """A function (or method) body."""

    @property
    def qualified_name(self) -> str:
        names = [self.name]
        unit = self.parent
        while isinstance(unit, SourceFunction):
            names.append(unit.name)
            unit = unit.parent
        return "::".join(reversed(names)) if len(names) > 1 else self.name

    @property
    def file(self) -> Optional["SourceFile"]:
        unit = self.parent
        while unit is not None and not isinstance(unit, SourceFile):
            unit = unit.parent
        return unit


@dataclass(eq=False)
class SourceFile(SourceCode):
    """A single source file."""
    language: str = "unknown"

    @property
    def functions(self) -> List[SourceFunction]:
        return [unit for unit in self.iter_units() if isinstance(unit, SourceFunction)]

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["language"] = self.language
        result["cognitive_complexity"] = self.aggregate(Metric.COGNITIVE_COMPLEXITY)
        result["functions"] = [
            {**function.to_dict(), "qualified_name": function.qualified_name}
            for function in self.functions
        ]
        return result


@dataclass(eq=False)
class SourceProject(SourceCode):
    """Root of the unit tree for one scan."""

    @property
    def files(self) -> List[SourceFile]:
        return [unit for unit in self.children if isinstance(unit, SourceFile)]


class SourceCodeStack:
    """
    Stack of active units.

    The bottom of the stack is the project or file the walker was started
    on. Units pushed later are attached as children of the current top.
    """

    def __init__(self, root: SourceCode):
        self._stack: List[SourceCode] = [root]

    def peek(self) -> SourceCode:
        return self._stack[-1]

    def push(self, unit: SourceCode) -> SourceCode:
        self.peek().add_child(unit)
        self._stack.append(unit)
        return unit

    def pop(self) -> SourceCode:
        if len(self._stack) == 1:
            raise IndexError("cannot pop the root source code unit")
        return self._stack.pop()

    def __len__(self) -> int:
        return len(self._stack)
