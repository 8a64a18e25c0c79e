"""Core scoring engine and data structures."""

from cogscan.core.findings import Finding, Severity, Confidence
from cogscan.core.nodes import AstNode, Category, NodeKind
from cogscan.core.scorer import CognitiveComplexityScorer, NoEnclosingFunctionError, ScoringContext
from cogscan.core.walker import AstVisitor, AstWalker, SourceCodeBuilderVisitor
from cogscan.core.engine import ScanEngine, score_ast
from cogscan.core.rules import Rule, RuleRegistry

__all__ = [
    "Finding",
    "Severity",
    "Confidence",
    "AstNode",
    "Category",
    "NodeKind",
    "CognitiveComplexityScorer",
    "NoEnclosingFunctionError",
    "ScoringContext",
    "AstVisitor",
    "AstWalker",
    "SourceCodeBuilderVisitor",
    "ScanEngine",
    "score_ast",
    "Rule",
    "RuleRegistry",
]
