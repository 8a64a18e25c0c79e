"""
cogscan

Cognitive Complexity scoring for C and C++ sources: a visitor-driven
scorer over a tree-sitter syntax tree, threshold rules and reports.
"""

__version__ = "1.0.0"
__author__ = "cogscan developers"

from cogscan.core.engine import ScanEngine, score_ast
from cogscan.core.findings import Finding, Severity, Confidence
from cogscan.core.scorer import CognitiveComplexityScorer
from cogscan.config import ScanConfig

__all__ = [
    "ScanEngine",
    "score_ast",
    "CognitiveComplexityScorer",
    "Finding",
    "Severity",
    "Confidence",
    "ScanConfig",
]
