"""
Complexity rules.

Importing this package registers every rule with the global registry.
"""

from cogscan.rules.complexity import FileCognitiveComplexityRule, FunctionCognitiveComplexityRule

__all__ = [
    "FunctionCognitiveComplexityRule",
    "FileCognitiveComplexityRule",
]
