"""
Rule engine for the complexity scanner.

This module provides the base class for threshold rules evaluated on the
scored source-code units of a file, and the registry used to discover them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Type, Set, Generator
import re

from cogscan.core.findings import (
    Finding, Severity, Confidence, CodeLocation, CodeSnippet, Remediation
)
from cogscan.core.nodes import AstNode
from cogscan.core.source import SourceFile


@dataclass
class RuleMetadata:
    """Metadata for a rule."""
    rule_id: str
    name: str
    description: str
    severity: Severity
    confidence: Confidence
    languages: List[str]
    tags: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    enabled_by_default: bool = True


class Rule(ABC):
    """
    Base class for all complexity rules.

    A rule inspects the scored units of one file and yields a finding for
    each unit that breaks it.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    @property
    @abstractmethod
    def metadata(self) -> RuleMetadata:
        """Return rule metadata."""
        pass

    @abstractmethod
    def analyze(self, context: "AnalysisContext") -> Generator[Finding, None, None]:
        """
        Analyze the scored file and yield findings.

        Args:
            context: The analysis context holding the source and its units.

        Yields:
            Finding objects for each detected issue.
        """
        pass

    def supports_language(self, language: str) -> bool:
        """Check if this rule supports a given language."""
        languages = self.metadata.languages
        return "*" in languages or language.lower() in [l.lower() for l in languages]

    def create_finding(
        self,
        location: CodeLocation,
        title: Optional[str] = None,
        description: Optional[str] = None,
        severity: Optional[Severity] = None,
        snippet: Optional[CodeSnippet] = None,
        remediation: Optional[Remediation] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Finding:
        """
        Create a finding using the rule's metadata as defaults.
        """
        return Finding(
            rule_id=self.metadata.rule_id,
            title=title or self.metadata.name,
            description=description or self.metadata.description,
            severity=severity or self.metadata.severity,
            confidence=self.metadata.confidence,
            location=location,
            snippet=snippet,
            remediation=remediation,
            tags=list(self.metadata.tags),
            metadata=metadata or {},
        )


class RuleRegistry:
    """
    Registry for managing and discovering rules.

    Rules are registered once at import time; which of them run is decided
    per scan from the rule configuration.
    """

    _instance: Optional["RuleRegistry"] = None

    def __init__(self):
        self._rules: Dict[str, Type[Rule]] = {}
        self._defaults: Set[str] = set()

    @classmethod
    def get_instance(cls) -> "RuleRegistry":
        """Get the singleton registry instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, rule_class: Type[Rule]) -> Type[Rule]:
        """
        Register a rule class.

        Can be used as a decorator:

        @registry.register
        class MyRule(Rule):
            ...
        """
        meta = rule_class().metadata
        self._rules[meta.rule_id] = rule_class
        if meta.enabled_by_default:
            self._defaults.add(meta.rule_id)
        return rule_class

    def get_rule(self, rule_id: str, config: Optional[Dict[str, Any]] = None) -> Optional[Rule]:
        """Get a rule instance by ID."""
        if rule_id not in self._rules:
            return None
        return self._rules[rule_id](config)

    def is_enabled(self, rule_id: str, config: Optional[Dict[str, Any]] = None) -> bool:
        """Whether a rule runs under the given rule configuration."""
        config = config or {}
        if rule_id in config.get("disabled", []):
            return False
        return rule_id in self._defaults or rule_id in config.get("enabled", [])

    def get_rules_for_language(
        self,
        language: str,
        config: Optional[Dict[str, Any]] = None,
    ) -> List[Rule]:
        """Get all enabled rules for a given language."""
        rules = []

        for rule_id in self._rules:
            if not self.is_enabled(rule_id, config):
                continue
            rule = self.get_rule(rule_id, config)
            if rule.supports_language(language):
                rules.append(rule)

        return rules

    def get_all_rules(self, config: Optional[Dict[str, Any]] = None) -> List[Rule]:
        """Get all registered rules."""
        return [self.get_rule(rule_id, config) for rule_id in self._rules]

    @property
    def rule_count(self) -> int:
        """Return the number of registered rules."""
        return len(self._rules)


class AnalysisContext:
    """
    Context provided to rules during analysis.

    Contains the source text, the parsed tree and the scored units,
    plus helpers for snippets and inline suppressions.
    """

    def __init__(
        self,
        file_path: str,
        content: str,
        language: str,
        source_file: SourceFile,
        ast: Optional[AstNode] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.file_path = file_path
        self.content = content
        self.language = language
        self.source_file = source_file
        self.ast = ast
        self.config = config or {}
        self._lines: Optional[List[str]] = None
        self._suppression_comments: Optional[Set[int]] = None

    @property
    def lines(self) -> List[str]:
        """Get the source code lines."""
        if self._lines is None:
            self._lines = self.content.splitlines()
        return self._lines

    @property
    def suppressed_lines(self) -> Set[int]:
        """Get line numbers that have suppression comments."""
        if self._suppression_comments is None:
            self._suppression_comments = set()
            suppression_patterns = [
                r"//\s*NOSONAR",
                r"/\*\s*NOSONAR",
                r"//\s*cogscan-ignore",
                r"/\*\s*cogscan-ignore",
            ]

            combined_pattern = re.compile("|".join(suppression_patterns), re.IGNORECASE)

            for i, line in enumerate(self.lines, start=1):
                if combined_pattern.search(line):
                    self._suppression_comments.add(i)
                    # A comment on its own line covers the next one
                    self._suppression_comments.add(i + 1)

        return self._suppression_comments

    def is_line_suppressed(self, line_number: int) -> bool:
        """Check if a line has a suppression comment."""
        return line_number in self.suppressed_lines

    def get_snippet(self, line_number: int, context_lines: int = 3) -> CodeSnippet:
        """Get a code snippet around a line number."""
        lines = self.lines
        start = max(0, line_number - context_lines - 1)
        end = min(len(lines), line_number + context_lines)

        context_before = lines[start:line_number - 1]
        code = lines[line_number - 1] if 0 < line_number <= len(lines) else ""
        context_after = lines[line_number:end]

        return CodeSnippet(
            code=code,
            highlighted_line=line_number,
            context_before=context_before,
            context_after=context_after,
        )


# Global registry instance
registry = RuleRegistry.get_instance()


def rule(cls: Type[Rule]) -> Type[Rule]:
    """
    Decorator to register a rule with the global registry.

    Usage:
        @rule
        class MyRule(Rule):
            ...
    """
    return registry.register(cls)
