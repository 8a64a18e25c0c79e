"""
Finding data structures for the complexity scanner.

This module defines the structures used to report functions and files
that exceed complexity thresholds, and the overall scan result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any
import json

from cogscan.core.source import Metric, SourceFile


class Severity(Enum):
    """Severity levels for findings."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    def __lt__(self, other):
        order = [Severity.INFO, Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]
        return order.index(self) < order.index(other)

    def __le__(self, other):
        return self == other or self < other


class Confidence(Enum):
    """Confidence levels for findings."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class CodeLocation:
    """Represents a location in source code."""
    file_path: str
    start_line: int
    end_line: int
    start_column: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        return f"{self.file_path}:{self.start_line}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "start_column": self.start_column,
            "end_column": self.end_column,
        }


@dataclass
class CodeSnippet:
    """A snippet of code with context."""
    code: str
    highlighted_line: int
    context_before: List[str] = field(default_factory=list)
    context_after: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "highlighted_line": self.highlighted_line,
            "context_before": self.context_before,
            "context_after": self.context_after,
        }


@dataclass
class Remediation:
    """Remediation information for a finding."""
    description: str
    references: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "references": self.references,
        }


@dataclass
class Finding:
    """
    A function or file whose complexity exceeds a configured threshold.
    """
    rule_id: str
    title: str
    description: str
    severity: Severity
    confidence: Confidence
    location: CodeLocation
    snippet: Optional[CodeSnippet] = None
    remediation: Optional[Remediation] = None
    language: str = "unknown"
    tags: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    suppressed: bool = False
    suppression_reason: Optional[str] = None

    def __post_init__(self):
        """Validate and normalize the finding."""
        if isinstance(self.severity, str):
            self.severity = Severity(self.severity)
        if isinstance(self.confidence, str):
            self.confidence = Confidence(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        """Convert finding to a dictionary."""
        result = {
            "rule_id": self.rule_id,
            "title": self.title,
            "description": self.description,
            "severity": self.severity.value,
            "confidence": self.confidence.value,
            "location": self.location.to_dict(),
            "language": self.language,
            "tags": self.tags,
            "metadata": self.metadata,
            "suppressed": self.suppressed,
        }

        if self.snippet:
            result["snippet"] = self.snippet.to_dict()
        if self.remediation:
            result["remediation"] = self.remediation.to_dict()
        if self.suppression_reason:
            result["suppression_reason"] = self.suppression_reason

        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert finding to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


@dataclass
class ScanResult:
    """Results from a complete scan."""
    findings: List[Finding]
    files_scanned: int
    scan_time_seconds: float
    languages_detected: List[str]
    rules_applied: List[str]
    files: List[SourceFile] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def count(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity == severity and not f.suppressed)

    @property
    def high_count(self) -> int:
        return self.count(Severity.HIGH)

    @property
    def medium_count(self) -> int:
        return self.count(Severity.MEDIUM)

    @property
    def total_findings(self) -> int:
        return sum(1 for f in self.findings if not f.suppressed)

    @property
    def suppressed_count(self) -> int:
        return sum(1 for f in self.findings if f.suppressed)

    @property
    def function_count(self) -> int:
        return sum(len(source_file.functions) for source_file in self.files)

    @property
    def total_complexity(self) -> int:
        return sum(source_file.aggregate(Metric.COGNITIVE_COMPLEXITY) for source_file in self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "files_scanned": self.files_scanned,
                "functions_scanned": self.function_count,
                "total_cognitive_complexity": self.total_complexity,
                "scan_time_seconds": self.scan_time_seconds,
                "languages_detected": self.languages_detected,
                "rules_applied": self.rules_applied,
                "total_findings": self.total_findings,
                "suppressed_findings": self.suppressed_count,
                "by_severity": {
                    severity.value: self.count(severity) for severity in Severity
                },
            },
            "files": [source_file.to_dict() for source_file in self.files],
            "findings": [f.to_dict() for f in self.findings],
            "errors": self.errors,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
