"""
Cognitive Complexity threshold rules.

Flags functions, and optionally whole files, whose accumulated score is
above the configured limit.
"""

from typing import Generator

from cogscan.core.rules import (
    Rule, RuleMetadata, AnalysisContext, rule
)
from cogscan.core.findings import (
    Finding, Severity, Confidence, CodeLocation, Remediation
)
from cogscan.core.source import Metric

REFERENCES = [
    "https://www.sonarsource.com/docs/CognitiveComplexity.pdf",
]

REMEDIATION = (
    "Reduce nesting with early returns, extract deeply nested blocks into "
    "helper functions, and replace long conditional chains with lookups "
    "or polymorphism."
)


@rule
class FunctionCognitiveComplexityRule(Rule):
    """
    Detects functions whose Cognitive Complexity is above the threshold.

    Severity escalates to HIGH once a function reaches twice the threshold.
    """

    @property
    def metadata(self) -> RuleMetadata:
        return RuleMetadata(
            rule_id="COG-FUNC-001",
            name="Function Cognitive Complexity",
            description="Detects functions that are too hard to understand because of nested and branching control flow.",
            severity=Severity.MEDIUM,
            confidence=Confidence.HIGH,
            languages=["*"],
            tags=["complexity", "maintainability", "readability"],
            references=REFERENCES,
            enabled_by_default=True,
        )

    def __init__(self, config: dict = None):
        super().__init__(config)
        self.threshold = self.config.get("function_threshold", 15)

    def analyze(self, context: AnalysisContext) -> Generator[Finding, None, None]:
        """Analyze each scored function of the file."""
        for function in context.source_file.functions:
            complexity = function.get_int(Metric.COGNITIVE_COMPLEXITY)
            if complexity <= self.threshold:
                continue

            severity = Severity.HIGH if complexity >= 2 * self.threshold else Severity.MEDIUM

            location = CodeLocation(
                file_path=context.file_path,
                start_line=function.start_line,
                end_line=function.end_line,
            )

            yield self.create_finding(
                location=location,
                snippet=context.get_snippet(function.start_line),
                severity=severity,
                description=(
                    f"Function '{function.qualified_name}' has a Cognitive Complexity of "
                    f"{complexity} (threshold: {self.threshold})."
                ),
                remediation=Remediation(description=REMEDIATION, references=REFERENCES),
                metadata={
                    "complexity": complexity,
                    "threshold": self.threshold,
                    "function_name": function.qualified_name,
                },
            )


@rule
class FileCognitiveComplexityRule(Rule):
    """
    Detects files whose total Cognitive Complexity is above the threshold.

    Off unless ``file_threshold`` is set to a positive value.
    """

    @property
    def metadata(self) -> RuleMetadata:
        return RuleMetadata(
            rule_id="COG-FILE-001",
            name="File Cognitive Complexity",
            description="Detects files whose functions are, taken together, too complex.",
            severity=Severity.LOW,
            confidence=Confidence.HIGH,
            languages=["*"],
            tags=["complexity", "maintainability"],
            references=REFERENCES,
            enabled_by_default=True,
        )

    def __init__(self, config: dict = None):
        super().__init__(config)
        self.threshold = self.config.get("file_threshold", 0)

    def analyze(self, context: AnalysisContext) -> Generator[Finding, None, None]:
        if self.threshold <= 0:
            return

        total = context.source_file.aggregate(Metric.COGNITIVE_COMPLEXITY)
        if total <= self.threshold:
            return

        yield self.create_finding(
            location=CodeLocation(
                file_path=context.file_path,
                start_line=1,
                end_line=max(len(context.lines), 1),
            ),
            description=(
                f"File has a total Cognitive Complexity of {total} "
                f"(threshold: {self.threshold}). Consider splitting it."
            ),
            remediation=Remediation(
                description="Split the file along its responsibilities. " + REMEDIATION,
                references=REFERENCES,
            ),
            metadata={"complexity": total, "threshold": self.threshold},
        )
