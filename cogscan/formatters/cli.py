"""
CLI output formatter for human-readable results.
"""

from typing import List
import sys

from cogscan.core.findings import Finding, ScanResult, Severity
from cogscan.core.source import Metric, SourceFile
from cogscan.utils import truncate_string


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"

    BG_RED = "\033[41m"


def supports_color() -> bool:
    """Check if the terminal supports color output."""
    if not hasattr(sys.stdout, "isatty"):
        return False
    return sys.stdout.isatty()


class CLIFormatter:
    """
    Formats scan results for human-readable CLI output.
    """

    NAME_WIDTH = 48

    def __init__(
        self,
        use_color: bool = True,
        verbose: bool = False,
        show_functions: bool = True,
        threshold: int = 15,
    ):
        self.use_color = use_color and supports_color()
        self.verbose = verbose
        self.show_functions = show_functions
        self.threshold = threshold

    def _color(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if self.use_color:
            return f"{color}{text}{Colors.RESET}"
        return text

    def _severity_color(self, severity: Severity) -> str:
        colors = {
            Severity.CRITICAL: Colors.BG_RED + Colors.WHITE,
            Severity.HIGH: Colors.RED,
            Severity.MEDIUM: Colors.YELLOW,
            Severity.LOW: Colors.BLUE,
            Severity.INFO: Colors.DIM,
        }
        return colors.get(severity, "")

    def _severity_label(self, severity: Severity) -> str:
        return self._color(f"[{severity.value.upper()}]", self._severity_color(severity))

    def _score_color(self, score: int) -> str:
        if score > 2 * self.threshold:
            return Colors.RED
        if score > self.threshold:
            return Colors.YELLOW
        return Colors.GREEN

    def format_result(self, result: ScanResult) -> str:
        """Format a complete scan result."""
        lines = []

        # Header
        lines.append("")
        lines.append(self._color("=" * 70, Colors.DIM))
        lines.append(self._color(" COGNITIVE COMPLEXITY RESULTS ", Colors.BOLD))
        lines.append(self._color("=" * 70, Colors.DIM))
        lines.append("")

        # Summary
        lines.append(self._color("Summary", Colors.BOLD))
        lines.append(self._color("-" * 40, Colors.DIM))
        lines.append(f"  Files scanned:     {result.files_scanned}")
        lines.append(f"  Functions:         {result.function_count}")
        lines.append(f"  Total complexity:  {result.total_complexity}")
        lines.append(f"  Languages:         {', '.join(result.languages_detected) or '-'}")
        lines.append(f"  Scan time:         {result.scan_time_seconds:.2f}s")
        lines.append("")

        if self.show_functions and result.files:
            lines.append(self._color("Functions", Colors.BOLD))
            lines.append(self._color("-" * 40, Colors.DIM))
            for source_file in result.files:
                lines.extend(self._format_file(source_file))
            lines.append("")

        # Findings summary
        lines.append(self._color("Findings", Colors.BOLD))
        lines.append(self._color("-" * 40, Colors.DIM))

        if result.total_findings == 0:
            lines.append(self._color("  No functions above the threshold.", Colors.GREEN))
        else:
            for severity in (Severity.HIGH, Severity.MEDIUM, Severity.LOW):
                lines.append(f"  {self._severity_label(severity)} {result.count(severity)}")

        if result.suppressed_count > 0:
            lines.append(f"  Suppressed:        {result.suppressed_count}")

        lines.append("")

        shown = [f for f in result.findings if self.verbose or not f.suppressed]
        if shown:
            lines.append(self._color("=" * 70, Colors.DIM))
            lines.append(self._color(" DETAILED FINDINGS ", Colors.BOLD))
            lines.append(self._color("=" * 70, Colors.DIM))
            lines.append("")
            for finding in shown:
                lines.extend(self._format_finding(finding))
                lines.append("")

        # Errors
        if result.errors:
            lines.append(self._color("=" * 70, Colors.DIM))
            lines.append(self._color(" ERRORS ", Colors.RED))
            lines.append(self._color("=" * 70, Colors.DIM))
            for error in result.errors:
                lines.append(f"  * {error}")
            lines.append("")

        return "\n".join(lines)

    def _format_file(self, source_file: SourceFile) -> List[str]:
        total = source_file.aggregate(Metric.COGNITIVE_COMPLEXITY)
        lines = [self._color(f"  {source_file.key}  (total {total})", Colors.CYAN)]

        functions = source_file.functions
        if not functions:
            lines.append(self._color("    no functions", Colors.DIM))
        for function in functions:
            score = function.get_int(Metric.COGNITIVE_COMPLEXITY)
            name = truncate_string(function.qualified_name, self.NAME_WIDTH)
            lines.append(
                f"    {function.start_line:5}  {name:<{self.NAME_WIDTH}} "
                f"{self._color(f'{score:4}', self._score_color(score))}"
            )
        return lines

    def _format_finding(self, finding: Finding) -> List[str]:
        """Format a single finding."""
        lines = []

        severity_label = self._severity_label(finding.severity)
        if finding.suppressed:
            title = self._color(f"[SUPPRESSED] {finding.title}", Colors.DIM)
        else:
            title = self._color(finding.title, Colors.BOLD)

        lines.append(f"  {severity_label} {title}")
        lines.append(f"  {self._color('Location:', Colors.DIM)} {finding.location}")
        lines.append(f"  {self._color('Rule:', Colors.DIM)} {finding.rule_id}")
        lines.append("")
        lines.append(f"  {finding.description}")

        if finding.snippet and finding.snippet.code:
            lines.append("")
            lines.append(self._color(
                f"  > {finding.snippet.highlighted_line:4} | {finding.snippet.code}",
                Colors.RED if finding.severity >= Severity.HIGH else Colors.YELLOW,
            ))

        if finding.remediation and self.verbose:
            lines.append("")
            lines.append(self._color("  Remediation:", Colors.GREEN))
            lines.append(f"    {finding.remediation.description}")
            for ref in finding.remediation.references[:3]:
                lines.append(f"      * {ref}")

        lines.append(self._color("  " + "-" * 66, Colors.DIM))
        return lines

    def format_finding(self, finding: Finding) -> str:
        """Format a single finding."""
        return "\n".join(self._format_finding(finding))
