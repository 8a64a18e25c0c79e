"""
Main scanning engine for the complexity scanner.

This module orchestrates the scanning process: file discovery, parsing,
the scoring pass over each AST, and the threshold rules.
"""

import os
import time
import logging
from pathlib import Path
from typing import List, Dict, Any, Optional, Set, Generator, Tuple
from concurrent.futures import ThreadPoolExecutor, as_completed
import fnmatch

from cogscan.core.findings import Finding, ScanResult, Severity
from cogscan.core.nodes import AstNode
from cogscan.core.rules import AnalysisContext, registry
from cogscan.core.scorer import CognitiveComplexityScorer
from cogscan.core.source import Metric, SourceFile, SourceProject
from cogscan.core.walker import AstWalker, SourceCodeBuilderVisitor
from cogscan.parsers import get_parser
from cogscan.utils import is_binary_file

# Import rules to register them with the registry
import cogscan.rules  # noqa: F401

logger = logging.getLogger(__name__)


# Language detection by file extension
LANGUAGE_EXTENSIONS: Dict[str, List[str]] = {
    "c": [".c"],
    "cpp": [".cpp", ".cc", ".cxx", ".c++", ".hpp", ".hh", ".hxx", ".h", ".ipp", ".inl", ".tpp"],
}

# Reverse mapping for quick lookup
EXTENSION_TO_LANGUAGE: Dict[str, str] = {}
for lang, exts in LANGUAGE_EXTENSIONS.items():
    for ext in exts:
        EXTENSION_TO_LANGUAGE[ext] = lang


# Default ignore patterns
DEFAULT_IGNORE_PATTERNS = [
    ".git/**",
    ".svn/**",
    ".idea/**",
    ".vscode/**",
    "build/**",
    "cmake-build-*/**",
    "out/**",
    "third_party/**",
    "vendor/**",
    "external/**",
]


def score_ast(
    ast: Optional[AstNode],
    file_path: str = "<stdin>",
    language: str = "cpp",
    strict: bool = False,
) -> SourceFile:
    """
    Run one scoring pass over ``ast`` and return the scored file unit.

    A fresh walker and scorer are built for every call, so concurrent
    calls never share pass state.
    """
    scorer = CognitiveComplexityScorer.builder().strict(strict).build()
    walker = AstWalker([SourceCodeBuilderVisitor(key_prefix=f"{file_path}:"), scorer])
    source_file = SourceFile(key=file_path, name=os.path.basename(file_path), language=language)
    if ast is not None:
        source_file.start_line = ast.start_line
        source_file.end_line = ast.end_line
    return walker.walk_and_visit(ast, source_file)


class ScanEngine:
    """
    Main scanning engine that orchestrates the analysis process.

    The engine:
    1. Discovers files in the target directory
    2. Detects languages based on file extensions
    3. Parses files into ASTs
    4. Scores every function with its own walker and scorer
    5. Runs the threshold rules and collects findings
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.registry = registry
        self.errors: List[str] = []

        # Configuration options
        self.max_file_size = self.config.get("max_file_size", 10 * 1024 * 1024)  # 10MB
        self.max_workers = self.config.get("max_workers", 4)
        self.ignore_patterns = self.config.get("ignore_patterns", DEFAULT_IGNORE_PATTERNS)
        self.include_patterns = self.config.get("include_patterns", None)
        self.severity_threshold = Severity(self.config.get("severity_threshold", "info"))
        self.strict = self.config.get("strict", False)
        self.rule_config = self.config.get("rules", {})

    def detect_language(self, file_path: str) -> Optional[str]:
        """Detect the programming language of a file."""
        ext = os.path.splitext(file_path)[1].lower()
        return EXTENSION_TO_LANGUAGE.get(ext)

    def should_ignore(self, file_path: str, base_path: str) -> bool:
        """Check if a file should be ignored based on patterns."""
        rel_path = os.path.relpath(file_path, base_path)

        for pattern in self.ignore_patterns:
            if fnmatch.fnmatch(rel_path, pattern) or fnmatch.fnmatch(os.path.basename(file_path), pattern):
                return True
            # "dir/**" also matches the directory itself
            if pattern.endswith("/**") and fnmatch.fnmatch(rel_path, pattern[:-3]):
                return True

        return False

    def is_included(self, file_path: str, base_path: str) -> bool:
        if not self.include_patterns:
            return True
        rel_path = os.path.relpath(file_path, base_path)
        return any(
            fnmatch.fnmatch(rel_path, pattern) or fnmatch.fnmatch(os.path.basename(file_path), pattern)
            for pattern in self.include_patterns
        )

    def discover_files(self, target_path: str) -> Generator[str, None, None]:
        """Discover all files to scan in the target path."""
        target = Path(target_path)

        if target.is_file():
            yield str(target)
            return

        for root, dirs, files in os.walk(target):
            # Filter out ignored directories
            dirs[:] = sorted(d for d in dirs if not self.should_ignore(os.path.join(root, d), target_path))

            for file in sorted(files):
                file_path = os.path.join(root, file)

                if self.should_ignore(file_path, target_path) or not self.is_included(file_path, target_path):
                    continue

                # Check file size
                try:
                    if os.path.getsize(file_path) > self.max_file_size:
                        logger.debug("Skipping %s: larger than %d bytes", file_path, self.max_file_size)
                        continue
                except OSError:
                    continue

                # Only include files with recognized extensions
                if self.detect_language(file_path) and not is_binary_file(file_path):
                    yield file_path

    def read_file(self, file_path: str) -> Optional[str]:
        """Read a file's contents."""
        try:
            with open(file_path, "r", encoding="utf-8", errors="ignore") as f:
                return f.read()
        except OSError as e:
            self._error(f"Error reading {file_path}: {str(e)}")
            return None

    def parse_file(self, file_path: str, content: str, language: str) -> Optional[AstNode]:
        """Parse a file into an AST. Returns None if parsing fails."""
        try:
            return get_parser(language).parse(content, file_path)
        except (ValueError, RecursionError) as e:
            self._error(f"Error parsing {file_path}: {str(e)}")
            return None

    def scan_file(self, file_path: str) -> Tuple[Optional[SourceFile], List[Finding]]:
        """Scan a single file and return its scored unit and findings."""
        content = self.read_file(file_path)
        if content is None:
            return None, []

        language = self.detect_language(file_path)
        if not language:
            return None, []

        return self.scan_content(content, language, file_path)

    def scan_content(
        self,
        content: str,
        language: str,
        file_path: str = "<stdin>",
    ) -> Tuple[Optional[SourceFile], List[Finding]]:
        """
        Scan code content directly without reading from a file.

        Useful for editor integrations and testing.
        """
        start = time.perf_counter()
        ast = self.parse_file(file_path, content, language)
        if ast is None:
            return None, []

        try:
            source_file = score_ast(ast, file_path, language, strict=self.strict)
        except RecursionError:
            self._error(f"Error scoring {file_path}: syntax tree nested too deeply")
            return None, []

        logger.debug(
            "Scored %s: %d function(s) in %.3fs",
            file_path, len(source_file.functions), time.perf_counter() - start,
        )

        context = AnalysisContext(
            file_path=file_path,
            content=content,
            language=language,
            source_file=source_file,
            ast=ast,
            config=self.rule_config,
        )
        return source_file, self.run_rules(context)

    def run_rules(self, context: AnalysisContext) -> List[Finding]:
        """Run the enabled rules on a scored file."""
        findings: List[Finding] = []
        overrides = self.rule_config.get("severity_overrides", {})

        for rule in self.registry.get_rules_for_language(context.language, config=self.rule_config):
            for finding in rule.analyze(context):
                finding.language = context.language

                if finding.rule_id in overrides:
                    finding.severity = Severity(overrides[finding.rule_id])

                # Check suppression
                if context.is_line_suppressed(finding.location.start_line):
                    finding.suppressed = True
                    finding.suppression_reason = "Inline suppression comment"

                # Filter by severity threshold
                if finding.severity >= self.severity_threshold:
                    findings.append(finding)

        return findings

    def scan(self, target_path: str) -> ScanResult:
        """
        Scan a target path and return results.

        Args:
            target_path: Path to a file or directory to scan.

        Returns:
            ScanResult containing all findings, scored files and metadata.
        """
        start_time = time.time()
        all_findings: List[Finding] = []
        project = SourceProject(key=target_path, name=os.path.basename(os.path.abspath(target_path)))
        languages_detected: Set[str] = set()
        files_scanned = 0

        if not os.path.exists(target_path):
            raise FileNotFoundError(f"Scan target not found: {target_path}")

        files = list(self.discover_files(target_path))
        logger.info("Discovered %d file(s) under %s", len(files), target_path)

        def collect(file_path: str, source_file: Optional[SourceFile], findings: List[Finding]):
            nonlocal files_scanned
            files_scanned += 1
            all_findings.extend(findings)
            if source_file is not None:
                project.add_child(source_file)
                languages_detected.add(source_file.language)

        # Scan files (parallel if multiple)
        if len(files) > 1 and self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = {executor.submit(self.scan_file, f): f for f in files}

                for future in as_completed(futures):
                    file_path = futures[future]
                    try:
                        collect(file_path, *future.result())
                    except Exception as e:
                        self._error(f"Error scanning {file_path}: {str(e)}")
        else:
            for file_path in files:
                try:
                    collect(file_path, *self.scan_file(file_path))
                except Exception as e:
                    self._error(f"Error scanning {file_path}: {str(e)}")

        rules_applied = sorted({finding.rule_id for finding in all_findings})

        # Most severe first, then by position
        all_findings.sort(key=lambda f: (f.location.file_path, f.location.start_line))
        all_findings.sort(key=lambda f: f.severity, reverse=True)
        project.children.sort(key=lambda s: s.key)
        logger.info(
            "Scored %d function(s), total Cognitive Complexity %d",
            sum(len(source_file.functions) for source_file in project.files),
            project.aggregate(Metric.COGNITIVE_COMPLEXITY),
        )

        elapsed_time = time.time() - start_time

        return ScanResult(
            findings=all_findings,
            files_scanned=files_scanned,
            scan_time_seconds=round(elapsed_time, 3),
            languages_detected=sorted(languages_detected),
            rules_applied=rules_applied,
            files=project.files,
            errors=self.errors,
        )

    def _error(self, message: str) -> None:
        logger.warning(message)
        self.errors.append(message)


def create_engine(config_path: Optional[str] = None, **kwargs) -> ScanEngine:
    """
    Create a scan engine with configuration.

    Args:
        config_path: Optional path to a configuration file.
        **kwargs: Additional configuration options.

    Returns:
        Configured ScanEngine instance.
    """
    config: Dict[str, Any] = {}

    if config_path:
        from cogscan.config import load_scan_config
        config = load_scan_config(config_path).to_engine_config()

    config.update(kwargs)

    return ScanEngine(config)
