"""
SARIF output formatter for IDE and code-review integration.

Rule descriptors come from the rule registry. Each result names the
offending function as a logical location and carries the measured
complexity and threshold in its properties.
"""

import json
from typing import Dict, Any
from datetime import datetime, timezone

import cogscan.rules  # noqa: F401
from cogscan import __version__
from cogscan.core.findings import Finding, ScanResult, Severity
from cogscan.core.rules import RuleMetadata, registry


SARIF_LEVEL = {
    Severity.CRITICAL: "error",
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
    Severity.LOW: "note",
    Severity.INFO: "none",
}


class SARIFFormatter:
    """
    Formats scan results in SARIF 2.1.0.
    """

    SARIF_VERSION = "2.1.0"
    SCHEMA_URI = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"

    def __init__(self, include_suppressed: bool = False):
        self.include_suppressed = include_suppressed

    def format_result(self, result: ScanResult) -> str:
        """Format a complete scan result in SARIF format."""
        rules = [rule.metadata for rule in registry.get_all_rules()]
        rule_index = {meta.rule_id: position for position, meta in enumerate(rules)}
        findings = [f for f in result.findings if self.include_suppressed or not f.suppressed]

        run = {
            "tool": {
                "driver": {
                    "name": "cogscan",
                    "version": __version__,
                    "rules": [self._descriptor(meta) for meta in rules],
                }
            },
            "results": [self._result(finding, rule_index) for finding in findings],
            "invocations": [{
                "executionSuccessful": not result.errors,
                "endTimeUtc": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
                "toolExecutionNotifications": [
                    {"level": "error", "message": {"text": error}} for error in result.errors
                ],
            }],
        }
        return json.dumps({"$schema": self.SCHEMA_URI, "version": self.SARIF_VERSION, "runs": [run]}, indent=2)

    def _descriptor(self, meta: RuleMetadata) -> Dict[str, Any]:
        descriptor = {
            "id": meta.rule_id,
            "name": meta.name.replace(" ", ""),
            "shortDescription": {"text": meta.name},
            "fullDescription": {"text": meta.description},
            "defaultConfiguration": {
                "enabled": meta.enabled_by_default,
                "level": SARIF_LEVEL[meta.severity],
            },
            "properties": {"tags": meta.tags},
        }
        if meta.references:
            descriptor["helpUri"] = meta.references[0]
        return descriptor

    def _result(self, finding: Finding, rule_index: Dict[str, int]) -> Dict[str, Any]:
        location: Dict[str, Any] = {
            "physicalLocation": {
                "artifactLocation": {"uri": finding.location.file_path},
                "region": {
                    "startLine": finding.location.start_line,
                    "endLine": finding.location.end_line,
                },
            },
        }
        function_name = finding.metadata.get("function_name")
        if function_name:
            location["logicalLocations"] = [{"fullyQualifiedName": function_name, "kind": "function"}]
        if finding.snippet:
            location["physicalLocation"]["region"]["snippet"] = {"text": finding.snippet.code}

        sarif_result: Dict[str, Any] = {
            "ruleId": finding.rule_id,
            "level": SARIF_LEVEL[finding.severity],
            "message": {"text": finding.description},
            "locations": [location],
            "properties": {"language": finding.language, **finding.metadata},
        }
        if finding.rule_id in rule_index:
            sarif_result["ruleIndex"] = rule_index[finding.rule_id]
        if finding.suppressed:
            sarif_result["suppressions"] = [{
                "kind": "inSource",
                "justification": finding.suppression_reason or "Suppressed by inline comment",
            }]
        return sarif_result
