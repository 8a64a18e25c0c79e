"""
Configuration system for the complexity scanner.

Supports YAML and JSON configuration files for customizing
scanning behavior, thresholds, rules, and output.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field, asdict

import yaml


# Default configuration file names to search for
CONFIG_FILE_NAMES = [
    ".cogscan.yaml",
    ".cogscan.yml",
    ".cogscan.json",
    "cogscan.yaml",
    "cogscan.yml",
    "cogscan.json",
]

DEFAULT_FUNCTION_THRESHOLD = 15


@dataclass
class RuleSetConfig:
    """Configuration for the rule set."""
    enabled: List[str] = field(default_factory=list)
    disabled: List[str] = field(default_factory=list)
    severity_overrides: Dict[str, str] = field(default_factory=dict)
    custom_config: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OutputConfig:
    """Configuration for output formatting."""
    format: str = "text"  # text, json, sarif
    output_file: Optional[str] = None
    verbose: bool = False
    show_suppressed: bool = False
    show_functions: bool = True
    color: bool = True
    fail_on_severity: str = "medium"


@dataclass
class ScanConfig:
    """
    Main configuration for the complexity scanner.

    Example YAML config:

    ```yaml
    scan:
      target: ./src
      exclude:
        - "third_party/**"
      include:
        - "*.cpp"
        - "*.hpp"
      max_file_size: 10485760
      max_workers: 4
      strict: false

    thresholds:
      function: 15
      file: 200

    rules:
      disabled:
        - COG-FILE-001
      severity_overrides:
        COG-FUNC-001: high

    output:
      format: text
      verbose: false
      color: true
      fail_on_severity: medium
    ```
    """
    # Scan settings
    target: str = "."
    exclude_patterns: List[str] = field(default_factory=lambda: [
        ".git/**",
        "build/**",
        "cmake-build-*/**",
        "third_party/**",
        "vendor/**",
    ])
    include_patterns: Optional[List[str]] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    max_workers: int = 4
    strict: bool = False

    # Thresholds
    function_threshold: int = DEFAULT_FUNCTION_THRESHOLD
    file_threshold: int = 0  # 0 disables the file rule

    # Rule settings
    rules: RuleSetConfig = field(default_factory=RuleSetConfig)
    severity_threshold: str = "info"  # critical, high, medium, low, info

    # Output settings
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to a dictionary."""
        return asdict(self)

    def to_engine_config(self) -> Dict[str, Any]:
        """Convert to engine configuration format."""
        return {
            "max_file_size": self.max_file_size,
            "max_workers": self.max_workers,
            "ignore_patterns": self.exclude_patterns,
            "include_patterns": self.include_patterns,
            "severity_threshold": self.severity_threshold,
            "strict": self.strict,
            "rules": {
                "enabled": self.rules.enabled,
                "disabled": self.rules.disabled,
                "severity_overrides": self.rules.severity_overrides,
                "function_threshold": self.function_threshold,
                "file_threshold": self.file_threshold,
                **self.rules.custom_config,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanConfig":
        """Create config from a dictionary."""
        data = dict(data)

        # Handle nested configs
        if "rules" in data and isinstance(data["rules"], dict):
            data["rules"] = RuleSetConfig(**data["rules"])
        if "output" in data and isinstance(data["output"], dict):
            data["output"] = OutputConfig(**data["output"])

        thresholds = data.pop("thresholds", None) or {}
        if "function" in thresholds:
            data["function_threshold"] = thresholds["function"]
        if "file" in thresholds:
            data["file_threshold"] = thresholds["file"]

        # Map some common alternative names
        if "exclude" in data:
            data["exclude_patterns"] = data.pop("exclude")
        if "include" in data:
            data["include_patterns"] = data.pop("include")

        # Filter to only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        return cls(**filtered_data)


def load_config(path: str) -> Dict[str, Any]:
    """
    Load configuration from a file.

    Supports YAML and JSON formats.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    content = path.read_text(encoding="utf-8")

    if path.suffix == ".json":
        data = json.loads(content)
    else:
        # YAML is a superset of JSON
        data = yaml.safe_load(content)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def find_config(start_path: str = ".") -> Optional[str]:
    """
    Find a configuration file by searching up the directory tree.

    Returns the path to the first config file found, or None.
    """
    current = Path(start_path).resolve()
    if current.is_file():
        current = current.parent

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.exists():
                return str(config_path)
        if current == current.parent:
            return None
        current = current.parent


def load_scan_config(path: Optional[str] = None, start_dir: str = ".") -> ScanConfig:
    """
    Load a ScanConfig from a file or create a default one.

    If path is None, searches for a config file starting from start_dir.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return ScanConfig()

    data = load_config(path)

    # Handle nested 'scan' section
    if "scan" in data:
        scan_data = data.pop("scan")
        data.update(scan_data)

    return ScanConfig.from_dict(data)


def create_default_config() -> str:
    """
    Create a default configuration file content.
    """
    config = {
        "scan": {
            "target": ".",
            "exclude": [
                ".git/**",
                "build/**",
                "cmake-build-*/**",
                "third_party/**",
                "vendor/**",
            ],
            "max_file_size": 10485760,
            "max_workers": 4,
            "strict": False,
        },
        "thresholds": {
            "function": DEFAULT_FUNCTION_THRESHOLD,
            "file": 0,
        },
        "rules": {
            "enabled": [],
            "disabled": [],
            "severity_overrides": {},
        },
        "output": {
            "format": "text",
            "verbose": False,
            "color": True,
            "show_functions": True,
            "fail_on_severity": "medium",
        },
    }

    return yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
