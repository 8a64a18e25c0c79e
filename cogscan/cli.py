"""
Command-line interface for the complexity scanner.

Scores every function of a C/C++ tree, reports the scores and the
functions above the configured thresholds.
"""

import argparse
import logging
import sys
import os
from typing import Optional, List

from cogscan import __version__
from cogscan.core.engine import ScanEngine
from cogscan.core.findings import ScanResult, Severity
from cogscan.config import ScanConfig, load_scan_config, create_default_config
from cogscan.formatters import get_formatter
from cogscan.logging_config import setup_logging
from cogscan.utils import normalize_path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".cogscan.yaml"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cogscan",
        description="Cognitive Complexity scanner for C and C++ code.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cogscan scan ./src                     # Scan a directory
  cogscan scan parser.cpp                # Scan a single file
  cogscan scan . --threshold 25          # Custom function threshold
  cogscan scan . --format sarif -o out   # SARIF output to file
  cogscan init                           # Create config file
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Scan command
    scan_parser = subparsers.add_parser("scan", help="Score functions and report complex ones")
    scan_parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Target file or directory to scan (default: config target or current directory)",
    )
    scan_parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
    )
    scan_parser.add_argument(
        "-f", "--format",
        choices=["text", "json", "sarif"],
        default=None,
        help="Output format (default: text)",
    )
    scan_parser.add_argument(
        "-o", "--output",
        help="Output file (default: stdout)",
    )
    scan_parser.add_argument(
        "--threshold",
        type=int,
        help="Maximum Cognitive Complexity allowed per function",
    )
    scan_parser.add_argument(
        "--file-threshold",
        type=int,
        help="Maximum total Cognitive Complexity allowed per file (0 disables)",
    )
    scan_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on identifiers that appear before any function definition",
    )
    scan_parser.add_argument(
        "-j", "--jobs",
        type=int,
        help="Number of parallel workers (default: 4)",
    )
    verbosity = scan_parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output and debug logging",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors",
    )
    scan_parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    # Init command
    init_parser = subparsers.add_parser("init", help="Create a configuration file")
    init_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite existing config file",
    )

    # List-rules command
    subparsers.add_parser("list-rules", help="List available rules")

    return parser


def build_config(args: argparse.Namespace) -> ScanConfig:
    """Load the config file and apply command-line overrides."""
    start_dir = args.target or "."
    config = load_scan_config(args.config, start_dir=start_dir)

    if args.target:
        config.target = args.target
    if args.format:
        config.output.format = args.format
    if args.output:
        config.output.output_file = args.output
    if args.threshold is not None:
        config.function_threshold = args.threshold
    if args.file_threshold is not None:
        config.file_threshold = args.file_threshold
    if args.strict:
        config.strict = True
    if args.jobs is not None:
        config.max_workers = args.jobs
    if args.verbose:
        config.output.verbose = True
    if args.no_color:
        config.output.color = False

    return config


def exit_code_for(result: ScanResult, fail_on_severity: str) -> int:
    """1 when an unsuppressed finding is at or above ``fail_on_severity``."""
    threshold = Severity(fail_on_severity)
    for finding in result.findings:
        if not finding.suppressed and finding.severity >= threshold:
            return 1
    return 0


def cmd_scan(args: argparse.Namespace) -> int:
    """Execute the scan command."""
    config = build_config(args)
    setup_logging(verbose=config.output.verbose, quiet=args.quiet)

    logger.info("Scanning %s", normalize_path(config.target))
    engine = ScanEngine(config.to_engine_config())
    result = engine.scan(config.target)

    output_format = config.output.format
    if output_format == "text":
        formatter = get_formatter(
            output_format,
            use_color=config.output.color and not config.output.output_file,
            verbose=config.output.verbose,
            show_functions=config.output.show_functions,
            threshold=config.function_threshold,
        )
    else:
        formatter = get_formatter(output_format, include_suppressed=config.output.show_suppressed)

    output = formatter.format_result(result)

    if config.output.output_file:
        with open(config.output.output_file, "w", encoding="utf-8") as f:
            f.write(output)
        if output_format == "text" and not args.quiet:
            print(f"Results written to {config.output.output_file}")
    else:
        print(output)

    return exit_code_for(result, config.output.fail_on_severity)


def cmd_init(args: argparse.Namespace) -> int:
    """Execute the init command."""
    if os.path.exists(DEFAULT_CONFIG_FILE) and not args.force:
        print(f"Configuration file {DEFAULT_CONFIG_FILE} already exists.")
        print("Use --force to overwrite.")
        return 1

    with open(DEFAULT_CONFIG_FILE, "w", encoding="utf-8") as f:
        f.write(create_default_config())

    print(f"Created configuration file: {DEFAULT_CONFIG_FILE}")
    return 0


def cmd_list_rules(args: argparse.Namespace) -> int:
    """Execute the list-rules command."""
    from cogscan.core.rules import RuleRegistry

    # Import rules to register them
    import cogscan.rules  # noqa: F401

    registry = RuleRegistry.get_instance()
    rules = registry.get_all_rules()

    print("\nAvailable Rules")
    print("=" * 70)
    for rule in rules:
        meta = rule.metadata
        status = "+" if meta.enabled_by_default else "-"
        print(f"  {status} {meta.rule_id:<14} {meta.name:<34} [{meta.severity.value}]")

    print(f"\nTotal: {len(rules)} rules")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "scan": cmd_scan,
        "init": cmd_init,
        "list-rules": cmd_list_rules,
    }

    try:
        return commands[args.command](args)
    except KeyboardInterrupt:
        print("\nScan interrupted.")
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if os.environ.get("DEBUG"):
            raise
        return 1


if __name__ == "__main__":
    sys.exit(main())
