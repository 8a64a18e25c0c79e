"""
Entry point for running the scanner as a module.

Usage:
    python -m cogscan scan ./src
    python -m cogscan --help
"""

import sys
from cogscan.cli import main

if __name__ == "__main__":
    sys.exit(main())
