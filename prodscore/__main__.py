"""
Entry point for running prodscore as a module.

Usage:
    python -m prodscore score --input opportunity.json
    python -m prodscore make-example
    python -m prodscore serve --port 8000
"""

import sys

from prodscore.cli.main import cli

if __name__ == "__main__":
    sys.exit(cli())
