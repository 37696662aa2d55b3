"""
Quick formatter for a saved score result to make it easier to skim.

Usage:
    python pretty_score_output.py
    python pretty_score_output.py --input path/to/result.json
"""

from __future__ import annotations

import argparse
from pathlib import Path

from prodscore.cli.readable_output import print_readable_output


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Print a readable summary of a score result JSON file"
    )
    parser.add_argument(
        "--input",
        "-i",
        type=Path,
        default=Path("score_result.json"),
        help="Path to a score result JSON file (default: score_result.json)",
    )
    args = parser.parse_args()

    print_readable_output(json_path=args.input)


if __name__ == "__main__":
    main()
