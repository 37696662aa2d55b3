"""
Simple helper to bump the prodscore version in source and pyproject.

Usage:
    python scripts/bump_version.py 0.2.0
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
INIT_PATH = ROOT / "prodscore" / "__init__.py"
PYPROJECT_PATH = ROOT / "pyproject.toml"


def replace_version_in_init(new_version: str) -> None:
    text = INIT_PATH.read_text()
    new_text, count = re.subn(r'__version__\s*=\s*"[^\"]+"', f'__version__ = "{new_version}"', text)
    if count == 0:
        raise SystemExit("Could not find __version__ in prodscore/__init__.py")
    INIT_PATH.write_text(new_text)


def replace_version_in_pyproject(new_version: str) -> None:
    """Update the static [project] version in pyproject.toml."""
    text = PYPROJECT_PATH.read_text()
    new_text, count = re.subn(
        r'^version\s*=\s*"[^\"]+"', f'version = "{new_version}"', text, count=1, flags=re.MULTILINE
    )
    if count == 0:
        raise SystemExit("Could not find version in pyproject.toml")
    PYPROJECT_PATH.write_text(new_text)


def main(new_version: str) -> None:
    replace_version_in_init(new_version)
    replace_version_in_pyproject(new_version)
    print(f"Bumped version to {new_version}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        raise SystemExit("Usage: python scripts/bump_version.py <new-version>")
    main(sys.argv[1])
