"""
Helpers to turn JSON score outputs into a compact, human-readable
console summary. Useful for quickly scanning saved score files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def _fmt_float(value: Any, unit: str = "", zero_default: str = "n/a") -> str:
    """Safely format a float with optional unit suffix."""
    try:
        fval = float(value)
    except (TypeError, ValueError):
        return zero_default
    suffix = f" {unit}" if unit else ""
    if abs(fval) >= 100:
        return f"{fval:,.0f}{suffix}"
    return f"{fval:.2f}{suffix}"


def _gate_line(gates: dict[str, Any] | None) -> str:
    if not gates:
        return "n/a"
    return ", ".join(
        f"{name} {'PASS' if passed else 'FAIL'}" for name, passed in gates.items()
    )


def render_score_summary(data: dict[str, Any]) -> list[str]:
    """
    Build summary lines for one ScoreResult-shaped dict.

    Args:
        data: A ScoreResult as dumped to JSON.

    Returns:
        Lines ready to print.
    """
    lines = [
        f"Opportunity: {data.get('name', '?')}",
        f"Score: {data.get('score', '?')} | "
        f"Gates passed: {data.get('gates_passed', '?')}/4 | "
        f"Recommendation: {str(data.get('recommendation', '?')).upper()}",
        f"Gates: {_gate_line(data.get('gates'))}",
    ]

    breakdown = data.get("breakdown") or []
    if breakdown:
        lines.append("Criteria:")
        for row in breakdown:
            flag = " (inverted)" if row.get("inverted") else ""
            lines.append(
                f"  - {row.get('label', row.get('id', '?'))}{flag}: "
                f"value {_fmt_float(row.get('value'))} / {_fmt_float(row.get('max_value'))}, "
                f"normalized {_fmt_float(row.get('normalized'))}, "
                f"weight {_fmt_float(row.get('weight'))}, "
                f"contributes {_fmt_float(row.get('contribution'))}"
            )

    warnings = data.get("warnings") or []
    if warnings:
        lines.append("Warnings:")
        lines.extend(f"  - {w}" for w in warnings)

    return lines


def print_readable_output(json_path: Path) -> None:
    """
    Print a human-friendly summary of a score JSON file.

    Args:
        json_path: Path to the JSON output file.
    """
    data = json.loads(Path(json_path).read_text())
    for line in render_score_summary(data):
        print(line)
