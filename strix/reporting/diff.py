"""
Compares the strings found in two files.
"""
import os
from dataclasses import dataclass, field

from colorama import Fore, Style


@dataclass
class DiffResult:
    only_a: list = field(default_factory=list)
    only_b: list = field(default_factory=list)
    common: int = 0


def compare(results_a, results_b):
    """Set difference and intersection of two result sets by exact value."""
    values_a = {c.value for c in results_a}
    values_b = {c.value for c in results_b}
    return DiffResult(
        only_a=sorted(values_a - values_b),
        only_b=sorted(values_b - values_a),
        common=len(values_a & values_b),
    )


def generate_diff_report(diff, file_a, file_b, color=False):
    name_a = os.path.basename(file_a)
    name_b = os.path.basename(file_b)

    def paint(text, style):
        return f"{style}{text}{Style.RESET_ALL}" if color else text

    lines = [
        "",
        "  " + paint("DIFF RESULTS", Style.BRIGHT),
        "  " + "=" * 54,
        f"  Common:               {diff.common:8d}",
        f"  Only in {name_a:<12}: {len(diff.only_a):6d}",
        f"  Only in {name_b:<12}: {len(diff.only_b):6d}",
        "  " + "=" * 54,
    ]
    if diff.only_a:
        lines.append("")
        lines.append("  " + paint(f"--- Only in {name_a} ---", Fore.RED))
        lines.extend(f"  {paint('-', Fore.RED)} {value}" for value in diff.only_a)
    if diff.only_b:
        lines.append("")
        lines.append("  " + paint(f"+++ Only in {name_b} +++", Fore.GREEN))
        lines.extend(f"  {paint('+', Fore.GREEN)} {value}" for value in diff.only_b)
    return "\n".join(lines)
