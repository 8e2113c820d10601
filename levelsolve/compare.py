"""Comparison of two solution vectors stored as text files."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Sequence

PathLike = str | os.PathLike

DEFAULT_TOLERANCE = 1e-12


@dataclass(frozen=True)
class Comparison:
    """Absolute differences between a reference and a candidate solution."""

    max_error: float
    mean_error: float
    tolerance: float
    passed: bool

    def report(self) -> str:
        """Human-readable summary, one figure per line, then the verdict."""
        verdict = (
            "PASS: Solutions match within tolerance."
            if self.passed
            else "FAIL: Differences exceed tolerance."
        )
        return "\n".join(
            [
                f"Max absolute error:  {self.max_error:.12f}",
                f"Mean absolute error: {self.mean_error:.12f}",
                f"Tolerance threshold: {self.tolerance:.12f}",
                verdict,
            ]
        )


def load_solution(path: PathLike) -> list[float]:
    """Read whitespace-separated numbers, stopping at the first token that is not one."""
    values: list[float] = []
    with open(path, encoding="utf-8") as fh:
        for token in fh.read().split():
            try:
                values.append(float(token))
            except ValueError:
                break
    return values


def compare_solutions(
    reference: Sequence[float],
    candidate: Sequence[float],
    tolerance: float = DEFAULT_TOLERANCE,
) -> Comparison:
    """Compare two vectors entry by entry; they must have the same length."""
    if len(reference) != len(candidate):
        raise ValueError(
            "Solution vectors have different sizes: "
            f"reference {len(reference)}, candidate {len(candidate)}"
        )
    errors = [abs(a - b) for a, b in zip(reference, candidate)]
    max_error = max(errors, default=0.0)
    mean_error = sum(errors) / len(errors) if errors else math.nan
    passed = all(error <= tolerance for error in errors)
    return Comparison(
        max_error=max_error,
        mean_error=mean_error,
        tolerance=tolerance,
        passed=passed,
    )