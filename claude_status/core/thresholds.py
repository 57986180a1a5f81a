"""Percentage → severity bucket → panel color."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"


SEVERITY_COLORS: dict[Severity, str] = {
    Severity.GREEN: "#5faf5f",
    Severity.YELLOW: "#d7af5f",
    Severity.ORANGE: "#d78700",
    Severity.RED: "#d75f5f",
}


def classify(pct: float, yellow: float, orange: float, red: float) -> Severity:
    """Bucket ``pct`` against ascending thresholds.

    Each bound is inclusive on the low side: a value equal to a threshold
    lands in the higher bucket.
    """
    if pct < yellow:
        return Severity.GREEN
    if pct < orange:
        return Severity.YELLOW
    if pct < red:
        return Severity.ORANGE
    return Severity.RED


def color_for(severity: Severity) -> str:
    return SEVERITY_COLORS[severity]
