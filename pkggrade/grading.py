"""Score-to-grade mapping and the pass/fail cutoff."""

from __future__ import annotations

from typing import Tuple

from .models import GradeResult

# Pass/fail cutoff, independent of the letter-grade table below.
DEFAULT_PASS_CUTOFF = 80

# Evaluated top-down; the first threshold the score reaches wins.
GRADE_THRESHOLDS: Tuple[Tuple[int, str], ...] = (
    (98, "S"),
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)
FAILING_GRADE = "F"

GRADE_EMOJI = {
    "S": "⭐",
    "A": "🏆",
    "B": "✅",
    "C": "⚠️",
    "D": "⚡",
    "F": "❌",
}


def validate_score(score: object) -> int:
    """Return ``score`` as an int, raising ValueError unless it is a whole number in 0..100."""
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError(f"Score must be a number, got {score!r}")
    if isinstance(score, float) and not score.is_integer():
        raise ValueError(f"Score must be a whole number, got {score!r}")
    value = int(score)
    if not 0 <= value <= 100:
        raise ValueError(f"Score must be within 0..100, got {value}")
    return value


def grade_for_score(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return FAILING_GRADE


def grade_result(score: object, reasoning: str = "") -> GradeResult:
    value = validate_score(score)
    return GradeResult(score=value, grade=grade_for_score(value), reasoning=reasoning)


def is_passing(score: int, cutoff: int = DEFAULT_PASS_CUTOFF) -> bool:
    return score >= cutoff


def grade_emoji(grade: str) -> str:
    return GRADE_EMOJI.get(grade, "❓")


__all__ = [
    "DEFAULT_PASS_CUTOFF",
    "FAILING_GRADE",
    "GRADE_EMOJI",
    "GRADE_THRESHOLDS",
    "grade_emoji",
    "grade_for_score",
    "grade_result",
    "is_passing",
    "validate_score",
]
