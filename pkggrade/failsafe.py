"""Canned results for analyses that cannot run."""

from __future__ import annotations

from .analyzers.dependencies import MANIFEST_PATH
from .grading import FAILING_GRADE, grade_emoji
from .models import FinalReport

MANIFEST_MISSING_REASON = f"No {MANIFEST_PATH} found in repository."


def build_manifest_missing_report() -> FinalReport:
    """Return the fixed failure result used when the repository has no manifest."""
    report = f"# Analysis Failed {grade_emoji(FAILING_GRADE)}\n\n{MANIFEST_MISSING_REASON}"
    return FinalReport(
        passed=False,
        score=0,
        grade=FAILING_GRADE,
        report=report,
        reasoning=MANIFEST_MISSING_REASON,
    )


__all__ = ["MANIFEST_MISSING_REASON", "build_manifest_missing_report"]
