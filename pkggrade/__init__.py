"""Grade repositories on whether required packages are declared and used."""

from .grading import DEFAULT_PASS_CUTOFF, grade_for_score
from .models import (
    AnalysisResult,
    DetectionRule,
    FinalReport,
    GradeResult,
    ImplementationResult,
    RepositoryFile,
)
from .orchestrator import PackageAnalyzer

__all__ = [
    "AnalysisResult",
    "DEFAULT_PASS_CUTOFF",
    "DetectionRule",
    "FinalReport",
    "GradeResult",
    "ImplementationResult",
    "PackageAnalyzer",
    "RepositoryFile",
    "grade_for_score",
]
