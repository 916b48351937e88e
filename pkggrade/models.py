"""Core data models shared across pkggrade components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class RepositoryFile:
    """A file fetched from the remote repository during traversal."""

    path: str
    name: str
    content: str
    download_url: Optional[str] = None


@dataclass(frozen=True)
class DetectionRule:
    """File suffixes and literal code fragments that evidence a package is used."""

    file_patterns: Tuple[str, ...]
    code_patterns: Tuple[str, ...]

    def matches_path(self, path: str) -> bool:
        return any(path.endswith(pattern) for pattern in self.file_patterns)

    def matches_content(self, content: str) -> bool:
        return any(pattern in content for pattern in self.code_patterns)


@dataclass(frozen=True)
class ImplementationResult:
    """Outcome of searching the repository for usage of one package."""

    implemented: bool
    file: Optional[str] = None
    content: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"implemented": self.implemented}
        if self.file is not None:
            data["file"] = self.file
        if self.content is not None:
            data["content"] = self.content
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass
class AnalysisResult:
    """Dependency flags and implementation evidence per required package."""

    dependencies: Dict[str, bool] = field(default_factory=dict)
    implementation: Dict[str, ImplementationResult] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dependencies": dict(self.dependencies),
            "implementation": {
                name: result.to_dict() for name, result in self.implementation.items()
            },
        }


@dataclass(frozen=True)
class QualityAssessment:
    """Scored assessment returned by the quality oracle."""

    score: int
    reasoning: str
    key_findings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "reasoning": self.reasoning,
            "keyFindings": list(self.key_findings),
        }


@dataclass(frozen=True)
class SuggestionSet:
    """Improvement suggestions with a priority label for each."""

    suggestions: List[str] = field(default_factory=list)
    priority: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"suggestions": list(self.suggestions), "priority": list(self.priority)}


@dataclass(frozen=True)
class OracleFailure:
    """Marker recorded in place of an oracle result that is unavailable."""

    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error}


Assessment = Union[QualityAssessment, OracleFailure]
Suggestions = Union[SuggestionSet, OracleFailure]


@dataclass
class QualityAnalysis:
    """Per-package oracle output gathered before final scoring."""

    code_quality: Dict[str, Assessment] = field(default_factory=dict)
    implementation_quality: Dict[str, Assessment] = field(default_factory=dict)
    suggestions: Dict[str, Suggestions] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "codeQuality": {name: value.to_dict() for name, value in self.code_quality.items()},
            "implementationQuality": {
                name: value.to_dict() for name, value in self.implementation_quality.items()
            },
            "suggestions": {name: value.to_dict() for name, value in self.suggestions.items()},
        }


@dataclass(frozen=True)
class GradeResult:
    """Overall score, its letter grade and the oracle's reasoning."""

    score: int
    grade: str
    reasoning: str


@dataclass
class FinalReport:
    """Public result of an analysis run."""

    passed: bool
    score: int
    grade: str
    report: str
    reasoning: str = ""
    analysis: Optional[AnalysisResult] = None
    quality: Optional[QualityAnalysis] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pass": self.passed,
            "score": self.score,
            "grade": self.grade,
            "report": self.report,
        }
