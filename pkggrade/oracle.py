"""Quality oracle: scoring, suggestions and report prose from the LLM."""

from __future__ import annotations

import json
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple, TypeVar

from .grading import grade_result, validate_score
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import (
    AnalysisResult,
    Assessment,
    GradeResult,
    OracleFailure,
    QualityAnalysis,
    QualityAssessment,
    SuggestionSet,
    Suggestions,
)
from .prompting.builder import PromptBuilder, PromptRequest

NOT_IMPLEMENTED_ERROR = "No implementation found"
CODE_QUALITY_ERROR = "Failed to analyze code"
IMPLEMENTATION_QUALITY_ERROR = "Failed to analyze implementation"
SUGGESTIONS_ERROR = "Failed to generate suggestions"

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```$", re.DOTALL)

T = TypeVar("T")


class OracleError(RuntimeError):
    """Base class for failures of a single oracle call."""


class OracleInvocationError(OracleError):
    """Raised when the completion service could not be reached or failed."""


class OracleParseError(OracleError):
    """Raised when a completion is not valid JSON of the expected shape."""


def parse_json_payload(text: str) -> Dict[str, Any]:
    """Decode a JSON object from a completion, tolerating a surrounding code fence."""
    cleaned = text.strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        cleaned = match.group(1).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise OracleParseError(f"Completion is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise OracleParseError("Completion JSON must be an object")
    return payload


def _score_from(payload: Dict[str, Any]) -> int:
    try:
        return validate_score(payload.get("score"))
    except ValueError as exc:
        raise OracleParseError(str(exc)) from exc


def _string_list(payload: Dict[str, Any], key: str) -> List[str]:
    value = payload.get(key, [])
    if not isinstance(value, list):
        raise OracleParseError(f"'{key}' must be a list of strings")
    return [str(item) for item in value]


def _reasoning_from(payload: Dict[str, Any]) -> str:
    reasoning = payload.get("reasoning", "")
    if not isinstance(reasoning, str):
        raise OracleParseError("'reasoning' must be a string")
    return reasoning


class QualityOracle:
    """Issues the structured LLM calls that judge package usage."""

    def __init__(
        self,
        runner: LLMRunner,
        prompt_builder: PromptBuilder | None = None,
        *,
        workers: int = 1,
        temperature: float | None = None,
    ) -> None:
        self.runner = runner
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.workers = max(1, workers)
        # When set, replaces the per-call temperature of every prompt.
        self.temperature = temperature
        self.logger = get_logger("oracle")

    def assess_code_quality(self, package: str, content: str) -> QualityAssessment:
        payload = self._complete_json(self.prompt_builder.code_quality(package, content))
        return self._assessment(payload)

    def assess_implementation_quality(self, package: str, content: str) -> QualityAssessment:
        payload = self._complete_json(self.prompt_builder.implementation_quality(package, content))
        return self._assessment(payload)

    def suggest_improvements(self, package: str, content: str) -> SuggestionSet:
        payload = self._complete_json(self.prompt_builder.suggestions(package, content))
        return SuggestionSet(
            suggestions=_string_list(payload, "suggestions"),
            priority=_string_list(payload, "priority"),
        )

    def overall_score(self, quality: QualityAnalysis) -> GradeResult:
        """Return the aggregate score and grade; out-of-range scores raise OracleParseError."""
        payload = self._complete_json(self.prompt_builder.score(quality))
        score = _score_from(payload)
        return grade_result(score, _reasoning_from(payload))

    def render_report(
        self,
        analysis: AnalysisResult,
        quality: QualityAnalysis,
        grade: GradeResult,
        *,
        passed: bool,
    ) -> str:
        request = self.prompt_builder.report(analysis, quality, grade, passed=passed)
        return self._complete(request)

    def analyze_packages(
        self, analysis: AnalysisResult, packages: Sequence[str]
    ) -> QualityAnalysis:
        """Run the three per-package calls for every implemented package.

        Packages without implementation evidence never reach the LLM; each of
        the three calls degrades to an ``OracleFailure`` marker on error.
        """
        quality = QualityAnalysis()
        implemented: List[Tuple[str, str]] = []
        for package in packages:
            result = analysis.implementation.get(package)
            if result is None or not result.implemented:
                self.logger.info("Skipping analysis for %s - No implementation found", package)
                marker = OracleFailure(error=NOT_IMPLEMENTED_ERROR)
                quality.code_quality[package] = marker
                quality.implementation_quality[package] = marker
                quality.suggestions[package] = marker
                continue
            implemented.append((package, result.content or ""))

        for package, code, implementation, suggestions in self._map(
            self._assess_package, implemented
        ):
            quality.code_quality[package] = code
            quality.implementation_quality[package] = implementation
            quality.suggestions[package] = suggestions
        return quality

    def _assess_package(
        self, item: Tuple[str, str]
    ) -> Tuple[str, Assessment, Assessment, Suggestions]:
        package, content = item
        code = self._guarded(
            package, CODE_QUALITY_ERROR, lambda: self.assess_code_quality(package, content)
        )
        implementation = self._guarded(
            package,
            IMPLEMENTATION_QUALITY_ERROR,
            lambda: self.assess_implementation_quality(package, content),
        )
        suggestions = self._guarded(
            package, SUGGESTIONS_ERROR, lambda: self.suggest_improvements(package, content)
        )
        return package, code, implementation, suggestions

    def _guarded(self, package: str, error: str, call: Callable[[], T]) -> T | OracleFailure:
        try:
            return call()
        except OracleError as exc:
            self.logger.warning("Error analyzing %s: %s", package, exc)
            return OracleFailure(error=error)

    def _map(self, func: Callable[[Any], T], items: Iterable[Any]) -> List[T]:
        items = list(items)
        if self.workers == 1 or len(items) <= 1:
            return [func(item) for item in items]
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return list(executor.map(func, items))

    def _complete(self, request: PromptRequest) -> str:
        try:
            return self.runner.run(
                request.user,
                system=request.system,
                temperature=request.temperature if self.temperature is None else self.temperature,
            )
        except Exception as exc:
            raise OracleInvocationError(f"{request.name} request failed: {exc}") from exc

    def _complete_json(self, request: PromptRequest) -> Dict[str, Any]:
        return parse_json_payload(self._complete(request))

    @staticmethod
    def _assessment(payload: Dict[str, Any]) -> QualityAssessment:
        return QualityAssessment(
            score=_score_from(payload),
            reasoning=_reasoning_from(payload),
            key_findings=_string_list(payload, "keyFindings"),
        )


__all__ = [
    "CODE_QUALITY_ERROR",
    "IMPLEMENTATION_QUALITY_ERROR",
    "NOT_IMPLEMENTED_ERROR",
    "OracleError",
    "OracleInvocationError",
    "OracleParseError",
    "QualityOracle",
    "SUGGESTIONS_ERROR",
    "parse_json_payload",
]
