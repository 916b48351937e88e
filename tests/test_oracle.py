"""Tests for pkggrade.oracle."""

from __future__ import annotations

import json
import threading

import pytest

from pkggrade.models import (
    AnalysisResult,
    GradeResult,
    ImplementationResult,
    OracleFailure,
    QualityAnalysis,
    QualityAssessment,
    SuggestionSet,
)
from pkggrade.oracle import (
    CODE_QUALITY_ERROR,
    IMPLEMENTATION_QUALITY_ERROR,
    NOT_IMPLEMENTED_ERROR,
    SUGGESTIONS_ERROR,
    OracleInvocationError,
    OracleParseError,
    QualityOracle,
    parse_json_payload,
)
from tests._fixtures.fakes import ScriptedLLMRunner


def _analysis(**implemented: bool) -> AnalysisResult:
    result = AnalysisResult()
    for name, flag in implemented.items():
        result.dependencies[name] = True
        if flag:
            result.implementation[name] = ImplementationResult(
                implemented=True, file=f"src/{name}.js", content=f"// uses {name}"
            )
        else:
            result.implementation[name] = ImplementationResult(
                implemented=False, reason="No implementation found"
            )
    return result


def test_parse_json_payload_strips_code_fences() -> None:
    fenced = '```json\n{"score": 90, "reasoning": "ok"}\n```'

    assert parse_json_payload(fenced) == {"score": 90, "reasoning": "ok"}
    assert parse_json_payload(' {"a": 1} ') == {"a": 1}


@pytest.mark.parametrize("text", ["not json", "[1, 2]", "```\nnope\n```"])
def test_parse_json_payload_rejects_non_objects(text: str) -> None:
    with pytest.raises(OracleParseError):
        parse_json_payload(text)


def test_analyze_packages_skips_unimplemented_packages(llm: ScriptedLLMRunner) -> None:
    oracle = QualityOracle(llm)

    quality = oracle.analyze_packages(_analysis(react=True, express=False), ["react", "express"])

    assert llm.kinds() == ["code_quality", "implementation_quality", "suggestions"]
    assert all("react" in str(call["prompt"]) for call in llm.calls)
    assert quality.code_quality["react"] == QualityAssessment(
        score=85, reasoning="Clean hooks usage", key_findings=["uses hooks"]
    )
    assert quality.suggestions["react"] == SuggestionSet(
        suggestions=["Memoize callbacks"], priority=["low"]
    )
    marker = OracleFailure(error=NOT_IMPLEMENTED_ERROR)
    assert quality.code_quality["express"] == marker
    assert quality.implementation_quality["express"] == marker
    assert quality.suggestions["express"] == marker


def test_each_call_failure_becomes_its_own_marker() -> None:
    llm = ScriptedLLMRunner(
        {
            "code_quality": "Sorry, I cannot help with that.",
            "implementation_quality": json.dumps({"score": 140, "reasoning": "too good"}),
            "suggestions": RuntimeError("rate limited"),
        }
    )
    oracle = QualityOracle(llm)

    quality = oracle.analyze_packages(_analysis(react=True), ["react"])

    assert quality.to_dict() == {
        "codeQuality": {"react": {"error": CODE_QUALITY_ERROR}},
        "implementationQuality": {"react": {"error": IMPLEMENTATION_QUALITY_ERROR}},
        "suggestions": {"react": {"error": SUGGESTIONS_ERROR}},
    }


def test_failure_for_one_package_does_not_affect_another() -> None:
    def code_quality(prompt: str) -> str:
        if "express" in prompt:
            raise RuntimeError("timeout")
        return json.dumps({"score": 70, "reasoning": "fine", "keyFindings": []})

    llm = ScriptedLLMRunner({"code_quality": code_quality})
    oracle = QualityOracle(llm)

    quality = oracle.analyze_packages(_analysis(react=True, express=True), ["react", "express"])

    assert quality.code_quality["react"] == QualityAssessment(score=70, reasoning="fine")
    assert quality.code_quality["express"] == OracleFailure(error=CODE_QUALITY_ERROR)
    assert isinstance(quality.implementation_quality["express"], QualityAssessment)


def test_workers_run_packages_concurrently() -> None:
    seen_threads = set()
    lock = threading.Lock()

    def code_quality(prompt: str) -> str:
        with lock:
            seen_threads.add(threading.get_ident())
        return json.dumps({"score": 75, "reasoning": "ok", "keyFindings": []})

    llm = ScriptedLLMRunner({"code_quality": code_quality})
    oracle = QualityOracle(llm, workers=4)
    packages = ["react", "express", "vue"]

    quality = oracle.analyze_packages(_analysis(react=True, express=True, vue=True), packages)

    assert set(quality.code_quality) == set(packages)
    assert all(value.score == 75 for value in quality.code_quality.values())
    assert len(llm.calls) == 9
    assert threading.get_ident() not in seen_threads


def test_overall_score_grades_result(llm: ScriptedLLMRunner) -> None:
    oracle = QualityOracle(llm)

    grade = oracle.overall_score(QualityAnalysis())

    assert grade == GradeResult(score=84, grade="B", reasoning="Solid usage overall")
    assert llm.calls[0]["temperature"] == 0.0


@pytest.mark.parametrize("score", [101, -5, "high", None, 88.8])
def test_overall_score_fails_closed_on_invalid_scores(score) -> None:
    llm = ScriptedLLMRunner({"score": json.dumps({"score": score, "reasoning": "?"})})

    with pytest.raises(OracleParseError):
        QualityOracle(llm).overall_score(QualityAnalysis())


def test_transport_errors_raise_invocation_error() -> None:
    llm = ScriptedLLMRunner({"score": RuntimeError("LLM request failed with status 500")})

    with pytest.raises(OracleInvocationError, match="status 500"):
        QualityOracle(llm).overall_score(QualityAnalysis())


def test_render_report_returns_completion_text(llm: ScriptedLLMRunner) -> None:
    grade = GradeResult(score=84, grade="B", reasoning="Solid usage overall")

    report = QualityOracle(llm).render_report(
        _analysis(react=True), QualityAnalysis(), grade, passed=True
    )

    assert report.startswith("# Code Quality Analysis Report")
    call = llm.calls[0]
    assert call["kind"] == "report"
    assert call["temperature"] == 0.2
    assert "✓ PASS" in str(call["prompt"])
