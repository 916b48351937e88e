"""Builds oracle prompts from Jinja2 templates."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..grading import GRADE_EMOJI, grade_emoji
from ..models import AnalysisResult, GradeResult, QualityAnalysis
from .constants import (
    ASSESSMENT_SCHEMA,
    CODE_QUALITY_SYSTEM,
    GRADE_LEGEND,
    IMPLEMENTATION_QUALITY_SYSTEM,
    JSON_ONLY_INSTRUCTION,
    REPORT_SYSTEM,
    REPORT_TEMPERATURE,
    SCORE_SYSTEM,
    SCORING_TEMPERATURE,
    SUGGESTIONS_SYSTEM,
)


@dataclass(frozen=True)
class PromptMessage:
    """Represents a single chat message for LLM prompting."""

    role: str
    content: str


@dataclass
class PromptRequest:
    """A rendered system/user prompt pair for one oracle call."""

    name: str
    messages: List[PromptMessage]
    temperature: Optional[float]

    @property
    def system(self) -> str | None:
        return next((m.content for m in self.messages if m.role == "system"), None)

    @property
    def user(self) -> str:
        return next((m.content for m in self.messages if m.role == "user"), "")


class PromptBuilder:
    """Renders the prompt for each oracle call site."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir
        self._env = self._create_env(templates_dir)

    def code_quality(self, package: str, content: str) -> PromptRequest:
        return self._request(
            "code_quality",
            CODE_QUALITY_SYSTEM,
            SCORING_TEMPERATURE,
            package=package,
            content=content,
        )

    def implementation_quality(self, package: str, content: str) -> PromptRequest:
        return self._request(
            "implementation_quality",
            IMPLEMENTATION_QUALITY_SYSTEM,
            SCORING_TEMPERATURE,
            package=package,
            content=content,
        )

    def suggestions(self, package: str, content: str) -> PromptRequest:
        return self._request(
            "suggestions",
            SUGGESTIONS_SYSTEM,
            SCORING_TEMPERATURE,
            package=package,
            content=content,
        )

    def score(self, quality: QualityAnalysis) -> PromptRequest:
        data = quality.to_dict()
        return self._request(
            "score",
            SCORE_SYSTEM,
            SCORING_TEMPERATURE,
            code_quality=_dump(data["codeQuality"]),
            implementation_quality=_dump(data["implementationQuality"]),
        )

    def report(
        self,
        analysis: AnalysisResult,
        quality: QualityAnalysis,
        grade: GradeResult,
        *,
        passed: bool,
    ) -> PromptRequest:
        data = {
            "analysis": _summarise_analysis(analysis),
            "llmAnalysis": quality.to_dict(),
            "score": grade.score,
            "grade": grade.grade,
            "reasoning": grade.reasoning,
            "pass": passed,
        }
        return self._request(
            "report",
            REPORT_SYSTEM,
            REPORT_TEMPERATURE,
            emoji=grade_emoji(grade.grade),
            grade=grade.grade,
            score=grade.score,
            passed=passed,
            reasoning=grade.reasoning,
            grade_legend=GRADE_LEGEND,
            emoji_map=GRADE_EMOJI,
            data=_dump(data),
        )

    def _request(
        self, name: str, system: str, temperature: float, **context: Any
    ) -> PromptRequest:
        template = self._env.get_template(f"{name}.j2")
        context.setdefault("assessment_schema", ASSESSMENT_SCHEMA)
        context.setdefault("json_only", JSON_ONLY_INSTRUCTION)
        user_prompt = template.render(**context).strip()
        return PromptRequest(
            name=name,
            messages=[
                PromptMessage(role="system", content=system),
                PromptMessage(role="user", content=user_prompt),
            ],
            temperature=temperature,
        )

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )


def _summarise_analysis(analysis: AnalysisResult) -> Dict[str, object]:
    # Report prompts carry the evidence path only, not file bodies.
    implementation: Dict[str, object] = {}
    for name, result in analysis.implementation.items():
        entry = result.to_dict()
        entry.pop("content", None)
        implementation[name] = entry
    return {"dependencies": dict(analysis.dependencies), "implementation": implementation}


def _dump(value: object) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


__all__ = ["PromptBuilder", "PromptMessage", "PromptRequest"]
