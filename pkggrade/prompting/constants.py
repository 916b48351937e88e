"""Shared constants for oracle prompting."""

from __future__ import annotations

CODE_QUALITY_SYSTEM = (
    "You are a code quality analysis expert. Provide detailed, technical analysis in clean "
    "JSON format without any markdown or code formatting."
)
IMPLEMENTATION_QUALITY_SYSTEM = (
    "You are an expert in JavaScript package implementation analysis. Return only clean JSON "
    "without any markdown or code formatting."
)
SUGGESTIONS_SYSTEM = (
    "You are an expert code reviewer. Provide specific, actionable suggestions in clean JSON "
    "format without any markdown or code formatting."
)
SCORE_SYSTEM = (
    "You are a precise code quality scoring system. Provide exact numerical scores in clean "
    "JSON format without any markdown or code formatting."
)
REPORT_SYSTEM = (
    "You are a technical report generator specializing in code quality analysis. Create "
    "detailed, actionable reports with clear visual hierarchy and professional formatting. "
    "Always ensure the pass/fail status matches the provided boolean value and maintain "
    "consistency in grading and recommendations."
)

SCORING_TEMPERATURE = 0.0
REPORT_TEMPERATURE = 0.2

ASSESSMENT_SCHEMA = """{
    "score": number (0-100),
    "reasoning": string (detailed analysis),
    "keyFindings": string[] (list of main points)
}"""

JSON_ONLY_INSTRUCTION = (
    "Make sure you return only valid JSON (no code fences, no markdown formatting)."
)

GRADE_LEGEND: tuple[tuple[str, str], ...] = (
    ("S", "Outstanding"),
    ("A", "Excellent"),
    ("B", "Good"),
    ("C", "Fair"),
    ("D", "Poor"),
    ("F", "Failing"),
)


__all__ = [
    "ASSESSMENT_SCHEMA",
    "CODE_QUALITY_SYSTEM",
    "GRADE_LEGEND",
    "IMPLEMENTATION_QUALITY_SYSTEM",
    "JSON_ONLY_INSTRUCTION",
    "REPORT_SYSTEM",
    "REPORT_TEMPERATURE",
    "SCORE_SYSTEM",
    "SCORING_TEMPERATURE",
    "SUGGESTIONS_SYSTEM",
]
