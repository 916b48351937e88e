"""Prompt templates for the quality oracle."""

from .builder import PromptBuilder, PromptMessage, PromptRequest

__all__ = ["PromptBuilder", "PromptMessage", "PromptRequest"]
