"""Chat completion transport for the quality oracle."""

from .runner import CompletionError, CompletionRequest, LLMRunner

__all__ = ["CompletionError", "CompletionRequest", "LLMRunner"]
