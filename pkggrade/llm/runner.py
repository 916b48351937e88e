"""Chat-completions transport used by the quality oracle."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

_AUTO_API_KEY = object()


class CompletionError(RuntimeError):
    """Raised when the chat-completions endpoint cannot produce an answer."""


@dataclass
class CompletionRequest:
    """One prompt as it will be sent to the endpoint."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: str
    api_key: Optional[str]
    request_timeout: Optional[float]

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def body(self) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = []
        if self.system:
            messages.append({"role": "system", "content": self.system})
        messages.append({"role": "user", "content": self.prompt})
        body: Dict[str, Any] = {"model": self.model, "messages": messages}
        if self.temperature is not None:
            body["temperature"] = self.temperature
        if self.max_tokens is not None:
            body["max_tokens"] = self.max_tokens
        return body


Transport = Callable[[CompletionRequest], str]


class LLMRunner:
    """Sends oracle prompts to an OpenAI-compatible service.

    Model, endpoint and key come from the arguments first, then from the
    ``PKGGRADE_LLM_*`` / ``OPENAI_*`` environment variables. ``runner`` swaps
    the HTTP transport for any callable taking a ``CompletionRequest``.
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    ENV_MODEL_KEYS = ("PKGGRADE_LLM_MODEL", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("PKGGRADE_LLM_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = ("PKGGRADE_LLM_API_KEY", "OPENAI_API_KEY", "OPENAI_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        temperature: Optional[float] = 0.0,
        max_tokens: Optional[int] = None,
        api_key: str | None | object = _AUTO_API_KEY,
        request_timeout: Optional[float] = 60.0,
        runner: Transport | None = None,
    ) -> None:
        self.model = model or _env_first(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        endpoint = base_url or _env_first(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        self.base_url = endpoint.rstrip("/")
        if api_key is _AUTO_API_KEY:
            self.api_key = _env_first(self.ENV_API_KEY_KEYS)
        else:
            self.api_key = api_key  # type: ignore[assignment]
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._transport: Transport = runner or post_completion

    def run(
        self,
        prompt: str,
        *,
        system: str | None = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Return the completion for ``prompt``; per-call values win over the defaults."""
        return self._transport(
            CompletionRequest(
                prompt=prompt,
                system=system,
                model=self.model,
                temperature=self.temperature if temperature is None else temperature,
                max_tokens=self.max_tokens if max_tokens is None else max_tokens,
                base_url=self.base_url,
                api_key=self.api_key,
                request_timeout=self.request_timeout,
            )
        )


def post_completion(request: CompletionRequest) -> str:
    """POST ``request`` to the endpoint and return the first choice's text."""
    headers = {"Content-Type": "application/json"}
    if request.api_key:
        headers["Authorization"] = f"Bearer {request.api_key}"
    http_request = Request(
        request.endpoint,
        data=json.dumps(request.body()).encode("utf-8"),
        headers=headers,
        method="POST",
    )

    try:
        with urlopen(http_request, timeout=request.request_timeout or 60.0) as response:  # type: ignore[arg-type]
            raw = response.read()
    except HTTPError as exc:
        body = exc.read().decode("utf-8", errors="ignore") if exc.fp is not None else ""
        raise CompletionError(
            f"{request.model} completion rejected (HTTP {exc.code}): {body.strip() or exc.reason}"
        ) from exc
    except URLError as exc:
        raise CompletionError(f"Cannot reach {request.endpoint}: {exc.reason}") from exc

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CompletionError(f"{request.endpoint} answered with non-JSON data") from exc

    text = _completion_text(payload)
    if not text.strip():
        raise CompletionError(f"{request.model} returned no completion text")
    return text.strip()


def _completion_text(payload: Any) -> str:
    # Chat endpoints answer in choices[0].message.content; legacy ones in choices[0].text.
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    first = choices[0]
    message = first.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    text = first.get("text")
    return text if isinstance(text, str) else ""


def _env_first(keys: Sequence[str]) -> str | None:
    return next((os.environ[key] for key in keys if os.environ.get(key)), None)


__all__ = ["CompletionError", "CompletionRequest", "LLMRunner", "post_completion"]
