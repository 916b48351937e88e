from __future__ import annotations

import json

import pytest

from pkggrade.orchestrator import PackageAnalyzer
from tests._fixtures.fakes import FakeContentStore, ScriptedLLMRunner


@pytest.fixture
def llm() -> ScriptedLLMRunner:
    """Scripted LLM that returns well-formed completions for every call type."""
    return ScriptedLLMRunner()


@pytest.fixture
def react_store() -> FakeContentStore:
    """A small React repository with a manifest and one component using hooks."""
    return FakeContentStore(
        {
            "package.json": json.dumps({"dependencies": {"react": "18.0.0"}}),
            "src/app.jsx": 'import { useState } from "react"\nexport const App = () => null\n',
            "README.md": "# demo\n",
        }
    )


@pytest.fixture
def make_analyzer(llm: ScriptedLLMRunner):
    """Build a PackageAnalyzer wired to in-memory collaborators."""

    def _make(store: FakeContentStore, **kwargs) -> PackageAnalyzer:
        kwargs.setdefault("llm_runner", llm)
        return PackageAnalyzer(store=store, **kwargs)

    return _make
