"""Pipeline orchestration for a package usage analysis."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from .analyzers import ImplementationDetector, PatternRegistry, analyze_repository
from .analyzers.dependencies import MANIFEST_PATH, parse_manifest
from .config import PkgGradeConfig, env_source_token, load_config
from .failsafe import build_manifest_missing_report
from .grading import DEFAULT_PASS_CUTOFF, is_passing
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import DetectionRule, FinalReport
from .oracle import QualityOracle
from .prompting.builder import PromptBuilder
from .source.base import ContentStore, NotFoundError
from .source.github import GitHubContentStore
from .source.walker import RepositoryWalker, TraversalLimits


class PackageAnalyzer:
    """Checks that required packages are declared and used, then grades the repository."""

    def __init__(
        self,
        *,
        source_token: str | None = None,
        oracle_key: str | None = None,
        patterns: Mapping[str, DetectionRule] | None = None,
        store: ContentStore | None = None,
        llm_runner: LLMRunner | None = None,
        prompt_builder: PromptBuilder | None = None,
        limits: TraversalLimits | None = None,
        pass_cutoff: int = DEFAULT_PASS_CUTOFF,
        oracle_workers: int = 1,
        oracle_temperature: float | None = None,
    ) -> None:
        self.store = store or GitHubContentStore(source_token or env_source_token())
        if llm_runner is None:
            llm_runner = LLMRunner(api_key=oracle_key) if oracle_key else LLMRunner()
        self.registry = PatternRegistry(patterns)
        self.detector = ImplementationDetector(self.registry)
        self.walker = RepositoryWalker(self.store, limits)
        self.oracle = QualityOracle(
            llm_runner, prompt_builder, workers=oracle_workers, temperature=oracle_temperature
        )
        self.pass_cutoff = pass_cutoff
        self.logger = get_logger("orchestrator")

    @classmethod
    def from_config(
        cls,
        config: PkgGradeConfig,
        *,
        store: ContentStore | None = None,
        llm_runner: LLMRunner | None = None,
    ) -> "PackageAnalyzer":
        """Build an analyzer from loaded configuration."""
        if store is None:
            store = GitHubContentStore(
                config.source_token(),
                base_url=config.source.base_url,
                ref=config.source.ref,
                request_timeout=config.source.request_timeout or 30.0,
            )
        if llm_runner is None:
            kwargs: Dict[str, Any] = {}
            llm_cfg = config.llm
            if llm_cfg.model:
                kwargs["model"] = llm_cfg.model
            if llm_cfg.base_url:
                kwargs["base_url"] = llm_cfg.base_url
            if llm_cfg.api_key:
                kwargs["api_key"] = llm_cfg.api_key
            if llm_cfg.max_tokens is not None:
                kwargs["max_tokens"] = llm_cfg.max_tokens
            if llm_cfg.request_timeout is not None:
                kwargs["request_timeout"] = llm_cfg.request_timeout
            llm_runner = LLMRunner(**kwargs)
        return cls(
            patterns=config.patterns,
            store=store,
            llm_runner=llm_runner,
            limits=config.traversal,
            pass_cutoff=config.pass_cutoff,
            oracle_workers=config.oracle_workers,
            oracle_temperature=config.llm.temperature,
        )

    @classmethod
    def from_path(cls, path: Path) -> "PackageAnalyzer":
        return cls.from_config(load_config(path))

    def analyze(self, owner: str, repo: str, required_packages: Sequence[str]) -> FinalReport:
        """Run the full pipeline for ``owner/repo``.

        A repository without a manifest yields the canned failing report;
        any other unhandled failure propagates to the caller.
        """
        self.logger.info("Analyzing %s/%s for %s", owner, repo, ", ".join(required_packages))
        try:
            manifest = self.get_manifest(owner, repo)
            if manifest is None:
                self.logger.warning("No %s found in %s/%s", MANIFEST_PATH, owner, repo)
                return build_manifest_missing_report()

            files = self.walker.list_files(owner, repo)
            self.logger.debug("Fetched %d files from %s/%s", len(files), owner, repo)

            analysis = analyze_repository(manifest, files, required_packages, self.detector)
            quality = self.oracle.analyze_packages(analysis, required_packages)

            grade = self.oracle.overall_score(quality)
            passed = is_passing(grade.score, self.pass_cutoff)
            report = self.oracle.render_report(analysis, quality, grade, passed=passed)
        except Exception:
            self.logger.exception("Analysis failed for %s/%s", owner, repo)
            raise

        self.logger.info(
            "%s/%s scored %d (%s): %s", owner, repo, grade.score, grade.grade, "pass" if passed else "fail"
        )
        return FinalReport(
            passed=passed,
            score=grade.score,
            grade=grade.grade,
            report=report,
            reasoning=grade.reasoning,
            analysis=analysis,
            quality=quality,
        )

    def get_manifest(self, owner: str, repo: str) -> Optional[Dict[str, Any]]:
        """Return the parsed root manifest, or None when it is absent or unreadable."""
        try:
            text = self.store.get_file(owner, repo, MANIFEST_PATH)
        except NotFoundError:
            return None
        manifest = parse_manifest(text)
        if manifest is None:
            self.logger.warning("Ignoring %s in %s/%s: not a JSON object", MANIFEST_PATH, owner, repo)
        return manifest


__all__ = ["PackageAnalyzer"]
