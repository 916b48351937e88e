"""Recursive traversal of a remote repository into a flat file list."""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import List, Optional, Tuple

from ..logging import get_logger
from ..models import RepositoryFile
from .base import ContentStore, DirectoryEntry, TransientFetchError

_DEFAULT_EXCLUDES: Tuple[str, ...] = ("node_modules",)


@dataclass(frozen=True)
class TraversalLimits:
    """Ceilings applied while walking a repository; ``None`` disables a limit."""

    max_files: Optional[int] = 1000
    max_depth: Optional[int] = 16
    max_file_size: Optional[int] = 1_000_000
    exclude_paths: Tuple[str, ...] = field(default=_DEFAULT_EXCLUDES)

    def excludes(self, path: str) -> bool:
        for pattern in self.exclude_paths:
            if fnmatchcase(path, pattern):
                return True
            if any(fnmatchcase(part, pattern) for part in path.split("/")):
                return True
        return False


class _FileLimitReached(Exception):
    pass


class RepositoryWalker:
    """Lists every file of a repository depth-first and fetches its content."""

    def __init__(self, store: ContentStore, limits: TraversalLimits | None = None) -> None:
        self.store = store
        self.limits = limits or TraversalLimits()
        self.logger = get_logger("walker")

    def list_files(self, owner: str, repo: str) -> List[RepositoryFile]:
        """Return (path, name, content) records for every reachable file.

        A missing repository raises ``NotFoundError`` from the root listing.
        Files whose download fails are logged and omitted. Sibling order is
        whatever the store returns.
        """
        files: List[RepositoryFile] = []
        try:
            self._walk(owner, repo, "", 0, files)
        except _FileLimitReached:
            self.logger.warning(
                "Stopped walking %s/%s after %d files (max_files limit)",
                owner,
                repo,
                len(files),
            )
        self.logger.debug("Collected %d files from %s/%s", len(files), owner, repo)
        return files

    def _walk(
        self,
        owner: str,
        repo: str,
        path: str,
        depth: int,
        files: List[RepositoryFile],
    ) -> None:
        entries = self.store.list_directory(owner, repo, path)
        for entry in entries:
            if self.limits.excludes(entry.path):
                self.logger.debug("Skipping excluded path %s", entry.path)
                continue
            if entry.is_dir:
                max_depth = self.limits.max_depth
                if max_depth is not None and depth + 1 > max_depth:
                    self.logger.warning(
                        "Not descending into %s: deeper than max_depth=%d", entry.path, max_depth
                    )
                    continue
                self._walk(owner, repo, entry.path, depth + 1, files)
            elif entry.is_file:
                self._collect(entry, files)

    def _collect(self, entry: DirectoryEntry, files: List[RepositoryFile]) -> None:
        max_files = self.limits.max_files
        if max_files is not None and len(files) >= max_files:
            raise _FileLimitReached()
        max_size = self.limits.max_file_size
        if max_size is not None and entry.size is not None and entry.size > max_size:
            self.logger.debug("Skipping %s: %d bytes exceeds max_file_size", entry.path, entry.size)
            return
        try:
            content = self.store.download(entry)
        except TransientFetchError as exc:
            self.logger.warning("Error fetching content for %s: %s", entry.path, exc)
            return
        files.append(
            RepositoryFile(
                path=entry.path,
                name=entry.name,
                content=content,
                download_url=entry.download_url,
            )
        )
        if max_files is not None and len(files) >= max_files:
            raise _FileLimitReached()


__all__ = ["RepositoryWalker", "TraversalLimits"]
