"""Contract for remote content stores the walker reads from."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


class ContentStoreError(RuntimeError):
    """Raised when the remote content store cannot serve a request."""


class NotFoundError(ContentStoreError):
    """Raised when the requested repository or path does not exist."""


class TransientFetchError(ContentStoreError):
    """Raised when a single file's content could not be downloaded."""


@dataclass(frozen=True)
class DirectoryEntry:
    """One item of a directory listing."""

    type: str
    path: str
    name: str
    download_url: Optional[str] = None
    size: Optional[int] = None

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


class ContentStore(ABC):
    """Read-only access to files of a hosted repository."""

    @abstractmethod
    def get_file(self, owner: str, repo: str, path: str) -> str:
        """Return the decoded text of a file, raising NotFoundError when absent."""

    @abstractmethod
    def list_directory(self, owner: str, repo: str, path: str) -> List[DirectoryEntry]:
        """Return the entries of a directory ("" is the repository root)."""

    @abstractmethod
    def download(self, entry: DirectoryEntry) -> str:
        """Return the raw content of a listed file, raising TransientFetchError on failure."""
