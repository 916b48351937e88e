"""Remote repository access: content stores and the repository walker."""

from .base import (
    ContentStore,
    ContentStoreError,
    DirectoryEntry,
    NotFoundError,
    TransientFetchError,
)
from .github import GitHubContentStore
from .walker import RepositoryWalker, TraversalLimits

__all__ = [
    "ContentStore",
    "ContentStoreError",
    "DirectoryEntry",
    "GitHubContentStore",
    "NotFoundError",
    "RepositoryWalker",
    "TransientFetchError",
    "TraversalLimits",
]
