"""Content store backed by the GitHub REST contents API."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from .base import (
    ContentStore,
    ContentStoreError,
    DirectoryEntry,
    NotFoundError,
    TransientFetchError,
)


class GitHubContentStore(ContentStore):
    """Reads repository files through ``/repos/{owner}/{repo}/contents``."""

    DEFAULT_BASE_URL = "https://api.github.com"
    USER_AGENT = "pkggrade"

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        ref: str | None = None,
        request_timeout: Optional[float] = 30.0,
    ) -> None:
        self.token = token
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.ref = ref
        self.request_timeout = request_timeout

    def get_file(self, owner: str, repo: str, path: str) -> str:
        payload = self._get_contents(owner, repo, path)
        if not isinstance(payload, dict) or payload.get("type", "file") != "file":
            raise NotFoundError(f"{owner}/{repo}:{path} is not a file")
        content = payload.get("content")
        if not isinstance(content, str):
            raise NotFoundError(f"{owner}/{repo}:{path} has no inline content")
        if payload.get("encoding", "base64") != "base64":
            return content
        try:
            raw = base64.b64decode(content)
        except (binascii.Error, ValueError) as exc:
            raise ContentStoreError(f"Invalid base64 content for {owner}/{repo}:{path}") from exc
        return raw.decode("utf-8", errors="replace")

    def list_directory(self, owner: str, repo: str, path: str) -> List[DirectoryEntry]:
        payload = self._get_contents(owner, repo, path)
        if not isinstance(payload, list):
            raise NotFoundError(f"{owner}/{repo}:{path or '/'} is not a directory")
        entries: List[DirectoryEntry] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            item_path = item.get("path")
            if not isinstance(item_path, str):
                continue
            name = item.get("name")
            size = item.get("size")
            download_url = item.get("download_url")
            entries.append(
                DirectoryEntry(
                    type=str(item.get("type", "")),
                    path=item_path,
                    name=name if isinstance(name, str) else item_path.rsplit("/", 1)[-1],
                    download_url=download_url if isinstance(download_url, str) else None,
                    size=size if isinstance(size, int) else None,
                )
            )
        return entries

    def download(self, entry: DirectoryEntry) -> str:
        if not entry.download_url:
            raise TransientFetchError(f"No download URL for {entry.path}")
        request = Request(entry.download_url, headers=self._headers(raw=True), method="GET")
        try:
            with urlopen(request, timeout=self.request_timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            raise TransientFetchError(
                f"Download of {entry.path} failed with status {exc.code}"
            ) from exc
        except (URLError, OSError) as exc:
            raise TransientFetchError(f"Download of {entry.path} failed: {exc}") from exc
        return raw.decode("utf-8", errors="replace")

    def _get_contents(self, owner: str, repo: str, path: str) -> Any:
        request = Request(
            self._contents_url(owner, repo, path), headers=self._headers(), method="GET"
        )
        try:
            with urlopen(request, timeout=self.request_timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            if exc.code == 404:
                raise NotFoundError(f"{owner}/{repo}:{path or '/'} not found") from exc
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise ContentStoreError(
                f"GitHub request failed with status {exc.code}: {message}"
            ) from exc
        except URLError as exc:
            raise ContentStoreError(f"GitHub request failed: {exc.reason}") from exc

        try:
            return json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise ContentStoreError("GitHub returned invalid JSON") from exc

    def _contents_url(self, owner: str, repo: str, path: str) -> str:
        url = f"{self.base_url}/repos/{quote(owner)}/{quote(repo)}/contents"
        if path:
            url = f"{url}/{quote(path.strip('/'))}"
        if self.ref:
            url = f"{url}?{urlencode({'ref': self.ref})}"
        return url

    def _headers(self, *, raw: bool = False) -> Dict[str, str]:
        headers = {"User-Agent": self.USER_AGENT}
        if not raw:
            headers["Accept"] = "application/vnd.github+json"
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers


__all__ = ["GitHubContentStore"]
