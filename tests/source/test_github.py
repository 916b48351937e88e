"""Tests for the GitHub content store."""

from __future__ import annotations

import base64
import io
import json
from urllib.error import HTTPError, URLError

import pytest

from pkggrade.source.base import ContentStoreError, DirectoryEntry, NotFoundError, TransientFetchError
from pkggrade.source.github import GitHubContentStore


class FakeResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def _install(monkeypatch, handler):
    calls = []

    def fake_urlopen(request, timeout=None):
        calls.append(
            {
                "url": request.full_url,
                "headers": {k.lower(): v for k, v in request.header_items()},
                "timeout": timeout,
            }
        )
        return handler(request)

    monkeypatch.setattr("pkggrade.source.github.urlopen", fake_urlopen)
    return calls


def _http_error(url: str, code: int, body: bytes = b"") -> HTTPError:
    return HTTPError(url, code, "error", {}, io.BytesIO(body))


def test_get_file_decodes_base64_content(monkeypatch) -> None:
    encoded = base64.b64encode(b'{"dependencies": {"react": "18.0.0"}}').decode("ascii")
    calls = _install(
        monkeypatch,
        lambda request: FakeResponse(
            json.dumps({"type": "file", "encoding": "base64", "content": encoded}).encode("utf-8")
        ),
    )

    store = GitHubContentStore("secret-token", request_timeout=12.0)
    text = store.get_file("octo", "demo", "package.json")

    assert json.loads(text) == {"dependencies": {"react": "18.0.0"}}
    assert calls[0]["url"] == "https://api.github.com/repos/octo/demo/contents/package.json"
    assert calls[0]["headers"]["authorization"] == "Bearer secret-token"
    assert calls[0]["headers"]["accept"] == "application/vnd.github+json"
    assert calls[0]["timeout"] == 12.0


def test_get_file_maps_404_to_not_found(monkeypatch) -> None:
    def handler(request):
        raise _http_error(request.full_url, 404)

    _install(monkeypatch, handler)

    with pytest.raises(NotFoundError):
        GitHubContentStore().get_file("octo", "demo", "package.json")


def test_get_file_rejects_directories(monkeypatch) -> None:
    _install(monkeypatch, lambda request: FakeResponse(b"[]"))

    with pytest.raises(NotFoundError):
        GitHubContentStore().get_file("octo", "demo", "src")


def test_other_http_errors_propagate_as_store_errors(monkeypatch) -> None:
    def handler(request):
        raise _http_error(request.full_url, 401, b"Bad credentials")

    _install(monkeypatch, handler)

    with pytest.raises(ContentStoreError) as excinfo:
        GitHubContentStore("bad").list_directory("octo", "demo", "")
    assert not isinstance(excinfo.value, NotFoundError)
    assert "401" in str(excinfo.value)
    assert "Bad credentials" in str(excinfo.value)


def test_list_directory_parses_entries_and_ref(monkeypatch) -> None:
    listing = [
        {
            "type": "file",
            "path": "src/app.jsx",
            "name": "app.jsx",
            "size": 42,
            "download_url": "https://raw.githubusercontent.com/octo/demo/main/src/app.jsx",
        },
        {"type": "dir", "path": "src/components", "name": "components", "download_url": None},
    ]
    calls = _install(monkeypatch, lambda request: FakeResponse(json.dumps(listing).encode("utf-8")))

    store = GitHubContentStore(base_url="https://github.example/api/v3/", ref="dev")
    entries = store.list_directory("octo", "demo", "src")

    assert calls[0]["url"] == "https://github.example/api/v3/repos/octo/demo/contents/src?ref=dev"
    assert "authorization" not in calls[0]["headers"]
    assert entries == [
        DirectoryEntry(
            type="file",
            path="src/app.jsx",
            name="app.jsx",
            download_url="https://raw.githubusercontent.com/octo/demo/main/src/app.jsx",
            size=42,
        ),
        DirectoryEntry(type="dir", path="src/components", name="components"),
    ]


def test_list_directory_root_uses_contents_endpoint(monkeypatch) -> None:
    calls = _install(monkeypatch, lambda request: FakeResponse(b"[]"))

    assert GitHubContentStore().list_directory("octo", "demo", "") == []
    assert calls[0]["url"] == "https://api.github.com/repos/octo/demo/contents"


def test_download_failures_are_transient(monkeypatch) -> None:
    def handler(request):
        raise URLError("connection reset")

    _install(monkeypatch, handler)
    entry = DirectoryEntry(type="file", path="a.js", name="a.js", download_url="https://raw.example/a.js")

    with pytest.raises(TransientFetchError):
        GitHubContentStore().download(entry)


def test_download_returns_text(monkeypatch) -> None:
    calls = _install(monkeypatch, lambda request: FakeResponse("const ü = 1;".encode("utf-8")))
    entry = DirectoryEntry(type="file", path="a.js", name="a.js", download_url="https://raw.example/a.js")

    assert GitHubContentStore("tok").download(entry) == "const ü = 1;"
    assert calls[0]["url"] == "https://raw.example/a.js"
