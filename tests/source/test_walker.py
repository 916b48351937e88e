"""Tests for pkggrade.source.walker."""

from __future__ import annotations

import logging

import pytest

from pkggrade.source.base import NotFoundError
from pkggrade.source.walker import RepositoryWalker, TraversalLimits
from tests._fixtures.fakes import FakeContentStore


def test_list_files_walks_depth_first() -> None:
    store = FakeContentStore(
        {
            "a.js": "a",
            "src/b.js": "b",
            "src/nested/c.js": "c",
            "src/d.js": "d",
            "z.js": "z",
        }
    )

    files = RepositoryWalker(store).list_files("octo", "demo")

    assert [file.path for file in files] == ["a.js", "src/b.js", "src/nested/c.js", "src/d.js", "z.js"]
    nested = files[2]
    assert nested.name == "c.js"
    assert nested.content == "c"
    assert nested.download_url == "https://raw.example/src/nested/c.js"
    assert store.listed == ["", "src", "src/nested"]


def test_list_files_drops_files_that_fail_to_download(caplog: pytest.LogCaptureFixture) -> None:
    store = FakeContentStore(
        {"ok.js": "fine", "broken.js": "never seen", "lib/ok2.js": "fine too"},
        failing_downloads={"broken.js"},
    )

    with caplog.at_level(logging.WARNING, logger="pkggrade"):
        files = RepositoryWalker(store).list_files("octo", "demo")

    assert [file.path for file in files] == ["ok.js", "lib/ok2.js"]
    assert "broken.js" in store.downloaded
    assert any("broken.js" in record.getMessage() for record in caplog.records)


def test_list_files_raises_when_repository_missing() -> None:
    store = FakeContentStore({"a.js": "a"}, exists=False)

    with pytest.raises(NotFoundError):
        RepositoryWalker(store).list_files("octo", "missing")


def test_max_files_stops_the_walk() -> None:
    store = FakeContentStore({f"f{index}.js": str(index) for index in range(10)})

    files = RepositoryWalker(store, TraversalLimits(max_files=3)).list_files("octo", "demo")

    assert [file.path for file in files] == ["f0.js", "f1.js", "f2.js"]
    assert len(store.downloaded) == 3


def test_zero_max_files_downloads_nothing() -> None:
    store = FakeContentStore({"a.js": "a", "b.js": "b"})

    files = RepositoryWalker(store, TraversalLimits(max_files=0)).list_files("octo", "demo")

    assert files == []
    assert store.downloaded == []


def test_max_depth_skips_deep_directories() -> None:
    store = FakeContentStore({"top.js": "t", "one/a.js": "a", "one/two/b.js": "b"})

    files = RepositoryWalker(store, TraversalLimits(max_depth=1)).list_files("octo", "demo")

    assert [file.path for file in files] == ["top.js", "one/a.js"]
    assert "one/two" not in store.listed


def test_max_file_size_skips_large_files() -> None:
    store = FakeContentStore(
        {"small.js": "x", "bundle.js": "y"},
        sizes={"bundle.js": 5_000_000},
    )

    files = RepositoryWalker(store, TraversalLimits(max_file_size=1024)).list_files("octo", "demo")

    assert [file.path for file in files] == ["small.js"]
    assert "bundle.js" not in store.downloaded


def test_default_limits_exclude_node_modules() -> None:
    store = FakeContentStore({"index.js": "i", "node_modules/react/index.js": "r"})

    files = RepositoryWalker(store).list_files("octo", "demo")

    assert [file.path for file in files] == ["index.js"]
    assert "node_modules" not in store.listed


def test_disabled_limits_walk_everything() -> None:
    store = FakeContentStore({"node_modules/x.js": "x", "a/b/c/d.js": "d"})
    limits = TraversalLimits(max_files=None, max_depth=None, max_file_size=None, exclude_paths=())

    files = RepositoryWalker(store, limits).list_files("octo", "demo")

    assert sorted(file.path for file in files) == ["a/b/c/d.js", "node_modules/x.js"]
