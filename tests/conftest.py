"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules. Every
fixture works on a fresh repository root below tmp_path whose
synchronized subtree is "files".
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from dbafs.core.resolver import PathResolver
from dbafs.core.store import JsonMetadataStore
from dbafs.filesystem.operator import FilesystemOperator
from dbafs.repository import Repository


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Empty repository root directory."""
    site = tmp_path / "site"
    site.mkdir()
    return site


@pytest.fixture
def resolver(root: Path) -> PathResolver:
    """Resolver for the repository root."""
    return PathResolver(root)


@pytest.fixture
def operator(resolver: PathResolver) -> FilesystemOperator:
    """Filesystem primitives for the repository root."""
    return FilesystemOperator(resolver)


@pytest.fixture
def metadata_file(tmp_path: Path) -> Path:
    """Metadata store file outside the repository root."""
    return tmp_path / "state" / "metadata.jsonl"


@pytest.fixture
def store(resolver: PathResolver, metadata_file: Path) -> JsonMetadataStore:
    """JSON metadata store synchronizing the "files" subtree."""
    return JsonMetadataStore(
        resolver,
        data_file=metadata_file,
        upload_path="files",
        sync_exclude=["cache"],
    )


@pytest.fixture
def repo(
    resolver: PathResolver,
    store: JsonMetadataStore,
    operator: FilesystemOperator,
) -> Repository:
    """Repository wired with the fixtures above."""
    return Repository(resolver, store, operator)


@pytest.fixture
def make_file(root: Path) -> Callable[..., Path]:
    """Factory creating a file (and its parents) below the repository root."""

    def _make(relative: str, content: str = "") -> Path:
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        return target

    return _make
