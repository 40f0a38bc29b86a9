"""Recursive folder fingerprint and size computation.

Both computations walk the filesystem on every call and never consult
the metadata store, so they reflect the physical state of a subtree.
"""

import hashlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from dbafs.core.resolver import PathResolver
from dbafs.filesystem.file import FileHandle

logger = logging.getLogger(__name__)

# Joins relative entry paths before digesting
HASH_DELIMITER = "-"


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    """List a directory's entries sorted by name."""
    with os.scandir(directory) as it:
        return sorted(it, key=lambda e: e.name)


def _is_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir(follow_symlinks=True)
    except OSError:
        return False


class HashComputer:
    """Structural fingerprint of a folder.

    The fingerprint is the MD5 digest of the pre-order list of relative
    entry paths joined with "-". Entry names starting with a dot are not
    listed, but hidden directories are still descended into. File
    contents do not contribute.

    Args:
        resolver: Resolver for the repository root.
    """

    def __init__(self, resolver: PathResolver) -> None:
        self._resolver = resolver

    def compute(self, path: str) -> str:
        """Compute the fingerprint of a folder.

        Args:
            path: Root-relative folder path.

        Returns:
            MD5 hex digest.
        """
        entries = list(self.iter_relative_paths(path))
        return hashlib.md5(HASH_DELIMITER.join(entries).encode("utf-8")).hexdigest()

    def iter_relative_paths(self, path: str) -> Iterator[str]:
        """Yield the relative paths that make up the fingerprint, in order."""
        base = self._resolver.absolute(path)
        yield from self._walk(base, "", {os.path.realpath(base)})

    def _walk(self, directory: Path, prefix: str, ancestors: set[str]) -> Iterator[str]:
        """Pre-order walk following symlinks.

        Args:
            directory: Absolute directory to list.
            prefix: Relative path of the directory ("" for the hashed folder).
            ancestors: Resolved directories on the current descent path.
        """
        for entry in _sorted_entries(directory):
            relative = f"{prefix}/{entry.name}" if prefix else entry.name

            if not entry.name.startswith("."):
                yield relative

            if not _is_dir(entry):
                continue

            real = os.path.realpath(entry.path)
            if real in ancestors:
                logger.warning("Skipping symlink loop at %s", entry.path)
                continue

            yield from self._walk(Path(entry.path), relative, ancestors | {real})


class SizeComputer:
    """Recursive byte size of a folder.

    Hidden entries (names starting with a dot) are skipped entirely,
    including everything below hidden directories. No memoization:
    every call walks the whole subtree again.

    Args:
        resolver: Resolver for the repository root.
    """

    def __init__(self, resolver: PathResolver) -> None:
        self._resolver = resolver

    def compute(self, path: str) -> int:
        """Compute the total size of all non-hidden files below a folder.

        Args:
            path: Root-relative folder path.

        Returns:
            Size in bytes.
        """
        path = self._resolver.normalize(path)
        base = self._resolver.absolute(path)
        return self._size(path, {os.path.realpath(base)})

    def _size(self, path: str, ancestors: set[str]) -> int:
        total = 0

        for entry in _sorted_entries(self._resolver.absolute(path)):
            if entry.name.startswith("."):
                continue

            child = PathResolver.join(path, entry.name)

            if _is_dir(entry):
                real = os.path.realpath(entry.path)
                if real in ancestors:
                    logger.warning("Skipping symlink loop at %s", entry.path)
                    continue
                total += self._size(child, ancestors | {real})
            elif entry.is_file():
                total += FileHandle(child, self._resolver).size

        return total
