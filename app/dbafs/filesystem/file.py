"""Single file access.

Provides the leaf-file operations folders depend on: creating and
deleting a named file and reading its own size and content hash.
"""

from __future__ import annotations

import hashlib
import logging

from dbafs.core.resolver import PathResolver

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 65536


class FileHandle:
    """A plain file at a root-relative path.

    Attributes:
        path: Root-relative path of the file.
    """

    def __init__(self, path: str, resolver: PathResolver) -> None:
        self.path = resolver.normalize(path)
        self._resolver = resolver

    @property
    def exists(self) -> bool:
        return self._resolver.is_file(self.path)

    @property
    def size(self) -> int:
        """File size in bytes.

        Raises:
            OSError: If the file cannot be stat'ed.
        """
        return self._resolver.absolute(self.path).stat().st_size

    @property
    def hash(self) -> str:
        """MD5 hex digest of the file content.

        Raises:
            OSError: If the file cannot be read.
        """
        digest = hashlib.md5()
        with self._resolver.absolute(self.path).open("rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
        return digest.hexdigest()

    def delete(self) -> None:
        """Delete the file.

        Raises:
            OSError: If the file cannot be removed.
        """
        self._resolver.absolute(self.path).unlink()
        logger.debug("Deleted file %s", self.path)

    @classmethod
    def put_content(cls, path: str, content: str, resolver: PathResolver) -> FileHandle:
        """Write content to a file, creating or truncating it.

        Args:
            path: Root-relative path of the file.
            content: Text to write (may be empty).
            resolver: Resolver for the repository root.

        Returns:
            FileHandle for the written file.
        """
        handle = cls(path, resolver)
        resolver.absolute(handle.path).write_text(content, encoding="utf-8")
        logger.debug("Wrote %d bytes to %s", len(content), handle.path)
        return handle
