"""Public-access marker management.

A folder is protected by default. Placing a zero-length ``.public``
marker file directly inside it exempts the folder (and everything
below it) from access protection.
"""

import logging

from dbafs.core.resolver import PathResolver
from dbafs.filesystem.file import FileHandle

logger = logging.getLogger(__name__)

PUBLIC_MARKER = ".public"


def marker_path(path: str) -> str:
    """Root-relative path of the marker file inside a folder."""
    return PathResolver.join(path, PUBLIC_MARKER)


def is_public(path: str, resolver: PathResolver) -> bool:
    """Check if the folder itself holds a public marker."""
    return resolver.is_file(marker_path(path))


def is_unprotected(path: str, resolver: PathResolver) -> bool:
    """Check if the folder or any of its ancestors holds a public marker.

    Args:
        path: Root-relative folder path.
        resolver: Resolver for the repository root.

    Returns:
        True if a marker exists anywhere from the folder up to the root.
    """
    current = resolver.normalize(path)

    while True:
        if is_public(current, resolver):
            return True
        if not current:
            return False
        current = resolver.parent(current)


def protect(path: str, resolver: PathResolver) -> None:
    """Remove the public marker. No-op if absent."""
    marker = FileHandle(marker_path(path), resolver)
    if marker.exists:
        marker.delete()
        logger.info("Protected folder %s", path or "/")


def unprotect(path: str, resolver: PathResolver) -> None:
    """Create the public marker as a zero-length file. No-op if present."""
    if not FileHandle(marker_path(path), resolver).exists:
        FileHandle.put_content(marker_path(path), "", resolver)
        logger.info("Unprotected folder %s", path or "/")
