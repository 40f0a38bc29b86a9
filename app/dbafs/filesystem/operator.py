"""Filesystem primitives operator.

Performs the physical directory operations folders are built on:
directory creation, recursive removal, rename, recursive copy and
permission changes. All paths are root-relative.
"""

import logging
import os
import shutil

from dbafs.core.resolver import PathResolver

logger = logging.getLogger(__name__)


class FilesystemOperator:
    """Physical directory operations below a repository root.

    rename() and chmod() report failures as a boolean; every other
    operation lets OSError propagate to the caller.

    Attributes:
        _resolver: Resolver for the repository root.
    """

    def __init__(self, resolver: PathResolver) -> None:
        """Initialize the FilesystemOperator.

        Args:
            resolver: Resolver for the repository root.
        """
        self._resolver = resolver

    def mkdir(self, path: str) -> None:
        """Create a single directory if it does not exist.

        Raises:
            OSError: If the directory cannot be created.
        """
        target = self._resolver.absolute(path)
        if target.is_dir():
            return
        target.mkdir()
        logger.debug("Created directory %s", path)

    def remove_tree(self, path: str, keep_root: bool = False) -> None:
        """Recursively remove a directory.

        Symlinks inside the tree are removed, never followed.

        Args:
            path: Root-relative directory path.
            keep_root: If True, only remove the contents and keep the directory.

        Raises:
            OSError: If an entry cannot be removed.
        """
        target = self._resolver.absolute(path)

        if not keep_root:
            shutil.rmtree(target)
            logger.debug("Removed directory %s", path)
            return

        for entry in target.iterdir():
            # Directories (but not symlinks to directories)
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        logger.debug("Purged contents of %s", path)

    def rename(self, old_path: str, new_path: str) -> bool:
        """Rename a file or directory.

        Args:
            old_path: Root-relative source path.
            new_path: Root-relative target path.

        Returns:
            True if the rename succeeded, False otherwise.
        """
        source = self._resolver.absolute(old_path)
        target = self._resolver.absolute(new_path)

        if source == target:
            return True

        try:
            source.rename(target)
        except OSError as e:
            logger.warning("Cannot rename %s to %s: %s", old_path, new_path, e)
            return False

        logger.debug("Renamed %s to %s", old_path, new_path)
        return True

    def copy_tree(self, old_path: str, new_path: str) -> None:
        """Recursively copy a directory, merging into an existing target.

        Raises:
            OSError: If the copy fails.
        """
        shutil.copytree(
            self._resolver.absolute(old_path),
            self._resolver.absolute(new_path),
            symlinks=True,
            dirs_exist_ok=True,
        )
        logger.debug("Copied %s to %s", old_path, new_path)

    def chmod(self, path: str, mode: int) -> bool:
        """Change the permission bits of a path.

        Args:
            path: Root-relative path.
            mode: Numeric permission mode (e.g. 0o755).

        Returns:
            True if the mode was applied, False otherwise.
        """
        try:
            os.chmod(self._resolver.absolute(path), mode)
        except OSError as e:
            logger.warning("Cannot chmod %s to %o: %s", path, mode, e)
            return False
        return True
