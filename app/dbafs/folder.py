"""Managed folders inside a repository.

Creates, reads, renames, copies and deletes folders while keeping the
metadata store consistent with the filesystem. Usage:

    folder = Folder("files/test", resolver=resolver, operator=operator, store=store)

    if not folder.is_empty():
        folder.purge()

Derived values (hash, size, name) are recomputed on every access.
"""

import logging
import warnings

from dbafs.core.resolver import FolderNotADirectoryError, PathResolver
from dbafs.core.store import MetadataStore
from dbafs.filesystem import protected
from dbafs.filesystem.operator import FilesystemOperator
from dbafs.filesystem.scanner import HashComputer, SizeComputer
from dbafs.models.record import MetadataRecord
from dbafs.sync import SyncCoordinator

logger = logging.getLogger(__name__)

__all__ = ["Folder", "FolderNotADirectoryError"]


class Folder:
    """A directory at a root-relative path.

    Constructing a Folder guarantees the directory exists: every missing
    segment is created and, when synchronized, registered in the
    metadata store.

    Attributes:
        _path: Root-relative path ("" is the repository root). It is also
            the lookup key of the folder's metadata record, which is read
            from the store on demand and never held by the handle.
    """

    def __init__(
        self,
        path: str,
        *,
        resolver: PathResolver,
        operator: FilesystemOperator,
        store: MetadataStore,
    ) -> None:
        """Open a folder, creating it if it does not exist.

        Args:
            path: Root-relative folder path. "." is an alias for the root.
            resolver: Resolver for the repository root.
            operator: Filesystem primitives.
            store: Metadata store for synchronized paths.

        Raises:
            FolderNotADirectoryError: If a plain file exists at the path.
        """
        path = resolver.normalize(path)
        resolver.ensure_not_file(path)

        self._path = path
        self._resolver = resolver
        self._operator = operator
        self._store = store
        self._sync = SyncCoordinator(store)

        self._create()

    def __repr__(self) -> str:
        return f"Folder({self._path!r})"

    def _create(self) -> None:
        """Create every missing segment of the path."""
        if not self._path or self._resolver.is_dir(self._path):
            return

        current = ""
        for segment in self._path.split("/"):
            current = PathResolver.join(current, segment)
            if self._resolver.is_dir(current):
                continue

            self._operator.mkdir(current)
            self._sync.add(current)

    def _open(self, path: str) -> "Folder":
        """Open another folder sharing this folder's collaborators."""
        return Folder(path, resolver=self._resolver, operator=self._operator, store=self._store)

    # =========================================================================
    # Derived accessors
    # =========================================================================

    @property
    def path(self) -> str:
        return self._path

    @property
    def value(self) -> str:
        """Alias of path."""
        return self._path

    @property
    def name(self) -> str:
        return PathResolver.basename(self._path)

    @property
    def basename(self) -> str:
        """Alias of name."""
        return self.name

    @property
    def hash(self) -> str:
        """Structural fingerprint of the folder's entry names."""
        return HashComputer(self._resolver).compute(self._path)

    @property
    def size(self) -> int:
        """Total size in bytes of all non-hidden files below the folder."""
        return SizeComputer(self._resolver).compute(self._path)

    def is_empty(self) -> bool:
        """Return True if the folder has no entries at all, hidden ones included."""
        return not any(self._resolver.absolute(self._path).iterdir())

    # =========================================================================
    # Mutations
    # =========================================================================

    def purge(self) -> None:
        """Remove the folder's contents but keep the folder itself."""
        self._operator.remove_tree(self._path, keep_root=True)
        self._sync.purge_descendants(self._path)

    def clear(self) -> None:
        """Purge the folder.

        .. deprecated::
            Use :meth:`purge` instead.
        """
        warnings.warn(
            "Folder.clear() is deprecated, use Folder.purge() instead",
            DeprecationWarning,
            stacklevel=2,
        )
        logger.warning("Deprecated Folder.clear() called for %s", self._path)
        self.purge()

    def delete(self) -> None:
        """Remove the folder and its contents."""
        self._operator.remove_tree(self._path)
        self._sync.delete(self._path)

    def chmod(self, mode: int) -> bool:
        """Set the folder permissions.

        Returns:
            True if the operation was successful.
        """
        return self._operator.chmod(self._path, mode)

    def rename_to(self, new_path: str) -> bool:
        """Rename the folder.

        The metadata store is only updated after a successful rename.

        Args:
            new_path: Root-relative target path.

        Returns:
            True if the operation was successful. On failure the folder
            keeps its old path.
        """
        new_path = self._resolver.normalize(new_path)
        self._ensure_parent(new_path)

        if not self._operator.rename(self._path, new_path):
            return False

        self._sync.sync_rename(self._path, new_path)
        self._path = new_path
        return True

    def copy_to(self, new_path: str) -> bool:
        """Copy the folder recursively. This folder's path never changes.

        Args:
            new_path: Root-relative target path.

        Returns:
            True once the copy has completed.
        """
        new_path = self._resolver.normalize(new_path)
        self._ensure_parent(new_path)

        self._operator.copy_tree(self._path, new_path)
        self._sync.sync_copy(self._path, new_path)
        return True

    def _ensure_parent(self, path: str) -> None:
        """Create the parent folder of a target path if it does not exist."""
        parent = self._resolver.parent(path)
        if not self._resolver.is_dir(parent):
            self._open(parent)

    # =========================================================================
    # Protection
    # =========================================================================

    def protect(self) -> None:
        """Protect the folder by removing the .public file."""
        protected.protect(self._path, self._resolver)

    def unprotect(self) -> None:
        """Unprotect the folder by adding a .public file."""
        protected.unprotect(self._path, self._resolver)

    def is_unprotected(self) -> bool:
        """Return True if this folder or one of its parents has a .public file."""
        return protected.is_unprotected(self._path, self._resolver)

    # =========================================================================
    # Metadata
    # =========================================================================

    def should_be_synchronized(self) -> bool:
        return self._sync.should_sync(self._path)

    def get_model(self) -> MetadataRecord | None:
        """Return the metadata record of the folder.

        The record is looked up by path on every call, so it always
        reflects the store, including hashes refreshed by purge().

        Returns:
            The stored record when the folder is synchronized and tracked;
            None otherwise. No lookup is made for unsynchronized folders.
        """
        return self._sync.find(self._path)
