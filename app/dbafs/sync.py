"""Synchronization between physical folder operations and the metadata store.

The SyncCoordinator decides which metadata store call mirrors a
physical operation and dispatches it. It never touches the filesystem;
callers run the physical operation first and only then consult it.

Rename:

    | source synced | target synced | action               |
    |---------------|---------------|----------------------|
    | yes           | yes           | move record          |
    | yes           | no            | delete source record |
    | no            | yes           | add target record    |
    | no            | no            | none                 |

Copy:

    | source synced | target synced | action               |
    |---------------|---------------|----------------------|
    | yes           | yes           | copy records         |
    | yes           | no            | none                 |
    | no            | yes           | add target record    |
    | no            | no            | none                 |
"""

import logging
from dataclasses import dataclass
from enum import Enum

from dbafs.core.store import MetadataStore
from dbafs.models.record import MetadataRecord

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Metadata store action taken for a physical operation.

    Attributes:
        ADD: A fresh record was added at the target path.
        MOVE: The record moved from the source to the target path.
        COPY: The records were copied from the source to the target subtree.
        DELETE: The record at the source path was deleted.
        NONE: No metadata store call was made.
    """

    ADD = "add"
    MOVE = "move"
    COPY = "copy"
    DELETE = "delete"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class SyncResult:
    """Outcome of a two-path synchronization decision.

    Attributes:
        action: Action that was dispatched.
        record: Record returned by the store (None if none or deleted).
    """

    action: SyncAction
    record: MetadataRecord | None = None


class SyncCoordinator:
    """Dispatches metadata store calls for synchronized paths.

    Attributes:
        _store: Metadata store receiving the calls.
    """

    def __init__(self, store: MetadataStore) -> None:
        self._store = store

    def should_sync(self, path: str) -> bool:
        """Check if a path lies inside a synchronized subtree."""
        return self._store.should_be_synchronized(path)

    def add(self, path: str) -> MetadataRecord | None:
        """Add a record for a path if it is synchronized."""
        if not self.should_sync(path):
            return None
        logger.debug("Sync add %s", path)
        return self._store.add_resource(path)

    def move(self, old_path: str, new_path: str) -> MetadataRecord | None:
        """Move a record if both paths are synchronized."""
        if not (self.should_sync(old_path) and self.should_sync(new_path)):
            return None
        logger.debug("Sync move %s -> %s", old_path, new_path)
        return self._store.move_resource(old_path, new_path)

    def copy(self, old_path: str, new_path: str) -> MetadataRecord | None:
        """Copy records if both paths are synchronized."""
        if not (self.should_sync(old_path) and self.should_sync(new_path)):
            return None
        logger.debug("Sync copy %s -> %s", old_path, new_path)
        return self._store.copy_resource(old_path, new_path)

    def delete(self, path: str) -> MetadataRecord | None:
        """Delete the record of a path (and its descendants) if synchronized."""
        if not self.should_sync(path):
            return None
        logger.debug("Sync delete %s", path)
        return self._store.delete_resource(path)

    def refresh_hash(self, path: str) -> None:
        """Refresh the stored folder hashes of a synchronized path."""
        if not self.should_sync(path):
            return
        logger.debug("Sync refresh hash %s", path)
        self._store.update_folder_hashes(path)

    def purge_descendants(self, path: str) -> int:
        """Delete the records strictly below a synchronized folder.

        The folder's own record is kept and its hash refreshed.

        Returns:
            Number of records deleted.
        """
        if not self.should_sync(path):
            return 0

        records = self._store.find_multiple_by_basepath(path + "/") or []
        if records:
            self._store.delete_records(records)

        logger.debug("Sync purge %s (%d records)", path, len(records))
        self.refresh_hash(path)
        return len(records)

    def find(self, path: str) -> MetadataRecord | None:
        """Look up the record of a synchronized path."""
        if not self.should_sync(path):
            return None
        return self._store.find_by_path(path)

    def sync_rename(self, old_path: str, new_path: str) -> SyncResult:
        """Mirror a completed rename into the metadata store.

        Args:
            old_path: Root-relative source path.
            new_path: Root-relative target path.

        Returns:
            SyncResult describing the dispatched action.
        """
        sync_source = self.should_sync(old_path)
        sync_target = self.should_sync(new_path)

        if sync_source and sync_target:
            return SyncResult(SyncAction.MOVE, self.move(old_path, new_path))
        if sync_source:
            return SyncResult(SyncAction.DELETE, self.delete(old_path))
        if sync_target:
            return SyncResult(SyncAction.ADD, self.add(new_path))

        return SyncResult(SyncAction.NONE)

    def sync_copy(self, old_path: str, new_path: str) -> SyncResult:
        """Mirror a completed recursive copy into the metadata store.

        Args:
            old_path: Root-relative source path.
            new_path: Root-relative target path.

        Returns:
            SyncResult describing the dispatched action.
        """
        sync_source = self.should_sync(old_path)
        sync_target = self.should_sync(new_path)

        if sync_source and sync_target:
            return SyncResult(SyncAction.COPY, self.copy(old_path, new_path))
        if sync_target:
            return SyncResult(SyncAction.ADD, self.add(new_path))

        return SyncResult(SyncAction.NONE)
