"""Metadata store for the synchronized subtree.

This module defines the MetadataStore protocol the folder layer talks
to, and JsonMetadataStore, which persists one MetadataRecord per line
in a JSON Lines file.

Only entries strictly below the configured upload path are tracked.
Folders named in the exclude list, and folders below a directory that
contains a ``.nosync`` marker file, are never tracked.
"""

import hashlib
import json
import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import replace
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Protocol

from dbafs.core.resolver import PathResolver
from dbafs.filesystem.file import FileHandle
from dbafs.models.record import MetadataRecord, RecordType, create_record, now_timestamp

logger = logging.getLogger(__name__)

NOSYNC_MARKER = ".nosync"


class MetadataStoreError(Exception):
    """Raised when a metadata store operation is invalid."""


class MetadataStore(Protocol):
    """Operations the folder layer needs from a metadata store."""

    def should_be_synchronized(self, path: str) -> bool: ...

    def add_resource(self, path: str) -> MetadataRecord: ...

    def move_resource(self, old_path: str, new_path: str) -> MetadataRecord: ...

    def copy_resource(self, old_path: str, new_path: str) -> MetadataRecord | None: ...

    def delete_resource(self, path: str) -> MetadataRecord | None: ...

    def delete_records(self, records: Iterable[MetadataRecord]) -> None: ...

    def update_folder_hashes(self, path: str) -> None: ...

    def find_by_path(self, path: str) -> MetadataRecord | None: ...

    def find_multiple_by_basepath(self, prefix: str) -> list[MetadataRecord] | None: ...


class JsonMetadataStore:
    """Metadata store backed by a JSON Lines file.

    The whole file is rewritten atomically after every mutation, so the
    file always holds a consistent snapshot.

    Attributes:
        upload_path: Root-relative folder whose descendants are tracked.
        sync_exclude: Folder names (relative to upload_path) never tracked.
        data_file: JSON Lines file holding the records.
    """

    def __init__(
        self,
        resolver: PathResolver,
        *,
        data_file: Path,
        upload_path: str = "files",
        sync_exclude: Iterable[str] = (),
    ) -> None:
        self._resolver = resolver
        self.data_file = data_file
        self.upload_path = resolver.normalize(upload_path)
        self.sync_exclude = tuple(resolver.normalize(e) for e in sync_exclude)
        self._records: dict[str, MetadataRecord] | None = None

    # =========================================================================
    # Synchronization predicate
    # =========================================================================

    def should_be_synchronized(self, path: str) -> bool:
        """Check if a path lies inside the synchronized subtree.

        Args:
            path: Root-relative path.

        Returns:
            True if the path is strictly below the upload path, not
            excluded and not below a folder holding a .nosync marker.
        """
        path = self._resolver.normalize(path)

        if not path.startswith(self.upload_path + "/"):
            return False

        for excluded in self.sync_exclude:
            prefix = PathResolver.join(self.upload_path, excluded)
            if path == prefix or path.startswith(prefix + "/"):
                return False

        # The path itself and every folder between it and the upload path
        current = path
        while current != self.upload_path:
            if self._resolver.is_file(PathResolver.join(current, NOSYNC_MARKER)):
                return False
            current = self._resolver.parent(current)

        return True

    # =========================================================================
    # Lookups
    # =========================================================================

    def find_by_path(self, path: str) -> MetadataRecord | None:
        return self._map().get(self._resolver.normalize(path))

    def find_multiple_by_basepath(self, prefix: str) -> list[MetadataRecord] | None:
        """Find all records whose path starts with the given prefix.

        Returns:
            Records sorted by path, or None if no record matches.
        """
        records = sorted(
            (r for p, r in self._map().items() if p.startswith(prefix)),
            key=lambda r: r.path,
        )
        return records or None

    def all_records(self) -> list[MetadataRecord]:
        """Return every record, sorted by path."""
        return sorted(self._map().values(), key=lambda r: r.path)

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_resource(self, path: str) -> MetadataRecord:
        """Track a file or folder, its missing ancestors and its descendants.

        Already tracked entries are left unchanged.

        Args:
            path: Root-relative path of an existing file or folder.

        Returns:
            The record of the path.

        Raises:
            MetadataStoreError: If the path is not synchronized or does not exist.
        """
        path = self._resolver.normalize(path)

        if not self.should_be_synchronized(path):
            raise MetadataStoreError(f"Path is not synchronized: {path}")
        if not self._resolver.exists(path):
            raise MetadataStoreError(f"Path does not exist: {path}")

        self._ensure_ancestors(path)
        record = self._ensure_record(path)

        if record.is_folder:
            for child in self._scan(path):
                self._ensure_record(child)
            self._update_hashes(path)
        else:
            self._update_hashes(self._resolver.parent(path))

        self._save()
        logger.debug("Added resource %s", path)
        return self._map()[path]

    def move_resource(self, old_path: str, new_path: str) -> MetadataRecord:
        """Move the record of a path and all its descendants to a new path.

        Falls back to add_resource() if the old path is not tracked.

        Returns:
            The record at the new path.
        """
        old_path = self._resolver.normalize(old_path)
        new_path = self._resolver.normalize(new_path)
        records = self._map()

        if old_path not in records:
            return self.add_resource(new_path)

        self._ensure_ancestors(new_path)
        parent = records.get(self._resolver.parent(new_path))

        for record in list(self._subtree(old_path)):
            del records[record.path]
            moved_path = new_path + record.path[len(old_path) :]
            changes: dict[str, object] = {"path": moved_path, "tstamp": now_timestamp()}
            if record.path == old_path:
                changes["name"] = PathResolver.basename(new_path)
                changes["pid"] = parent.uuid if parent is not None else None
            records[moved_path] = replace(record, **changes)  # type: ignore[arg-type]

        self._update_hashes(self._resolver.parent(old_path))
        self._update_hashes(new_path)
        self._save()
        logger.debug("Moved resource %s to %s", old_path, new_path)
        return records[new_path]

    def copy_resource(self, old_path: str, new_path: str) -> MetadataRecord | None:
        """Clone the records of a subtree under a new path with new UUIDs.

        Paths already tracked below the new path are kept as they are.
        Falls back to add_resource() if the old path is not tracked.

        Returns:
            The record at the new path.
        """
        old_path = self._resolver.normalize(old_path)
        new_path = self._resolver.normalize(new_path)
        records = self._map()

        if old_path not in records:
            return self.add_resource(new_path)

        self._ensure_ancestors(new_path)
        parent = records.get(self._resolver.parent(new_path))
        uuid_map: dict[str | None, str | None] = {}

        for record in sorted(self._subtree(old_path), key=lambda r: r.path):
            copied_path = new_path + record.path[len(old_path) :]

            if copied_path in records:
                uuid_map[record.uuid] = records[copied_path].uuid
                continue

            if record.path == old_path:
                pid = parent.uuid if parent is not None else None
            else:
                pid = uuid_map.get(record.pid)

            copy = create_record(copied_path, record.type, pid=pid, hash=record.hash)
            uuid_map[record.uuid] = copy.uuid
            records[copied_path] = copy

        self._update_hashes(new_path)
        self._save()
        logger.debug("Copied resource %s to %s", old_path, new_path)
        return records[new_path]

    def delete_resource(self, path: str) -> MetadataRecord | None:
        """Delete the record of a path and all its descendants.

        Returns:
            Always None, the path has no record anymore.
        """
        path = self._resolver.normalize(path)
        records = self._map()

        for record in list(self._subtree(path)):
            del records[record.path]

        self._update_hashes(self._resolver.parent(path))
        self._save()
        logger.debug("Deleted resource %s", path)
        return None

    def delete_records(self, records: Iterable[MetadataRecord]) -> None:
        """Delete the given records, leaving descendants and hashes alone.

        The data file is written once for the whole batch.
        """
        by_path = self._map()
        removed = [r.path for r in records if by_path.pop(r.path, None) is not None]

        if removed:
            self._save()
            logger.debug("Deleted %d records", len(removed))

    def update_folder_hashes(self, path: str) -> None:
        """Recompute the stored hash of a folder and all its ancestors.

        For a file path the hashes of its parent folders are updated.
        """
        path = self._resolver.normalize(path)
        record = self.find_by_path(path)

        if record is not None and not record.is_folder:
            path = self._resolver.parent(path)

        self._update_hashes(path)
        self._save()

    # =========================================================================
    # Internals
    # =========================================================================

    def _map(self) -> dict[str, MetadataRecord]:
        if self._records is None:
            self._records = {r.path: r for r in self._load()}
        return self._records

    def _subtree(self, path: str) -> Iterator[MetadataRecord]:
        """Records of a path and all its descendants."""
        for record_path, record in self._map().items():
            if record_path == path or record_path.startswith(path + "/"):
                yield record

    def _ensure_ancestors(self, path: str) -> None:
        """Create folder records for missing ancestors inside the upload path."""
        ancestors: list[str] = []
        current = self._resolver.parent(path)

        while current.startswith(self.upload_path + "/"):
            ancestors.append(current)
            current = self._resolver.parent(current)

        for ancestor in reversed(ancestors):
            if ancestor not in self._map() and self._resolver.is_dir(ancestor):
                self._ensure_record(ancestor)

    def _ensure_record(self, path: str) -> MetadataRecord:
        """Return the record of a path, creating it if missing."""
        records = self._map()
        if path in records:
            return records[path]

        parent = records.get(self._resolver.parent(path))
        pid = parent.uuid if parent is not None else None

        if self._resolver.is_dir(path):
            record = create_record(path, RecordType.FOLDER, pid=pid)
        else:
            file_hash = FileHandle(path, self._resolver).hash
            record = create_record(path, RecordType.FILE, pid=pid, hash=file_hash)

        records[path] = record
        return record

    def _scan(self, path: str) -> Iterator[str]:
        """Pre-order walk of the trackable descendants of a folder.

        Hidden entries are skipped, as are folders that are not synchronized
        (excluded or marked with .nosync). Symlinked directories are not
        descended into.
        """
        for entry in sorted(self._resolver.absolute(path).iterdir()):
            if entry.name.startswith("."):
                continue

            child = PathResolver.join(path, entry.name)

            if entry.is_dir() and not entry.is_symlink():
                if not self.should_be_synchronized(child):
                    continue
                yield child
                yield from self._scan(child)
            elif entry.is_file():
                yield child

    def _update_hashes(self, path: str) -> None:
        """Recompute folder hashes from a folder up to the upload path."""
        records = self._map()
        current = path

        while current.startswith(self.upload_path + "/"):
            record = records.get(current)
            if record is not None and record.is_folder:
                records[current] = replace(
                    record, hash=self._folder_hash(current), tstamp=now_timestamp()
                )
            current = self._resolver.parent(current)

    def _folder_hash(self, path: str) -> str:
        """MD5 over the sorted name/hash pairs of a folder's direct children."""
        children = sorted(
            (r for r in self._map().values() if self._resolver.parent(r.path) == path),
            key=lambda r: r.name,
        )
        payload = "\0".join(f"{c.name}\0{c.hash}" for c in children)
        return hashlib.md5(payload.encode("utf-8")).hexdigest()

    def _load(self) -> list[MetadataRecord]:
        """Read records from the data file, skipping corrupt lines."""
        if not self.data_file.exists():
            return []

        records: list[MetadataRecord] = []

        with self.data_file.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    records.append(MetadataRecord.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning(
                        "Skipping corrupt metadata line %d: %s",
                        line_num,
                        str(e),
                    )
                    continue

        return records

    def _save(self) -> None:
        """Write all records atomically to the data file.

        Raises:
            MetadataStoreError: If the file cannot be written.
        """
        self.data_file.parent.mkdir(parents=True, exist_ok=True)

        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.data_file.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                for record in self.all_records():
                    f.write(json.dumps(record.to_dict(), separators=(",", ":")) + "\n")
            os.replace(str(tmp_path), str(self.data_file))
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise MetadataStoreError(f"Failed to write metadata store: {e}") from e
