"""Metadata record model.

This module defines the data structure the metadata store keeps for
every tracked file and folder of the synchronized subtree.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import PurePosixPath
from typing import Any


class RecordType(str, Enum):
    """Type of a tracked filesystem entry.

    Attributes:
        FILE: Regular file.
        FOLDER: Directory.
    """

    FILE = "file"
    FOLDER = "folder"


@dataclass(frozen=True, slots=True)
class MetadataRecord:
    """Tracked representation of one file or folder.

    Records are keyed by their root-relative path. They are immutable;
    the store replaces a record when its path or hash changes.

    Attributes:
        uuid: Unique identifier (32-character hex string).
        pid: UUID of the parent folder record, None for the top-level folder.
        type: File or folder.
        path: Root-relative path.
        name: Final path segment.
        extension: Lower-case file extension without dot ("" for folders).
        hash: MD5 content hash (files) or child-hash digest (folders).
        tstamp: Last modification of the record (ISO 8601 format with timezone).
    """

    uuid: str
    pid: str | None
    type: RecordType
    path: str
    name: str
    extension: str = ""
    hash: str = ""
    tstamp: str = ""

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.uuid:
            msg = "Record UUID cannot be empty"
            raise ValueError(msg)
        if not self.path:
            msg = "Record path cannot be empty"
            raise ValueError(msg)

    @property
    def is_folder(self) -> bool:
        return self.type == RecordType.FOLDER

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "uuid": self.uuid,
            "pid": self.pid,
            "type": self.type.value,
            "path": self.path,
            "name": self.name,
            "extension": self.extension,
            "hash": self.hash,
            "tstamp": self.tstamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MetadataRecord:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If type is invalid.
        """
        return cls(
            uuid=data["uuid"],
            pid=data.get("pid"),
            type=RecordType(data["type"]),
            path=data["path"],
            name=data["name"],
            extension=data.get("extension", ""),
            hash=data.get("hash", ""),
            tstamp=data.get("tstamp", ""),
        )


def create_record(
    path: str,
    record_type: RecordType,
    pid: str | None = None,
    hash: str = "",
) -> MetadataRecord:
    """Factory function to create a new MetadataRecord.

    Automatically generates a unique ID, the name/extension fields and
    the current timestamp.

    Args:
        path: Root-relative path of the entry.
        record_type: File or folder.
        pid: UUID of the parent folder record.
        hash: Initial hash value.

    Returns:
        New MetadataRecord.
    """
    pure = PurePosixPath(path)
    extension = pure.suffix[1:].lower() if record_type == RecordType.FILE else ""

    return MetadataRecord(
        uuid=uuid.uuid4().hex,
        pid=pid,
        type=record_type,
        path=path,
        name=pure.name,
        extension=extension,
        hash=hash,
        tstamp=now_timestamp(),
    )


def now_timestamp() -> str:
    """Current time as ISO 8601 string with timezone."""
    return datetime.now(UTC).isoformat()
