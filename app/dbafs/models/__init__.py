"""Data models for dbafs."""

from dbafs.models.record import MetadataRecord, RecordType, create_record

__all__ = ["MetadataRecord", "RecordType", "create_record"]
