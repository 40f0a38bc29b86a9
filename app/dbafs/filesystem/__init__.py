"""Filesystem primitives, file access, protection markers and folder scanning."""

from dbafs.filesystem.file import FileHandle
from dbafs.filesystem.operator import FilesystemOperator
from dbafs.filesystem.protected import PUBLIC_MARKER, is_public, is_unprotected
from dbafs.filesystem.scanner import HashComputer, SizeComputer

__all__ = [
    "PUBLIC_MARKER",
    "FileHandle",
    "FilesystemOperator",
    "HashComputer",
    "SizeComputer",
    "is_public",
    "is_unprotected",
]
