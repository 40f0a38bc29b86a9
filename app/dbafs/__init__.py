"""dbafs - folders kept in sync with a metadata store."""

from dbafs.core.resolver import FolderError, FolderNotADirectoryError, PathResolver
from dbafs.folder import Folder
from dbafs.repository import Repository

__version__ = "0.1.0"

__all__ = [
    "Folder",
    "FolderError",
    "FolderNotADirectoryError",
    "PathResolver",
    "Repository",
    "__version__",
]
