"""Repository wiring.

Builds the collaborators a Folder needs (resolver, filesystem operator,
metadata store) from a DbafsConfig, so callers only deal with paths.
"""

import logging

from dbafs.core.config import DbafsConfig
from dbafs.core.resolver import PathResolver
from dbafs.core.store import JsonMetadataStore, MetadataStore
from dbafs.filesystem.file import FileHandle
from dbafs.filesystem.operator import FilesystemOperator
from dbafs.folder import Folder

logger = logging.getLogger(__name__)


class Repository:
    """Entry point for folder operations below one repository root.

    Attributes:
        resolver: Resolver for the repository root.
        operator: Filesystem primitives.
        store: Metadata store for the synchronized subtree.
    """

    def __init__(
        self,
        resolver: PathResolver,
        store: MetadataStore,
        operator: FilesystemOperator | None = None,
    ) -> None:
        self.resolver = resolver
        self.store = store
        self.operator = operator if operator is not None else FilesystemOperator(resolver)

    @classmethod
    def from_config(cls, config: DbafsConfig) -> "Repository":
        """Create a repository with a JSON metadata store from configuration."""
        resolver = PathResolver(config.root)
        store = JsonMetadataStore(
            resolver,
            data_file=config.effective_metadata_file,
            upload_path=config.upload_path,
            sync_exclude=config.sync_exclude,
        )
        logger.debug("Opened repository at %s (upload path %s)", resolver.root, config.upload_path)
        return cls(resolver, store)

    def folder(self, path: str) -> Folder:
        """Open a folder, creating it if it does not exist.

        Raises:
            FolderNotADirectoryError: If a plain file exists at the path.
        """
        return Folder(path, resolver=self.resolver, operator=self.operator, store=self.store)

    def file(self, path: str) -> FileHandle:
        return FileHandle(path, self.resolver)
