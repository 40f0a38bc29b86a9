"""Root-relative path resolution.

All paths handled by dbafs are relative to a repository root, use
forward slashes, and use the empty string for the root itself. The
PathResolver is the only place that turns them into absolute paths.
"""

from pathlib import Path, PurePosixPath


class FolderError(Exception):
    """Base exception for folder errors."""


class FolderNotADirectoryError(FolderError):
    """Raised when a folder path points at an existing plain file."""


class PathResolver:
    """Joins a repository root with root-relative paths.

    Attributes:
        root: Absolute path of the repository root.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    @staticmethod
    def normalize(path: str) -> str:
        """Normalize a root-relative path.

        "." and slash-only paths become "", the root sentinel. Leading and
        trailing slashes are stripped.

        Args:
            path: Root-relative path.

        Returns:
            Normalized root-relative path.
        """
        path = path.replace("\\", "/").strip("/")
        if path in ("", "."):
            return ""
        return path

    @staticmethod
    def join(*parts: str) -> str:
        """Join root-relative path parts, skipping empty segments."""
        return "/".join(p.strip("/") for p in parts if p and p.strip("/"))

    @staticmethod
    def parent(path: str) -> str:
        """Return the parent of a root-relative path ("" for top-level entries)."""
        parent = str(PurePosixPath(path).parent)
        return "" if parent == "." else parent

    @staticmethod
    def basename(path: str) -> str:
        """Return the final segment of a root-relative path."""
        return PurePosixPath(path).name

    def absolute(self, path: str) -> Path:
        """Resolve a root-relative path to an absolute filesystem path."""
        path = self.normalize(path)
        return self.root / path if path else self.root

    def relative(self, absolute: Path | str) -> str:
        """Convert an absolute path below the root to a root-relative path.

        Raises:
            ValueError: If the path is not located below the root.
        """
        rel = Path(absolute).relative_to(self.root).as_posix()
        return "" if rel == "." else rel

    def exists(self, path: str) -> bool:
        return self.absolute(path).exists()

    def is_dir(self, path: str) -> bool:
        return self.absolute(path).is_dir()

    def is_file(self, path: str) -> bool:
        return self.absolute(path).is_file()

    def ensure_not_file(self, path: str) -> None:
        """Reject paths that resolve to an existing plain file.

        Raises:
            FolderNotADirectoryError: If a plain file exists at the path.
        """
        if self.is_file(path):
            msg = f'File "{path}" is not a directory'
            raise FolderNotADirectoryError(msg)
