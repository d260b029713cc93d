"""Directory scanning utilities for sync operations."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import SyncIOError
from ..utils import has_allowed_extension

logger = logging.getLogger(__name__)


@dataclass
class LocalFile:
    """Represents a local file found by a scan."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Relative path (using forward slashes for cross-platform compatibility)"""

    @classmethod
    def from_path(cls, file_path: Path, base_path: Path) -> "LocalFile":
        # Use as_posix() to ensure forward slashes on all platforms
        relative_path = file_path.relative_to(base_path).as_posix()
        try:
            relative_path.encode("utf-8")
        except UnicodeEncodeError as e:
            raise SyncIOError(f"File name is not valid UTF-8: {file_path!r}") from e
        return cls(path=file_path, relative_path=relative_path)

    def read(self) -> bytes:
        """Read the full file content.

        Raises:
            SyncIOError: If the file cannot be read
        """
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise SyncIOError(f"Failed to read {self.path}: {e}") from e


class DirectoryScanner:
    """Finds the files of a directory tree that take part in a sync.

    Examples:
        >>> scanner = DirectoryScanner(exclude_path=Path("site/.state"))
        >>> files = scanner.scan_local(Path("site"))

        >>> # Only HTML and CSS files
        >>> scanner = DirectoryScanner(allowed_types=frozenset({"html", "css"}))
    """

    def __init__(
        self,
        allowed_types: Optional[frozenset[str]] = None,
        exclude_path: Optional[Path] = None,
    ):
        """Initialize directory scanner.

        Args:
            allowed_types: If given, only files with one of these
                extensions are returned
            exclude_path: A file never returned, normally the state file
        """
        self.allowed_types = allowed_types
        self.exclude_path = exclude_path.resolve() if exclude_path else None

    def should_ignore(self, path: Path, base_path: Path) -> bool:
        """Check whether a regular file is left out of the sync."""
        if self.exclude_path is not None and path.resolve() == self.exclude_path:
            logger.debug(f"Ignoring state file: {path}")
            return True

        if self.allowed_types is not None:
            relative_path = path.relative_to(base_path).as_posix()
            if not has_allowed_extension(relative_path, self.allowed_types):
                logger.debug(f"Ignoring (file type): {relative_path}")
                return True

        return False

    def scan_local(
        self, directory: Path, base_path: Optional[Path] = None
    ) -> list[LocalFile]:
        """Recursively scan a local directory.

        Args:
            directory: Directory to scan
            base_path: Base path for calculating relative paths (defaults to directory)

        Returns:
            List of LocalFile objects

        Raises:
            SyncIOError: If a directory cannot be listed
        """
        if base_path is None:
            base_path = directory

        files: list[LocalFile] = []

        try:
            items = sorted(directory.iterdir())
        except OSError as e:
            raise SyncIOError(f"Failed to list {directory}: {e}") from e

        for item in items:
            if item.is_dir():
                files.extend(self.scan_local(item, base_path))
            elif item.is_file():
                if not self.should_ignore(item, base_path):
                    files.append(LocalFile.from_path(item, base_path))

        return files
