"""Reconciliation of the local tree against a baseline snapshot."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..utils import calculate_sha1
from .scanner import DirectoryScanner, LocalFile
from .state import Snapshot

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of comparing the local tree with a baseline."""

    new_snapshot: Snapshot = field(default_factory=dict)
    """Digest of every eligible local file"""

    uploads: dict[str, bytes] = field(default_factory=dict)
    """New or changed files with their content"""

    deletes: set[str] = field(default_factory=set)
    """Baseline paths with no eligible local file"""

    @property
    def has_changes(self) -> bool:
        return bool(self.uploads or self.deletes)


class Reconciler:
    """Hashes the local tree and diffs it against a baseline snapshot.

    Files are read and hashed by a bounded pool of worker threads. Each
    worker only reads the baseline; results are folded into the new
    snapshot and upload batch by the calling thread.

    Examples:
        >>> reconciler = Reconciler(max_workers=8)
        >>> result = reconciler.reconcile(Path("site"), {"old.html": "a9993e..."})
        >>> sorted(result.deletes)
        ['old.html']
    """

    def __init__(self, max_workers: Optional[int] = None):
        """Initialize reconciler.

        Args:
            max_workers: Maximum number of files read at once (defaults to
                the ThreadPoolExecutor default)
        """
        self.max_workers = max_workers

    @staticmethod
    def _hash_file(
        local_file: LocalFile, baseline: Snapshot
    ) -> tuple[str, str, Optional[bytes]]:
        """Read and hash one file.

        Returns:
            Tuple of (relative_path, digest, content). Content is None
            when the digest matches the baseline.
        """
        content = local_file.read()
        digest = calculate_sha1(content)
        if baseline.get(local_file.relative_path) == digest:
            return local_file.relative_path, digest, None
        return local_file.relative_path, digest, content

    @staticmethod
    def _relative_to_root(path: Optional[Path], root: Path) -> Optional[str]:
        """Return ``path`` relative to ``root``, or None if it lies outside."""
        if path is None:
            return None
        try:
            return path.resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            return None

    def reconcile(
        self,
        root: Path,
        baseline: Snapshot,
        allowed_types: Optional[frozenset[str]] = None,
        exclude_path: Optional[Path] = None,
    ) -> ReconcileResult:
        """Compare the files under ``root`` with ``baseline``.

        Comparison is by content digest only; modification times are
        ignored.

        Args:
            root: Directory to scan
            baseline: Snapshot believed to match the site
            allowed_types: If given, files with other extensions are treated
                as if they did not exist
            exclude_path: File never taken into account (the state file)

        Returns:
            ReconcileResult with the new snapshot and both batches

        Raises:
            SyncIOError: If a directory or file cannot be read
        """
        scanner = DirectoryScanner(
            allowed_types=allowed_types,
            exclude_path=exclude_path,
        )
        local_files = scanner.scan_local(root)
        logger.debug(f"Found {len(local_files)} local file(s) under {root}")

        result = ReconcileResult()

        if local_files:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [
                    executor.submit(self._hash_file, local_file, baseline)
                    for local_file in local_files
                ]
                for future in as_completed(futures):
                    relative_path, digest, content = future.result()
                    result.new_snapshot[relative_path] = digest
                    if content is not None:
                        result.uploads[relative_path] = content

        excluded = self._relative_to_root(exclude_path, root)
        result.deletes = {
            path
            for path in baseline
            if path not in result.new_snapshot and path != excluded
        }

        logger.debug(
            f"Reconciled {len(result.new_snapshot)} file(s): "
            f"{len(result.uploads)} to upload, {len(result.deletes)} to delete"
        )
        return result
