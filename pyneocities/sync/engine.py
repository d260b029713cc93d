"""Core sync engine for executing sync operations."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from ..api import NeocitiesClient
from ..output import OutputFormatter
from ..utils import ALLOWED_FILE_TYPES, DEFAULT_STATE_FILE_NAME, format_size
from .reconciler import Reconciler, ReconcileResult
from .state import Snapshot, SyncStateManager, fetch_remote_state

logger = logging.getLogger(__name__)


@dataclass
class SyncStats:
    """Counts of a finished sync."""

    uploaded: int = 0
    deleted: int = 0


class SyncEngine:
    """Core sync engine that mirrors a local directory onto a site.

    A sync runs these steps in order, and stops at the first failure:

    1. Load the baseline from the state file, or fetch it from the site
       if there is no state file.
    2. Reconcile the local tree against the baseline.
    3. Upload changed files and delete removed ones, concurrently.
    4. Overwrite the state file with the new snapshot.

    The state file is only written after both remote calls succeeded.
    """

    def __init__(
        self,
        client: NeocitiesClient,
        output: Optional[OutputFormatter] = None,
        max_workers: Optional[int] = None,
        state_manager: Optional[SyncStateManager] = None,
    ):
        """Initialize sync engine.

        Args:
            client: Neocities API client
            output: Output formatter for displaying progress/status
            max_workers: Number of threads hashing local files
            state_manager: State file reader/writer
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.reconciler = Reconciler(max_workers=max_workers)
        self.state_manager = state_manager or SyncStateManager()

    def sync(
        self,
        root: Path,
        state_path: Optional[Path] = None,
        ignore_disallowed_file_types: bool = False,
        dry_run: bool = False,
        refetch_state: bool = False,
    ) -> SyncStats:
        """Sync a local directory to the site.

        Args:
            root: Local directory to sync
            state_path: State file (defaults to ``<root>/.state``)
            ignore_disallowed_file_types: Skip files a free account cannot
                upload, and delete them from the site if they were synced
                before
            dry_run: Only show what would be done
            refetch_state: Ignore the state file and use the site's file
                list as the baseline

        Returns:
            SyncStats with the number of uploaded and deleted files

        Raises:
            ValueError: If ``root`` is not an existing directory
            NeocitiesAPIError: If a remote call fails
            SyncIOError: If reading the tree or writing the state fails

        Examples:
            >>> engine = SyncEngine(client)
            >>> stats = engine.sync(Path("site"), dry_run=True)
            >>> print(f"Would upload {stats.uploaded} files")
        """
        if not root.exists():
            raise ValueError(f"Local directory does not exist: {root}")
        if not root.is_dir():
            raise ValueError(f"Local path is not a directory: {root}")

        if state_path is None:
            state_path = root / DEFAULT_STATE_FILE_NAME

        if not self.output.quiet:
            self.output.info(f"Syncing: {escape(str(root))}")
            if dry_run:
                self.output.info("Dry run: No changes will be made")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=self.output.console,
            disable=self.output.quiet,
        ) as progress:
            task = progress.add_task("Loading sync state...", total=None)
            baseline = self._resolve_baseline(state_path, refetch_state)

            progress.update(task, description="Hashing local files...")
            result = self.reconciler.reconcile(
                root,
                baseline,
                allowed_types=(
                    ALLOWED_FILE_TYPES if ignore_disallowed_file_types else None
                ),
                exclude_path=state_path,
            )

            stats = SyncStats(
                uploaded=len(result.uploads), deleted=len(result.deletes)
            )

            if dry_run:
                progress.stop()
                self._display_plan(result)
                return stats

            if result.has_changes:
                progress.update(
                    task,
                    description=(
                        f"Uploading {stats.uploaded} and deleting "
                        f"{stats.deleted} file(s)..."
                    ),
                )
                self._dispatch(result)

            progress.update(task, description="Saving sync state...")
            self.state_manager.save(result.new_snapshot, state_path)

        logger.debug(f"Sync finished: {stats}")
        return stats

    def _resolve_baseline(self, state_path: Path, refetch: bool = False) -> Snapshot:
        """Load the state file, falling back to the site's file list."""
        if refetch:
            logger.debug("Refetching file list from the site")
            return fetch_remote_state(self.client)
        baseline = self.state_manager.load(state_path)
        if baseline is not None:
            return baseline
        logger.debug("No local state, fetching file list from the site")
        return fetch_remote_state(self.client)

    def _dispatch(self, result: ReconcileResult) -> None:
        """Upload and delete concurrently and wait for both.

        If both calls fail, the upload error is raised.
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            upload_future = executor.submit(self.client.upload, result.uploads)
            delete_future = executor.submit(self.client.delete, result.deletes)
            upload_error = upload_future.exception()
            delete_error = delete_future.exception()

        if upload_error is not None:
            if delete_error is not None:
                logger.debug(f"Delete also failed: {delete_error}")
            raise upload_error
        if delete_error is not None:
            raise delete_error

    def _display_plan(self, result: ReconcileResult) -> None:
        if self.output.quiet:
            return
        if not result.has_changes:
            self.output.info("No changes needed - everything is in sync!")
            return
        for path in sorted(result.uploads):
            size = format_size(len(result.uploads[path]))
            self.output.info(
                f"  [bright_green]upload[/bright_green] {escape(path)} ({size})"
            )
        for path in sorted(result.deletes):
            self.output.info(f"  [bright_red]delete[/bright_red] {escape(path)}")
