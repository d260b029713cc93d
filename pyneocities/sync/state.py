"""State management for tracking what the site contains.

The state file records, for every file uploaded by the last successful
sync, its path relative to the synced directory and its SHA-1 digest.
Comparing it against the local tree tells which files need uploading or
deleting without asking the API.
"""

import logging
from pathlib import Path
from typing import Optional

from ..api import NeocitiesClient
from ..exceptions import SyncIOError

logger = logging.getLogger(__name__)

Snapshot = dict[str, str]
"""Mapping of relative path to content digest"""

SEPARATOR = ":"


def parse_state(text: str) -> Snapshot:
    """Parse the contents of a state file.

    Each line holds ``path:digest``. The first ``:`` separates the two;
    lines without one are skipped.

    Args:
        text: State file contents

    Returns:
        Snapshot mapping relative paths to digests
    """
    snapshot: Snapshot = {}
    for line in text.splitlines():
        path, sep, digest = line.partition(SEPARATOR)
        if not sep:
            continue
        snapshot[path] = digest
    return snapshot


def format_state(snapshot: Snapshot) -> str:
    """Serialize a snapshot to the state file format, sorted by path."""
    return "".join(
        f"{path}{SEPARATOR}{digest}\n" for path, digest in sorted(snapshot.items())
    )


class SyncStateManager:
    """Reads and writes state files.

    Writes are not atomic; only one process may sync a given state file
    at a time.
    """

    def load(self, state_file: Path) -> Optional[Snapshot]:
        """Load a snapshot from a state file.

        Args:
            state_file: Path to the state file

        Returns:
            Snapshot if the file exists, None otherwise

        Raises:
            SyncIOError: If the file exists but cannot be read
        """
        try:
            text = state_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No sync state found at {state_file}")
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise SyncIOError(f"Failed to read state file {state_file}: {e}") from e

        snapshot = parse_state(text)
        logger.debug(f"Loaded sync state with {len(snapshot)} files from {state_file}")
        return snapshot

    def save(self, snapshot: Snapshot, state_file: Path) -> None:
        """Overwrite a state file with a snapshot.

        Args:
            snapshot: Snapshot to persist
            state_file: Path to the state file

        Raises:
            SyncIOError: If the file cannot be written
        """
        try:
            state_file.write_text(format_state(snapshot), encoding="utf-8")
        except (OSError, UnicodeEncodeError) as e:
            raise SyncIOError(f"Failed to write state file {state_file}: {e}") from e
        logger.debug(f"Saved sync state with {len(snapshot)} files to {state_file}")

    def clear(self, state_file: Path) -> bool:
        """Delete a state file so the next sync fetches state from the site.

        Returns:
            True if state was cleared, False if no state existed
        """
        try:
            state_file.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise SyncIOError(f"Failed to delete state file {state_file}: {e}") from e
        logger.debug(f"Cleared sync state at {state_file}")
        return True


def fetch_remote_state(client: NeocitiesClient) -> Snapshot:
    """Build a snapshot from the files currently on the site.

    Directories carry no digest and are left out.

    Args:
        client: Neocities API client

    Returns:
        Snapshot mapping site paths to digests
    """
    snapshot: Snapshot = {}
    for entry in client.list_files():
        if entry.sha1_hash:
            snapshot[entry.path] = entry.sha1_hash
    logger.debug(f"Fetched remote state with {len(snapshot)} files")
    return snapshot
