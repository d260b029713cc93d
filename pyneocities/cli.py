"""CLI interface for pyneocities."""

import logging
from pathlib import Path
from typing import Any, Optional

import click
from rich.markup import escape

from .api import NeocitiesClient
from .auth import require_api_key
from .config import config
from .exceptions import (
    NeocitiesAuthenticationError,
    NeocitiesError,
    NeocitiesFileTypeError,
    NeocitiesMissingFilesError,
    NeocitiesUnknownError,
)
from .output import OutputFormatter
from .sync import SyncEngine, SyncStateManager
from .utils import DEFAULT_STATE_FILE_NAME

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--api-key", "-k", envvar="NEOCITIES_API_KEY", help="Neocities API key"
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pyneocities")
@click.pass_context
def main(ctx: Any, api_key: Optional[str], quiet: bool, verbose: bool) -> None:
    """PyNeocities - Sync a directory to Neocities with as few API requests
    as possible."""
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = api_key
    ctx.obj["out"] = OutputFormatter(quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pyneocities").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option("--username", "-u", prompt="Enter your username", help="Site name")
@click.option(
    "--password",
    "-p",
    prompt="Enter your password",
    hide_input=True,
    help="Account password",
)
@click.pass_context
def login(ctx: Any, username: str, password: str) -> None:
    """Log in to Neocities and store the API key.

    The first account you log in with becomes the default.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        with NeocitiesClient(require_key=False) as client:
            api_key = client.get_api_key(username, password)
    except NeocitiesError as e:
        out.error(f"Login failed: {e}")
        ctx.exit(1)

    if api_key is None:
        out.error("Username or password is incorrect.")
        ctx.exit(1)

    try:
        config.save_api_key(username, api_key)
        if config.get_default_username() is None:
            config.set_default_username(username)
    except NeocitiesError as e:
        out.error(str(e))
        ctx.exit(1)

    out.success("Login successful.")


@main.command()
@click.option("--username", "-u", help="Site to log out (defaults to the default)")
@click.pass_context
def logout(ctx: Any, username: Optional[str]) -> None:
    """Forget the stored API key of a site."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        default_username = config.get_default_username()
        if username is None:
            username = default_username
        if username is None:
            out.error("Not logged in. Use 'pyneocities login' first.")
            ctx.exit(1)

        is_default = username == default_username
        removed = config.remove_api_key(username)
        if is_default:
            config.remove_default_username()
    except NeocitiesError as e:
        out.error(str(e))
        ctx.exit(1)

    if not removed:
        out.error(
            f"'{username}' is not logged in. Use 'pyneocities login' to login first."
        )
        ctx.exit(1)

    out.success("Logout successful.")


@main.command()
@click.argument(
    "path",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
)
@click.option("--username", "-u", help="Site to sync to (defaults to the default)")
@click.option(
    "--state",
    "-s",
    type=click.Path(dir_okay=False, path_type=Path),
    help=(
        "State file used to track the last sync "
        f"[default: PATH/{DEFAULT_STATE_FILE_NAME}]"
    ),
)
@click.option(
    "--ignore-disallowed-file-types",
    "-i",
    is_flag=True,
    help="Skip file types Neocities only accepts from supporters",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be uploaded and deleted without changing anything",
)
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    default=None,
    help="Number of files read and hashed in parallel",
)
@click.option(
    "--refetch-state",
    is_flag=True,
    help="Discard the state file and fetch the file list from Neocities",
)
@click.pass_context
def sync(
    ctx: Any,
    path: Path,
    username: Optional[str],
    state: Optional[Path],
    ignore_disallowed_file_types: bool,
    dry_run: bool,
    workers: Optional[int],
    refetch_state: bool,
) -> None:
    """Sync a directory to Neocities.

    PATH: Local directory to sync (defaults to the current directory)

    Only files whose content changed since the last sync are uploaded,
    and files removed locally are deleted from the site.

    Examples:
        pyneocities sync ./public
        pyneocities sync ./public --state ~/.public.state
        pyneocities sync . -i --dry-run
    """
    out: OutputFormatter = ctx.obj["out"]

    if state is None:
        state = path / DEFAULT_STATE_FILE_NAME

    try:
        api_key = require_api_key(ctx, out, username)
        if workers is None:
            workers = config.workers

        if refetch_state and not dry_run:
            if SyncStateManager().clear(state):
                out.info(f"Removed state file {escape(str(state))}")

        with NeocitiesClient(api_key=api_key) as client:
            engine = SyncEngine(client, out, max_workers=workers)
            stats = engine.sync(
                path,
                state_path=state,
                ignore_disallowed_file_types=ignore_disallowed_file_types,
                dry_run=dry_run,
                refetch_state=refetch_state,
            )
    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
    except NeocitiesAuthenticationError:
        out.error("Invalid session. Use 'pyneocities login' to login again.")
        ctx.exit(1)
    except NeocitiesFileTypeError:
        out.error(
            "Invalid file type. Use --ignore-disallowed-file-types "
            "to ignore such files."
        )
        ctx.exit(1)
    except NeocitiesMissingFilesError:
        out.error(
            "Out of sync. Re-run the sync command with --refetch-state "
            "or after deleting your state file."
        )
        ctx.exit(1)
    except NeocitiesUnknownError as e:
        logger.debug(f"Unclassified API error: {e.error_type!r}")
        out.error(f"{e}. Please report this as a bug.")
        ctx.exit(1)
    except (NeocitiesError, ValueError) as e:
        out.error(f"Sync failed: {e}")
        ctx.exit(1)

    if dry_run:
        out.success("Dry run complete!")
        out.info(f"would upload {stats.uploaded}, would delete {stats.deleted}")
    else:
        out.success("Sync complete!")
        out.info(f"uploaded {stats.uploaded}, deleted {stats.deleted}")


if __name__ == "__main__":
    main()
