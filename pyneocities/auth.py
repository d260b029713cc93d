"""API key resolution for CLI commands."""

from typing import Any, Optional

from .config import config
from .output import OutputFormatter


def require_api_key(
    ctx: Any, out: OutputFormatter, username: Optional[str] = None
) -> str:
    """Return the API key a command should use, or exit if there is none.

    The ``--api-key`` option (or ``NEOCITIES_API_KEY``) wins; otherwise the
    key stored for ``username`` or the default user is used.

    Args:
        ctx: Click context
        out: Output formatter for the error message
        username: Site whose stored key to use

    Returns:
        The API key
    """
    api_key: Optional[str] = ctx.obj.get("api_key")
    if api_key:
        return api_key

    if username is None:
        username = config.get_default_username()
    if username is not None:
        api_key = config.get_api_key(username)
    if api_key:
        return api_key

    out.error(
        "Not logged in. Use 'pyneocities login' first "
        "or set NEOCITIES_API_KEY environment variable."
    )
    ctx.exit(1)
