"""Utility functions for pyneocities."""

import hashlib
from pathlib import PurePosixPath

# =============================================================================
# Constants
# =============================================================================

# Request timeout for API calls (uploads can be large)
DEFAULT_TIMEOUT: float = 60.0

# Name of the state file created inside the synced directory
DEFAULT_STATE_FILE_NAME: str = ".state"

# The site's front page; the API refuses to delete it
INDEX_FILE_NAME: str = "index.html"

# File types Neocities accepts from accounts without a supporter plan
# fmt: off
ALLOWED_FILE_TYPES: frozenset[str] = frozenset({
    "apng", "asc", "atom", "avif", "bin", "cjs", "css", "csv", "dae", "eot",
    "epub", "geojson", "gif", "glb", "gltf", "gpg", "htm", "html", "ico",
    "jpeg", "jpg", "js", "json", "key", "kml", "knowl", "less", "manifest",
    "map", "markdown", "md", "mf", "mid", "midi", "mjs", "mtl", "obj", "opml",
    "osdx", "otf", "pdf", "pgp", "pls", "png", "py", "rdf", "resolveHandle",
    "rss", "sass", "scss", "svg", "text", "toml", "ts", "tsv", "ttf", "txt",
    "webapp", "webmanifest", "webp", "woff", "woff2", "xcf", "xml", "yaml",
    "yml",
})
# fmt: on


# =============================================================================
# Hash calculation utilities
# =============================================================================


def calculate_sha1(data: bytes) -> str:
    """Calculate the content digest Neocities reports for a file.

    Args:
        data: File content

    Returns:
        Lowercase hexadecimal SHA-1 digest

    Examples:
        >>> calculate_sha1(b"abc")
        'a9993e364706816aba3e25717850c26c9cd0d89d'
    """
    return hashlib.sha1(data).hexdigest()


# =============================================================================
# Path utilities
# =============================================================================


def get_extension(relative_path: str) -> str:
    """Return the extension of a path without the leading dot.

    Examples:
        >>> get_extension("css/site.min.css")
        'css'
        >>> get_extension("LICENSE")
        ''
        >>> get_extension(".state")
        ''
    """
    return PurePosixPath(relative_path).suffix[1:]


def has_allowed_extension(relative_path: str, allowed_types: frozenset[str]) -> bool:
    """Check whether a file's extension is in ``allowed_types``."""
    extension = get_extension(relative_path)
    return bool(extension) and extension in allowed_types


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"
