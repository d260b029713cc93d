"""pyneocities - sync a local directory to a Neocities site."""

from .api import NeocitiesClient, RemoteEntry
from .exceptions import (
    NeocitiesAPIError,
    NeocitiesAuthenticationError,
    NeocitiesConfigError,
    NeocitiesError,
    NeocitiesFileTypeError,
    NeocitiesInvalidResponseError,
    NeocitiesMissingFilesError,
    NeocitiesNetworkError,
    NeocitiesUnknownError,
    RemoteErrorType,
    SyncIOError,
)
from .utils import calculate_sha1

__version__ = "0.1.0"

__all__ = [
    "NeocitiesClient",
    "RemoteEntry",
    "NeocitiesAPIError",
    "NeocitiesAuthenticationError",
    "NeocitiesConfigError",
    "NeocitiesError",
    "NeocitiesFileTypeError",
    "NeocitiesInvalidResponseError",
    "NeocitiesMissingFilesError",
    "NeocitiesNetworkError",
    "NeocitiesUnknownError",
    "RemoteErrorType",
    "SyncIOError",
    "calculate_sha1",
]
