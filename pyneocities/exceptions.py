"""Exceptions raised by pyneocities."""

from __future__ import annotations

from enum import Enum


class RemoteErrorType(str, Enum):
    """Error codes reported by the Neocities API in ``error_type``."""

    INVALID_AUTH = "invalid_auth"
    INVALID_FILE_TYPE = "invalid_file_type"
    MISSING_FILES = "missing_files"
    UNKNOWN = "unknown"
    """Any code not listed above"""

    @classmethod
    def from_code(cls, code: str) -> RemoteErrorType:
        """Map a raw ``error_type`` string to a known kind or ``UNKNOWN``."""
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


class NeocitiesError(Exception):
    """Base exception for all pyneocities errors."""


class NeocitiesConfigError(NeocitiesError):
    """Configuration is missing or invalid."""


class SyncIOError(NeocitiesError):
    """Reading the local tree or writing the state file failed."""


class NeocitiesAPIError(NeocitiesError):
    """Base exception for errors reported by or while talking to the API."""


class NeocitiesAuthenticationError(NeocitiesAPIError):
    """The API key is invalid or expired."""


class NeocitiesFileTypeError(NeocitiesAPIError):
    """The site rejected an uploaded file because of its type."""


class NeocitiesMissingFilesError(NeocitiesAPIError):
    """A delete request named files the site does not have.

    The local state file no longer matches the remote site.
    """


class NeocitiesNetworkError(NeocitiesAPIError):
    """The request never produced a response."""


class NeocitiesInvalidResponseError(NeocitiesAPIError):
    """The server answered with something that is not the expected JSON."""


class NeocitiesUnknownError(NeocitiesAPIError):
    """The API reported an error code pyneocities does not know about."""

    def __init__(self, error_type: str, message: str | None = None):
        self.error_type = error_type
        self.message = message
        text = f"Unexpected API error '{error_type}'"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)
