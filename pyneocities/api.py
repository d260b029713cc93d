"""API client for Neocities."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .config import config
from .exceptions import (
    NeocitiesAuthenticationError,
    NeocitiesConfigError,
    NeocitiesFileTypeError,
    NeocitiesInvalidResponseError,
    NeocitiesMissingFilesError,
    NeocitiesNetworkError,
    NeocitiesUnknownError,
    RemoteErrorType,
)
from .utils import DEFAULT_TIMEOUT, INDEX_FILE_NAME

logger = logging.getLogger(__name__)


@dataclass
class RemoteEntry:
    """A file or directory as reported by the list endpoint."""

    path: str
    """Path relative to the site root"""

    is_directory: bool = False

    sha1_hash: Optional[str] = None
    """Content digest; directories have none"""

    size: Optional[int] = None

    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> RemoteEntry:
        """Create a RemoteEntry from an API response item."""
        return cls(
            path=data["path"],
            is_directory=bool(data.get("is_directory", False)),
            sha1_hash=data.get("sha1_hash"),
            size=data.get("size"),
            updated_at=data.get("updated_at"),
        )


class NeocitiesClient:
    """Client for the Neocities site API.

    Every endpoint answers with a JSON object whose ``result`` is either
    ``"success"`` or ``"error"``; errors carry an ``error_type`` code that
    is mapped onto the exception hierarchy in :mod:`pyneocities.exceptions`.
    Failed requests are never retried.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        require_key: bool = True,
    ):
        """Initialize Neocities API client.

        Args:
            api_key: Optional API key (uses config if not provided)
            api_url: Optional API URL (uses config if not provided)
            timeout: Request timeout in seconds
            require_key: Raise if no API key is available. Only
                :meth:`get_api_key` works without one.
        """
        self.api_key = api_key or config.api_key
        self.api_url = (api_url or config.api_url).rstrip("/")
        self.timeout = timeout

        if require_key and not self.api_key:
            raise NeocitiesConfigError(
                "API key not configured. Run 'pyneocities login' or set "
                "NEOCITIES_API_KEY environment variable."
            )

        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            headers = {}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.Client(
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> NeocitiesClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _raise_for_error(self, data: dict) -> None:
        """Raise the exception matching an error response.

        Args:
            data: Parsed response body

        Raises:
            NeocitiesAPIError subclass for any ``"error"`` result
        """
        if data.get("result") != "error" and "error_type" not in data:
            return

        code = data.get("error_type") or "unknown"
        message = data.get("message")
        kind = RemoteErrorType.from_code(code)
        logger.debug("API error %s: %s", code, message)

        if kind is RemoteErrorType.INVALID_AUTH:
            raise NeocitiesAuthenticationError(message or "Invalid API key")
        if kind is RemoteErrorType.INVALID_FILE_TYPE:
            raise NeocitiesFileTypeError(message or "File type not allowed")
        if kind is RemoteErrorType.MISSING_FILES:
            raise NeocitiesMissingFilesError(message or "Files missing on site")
        raise NeocitiesUnknownError(code, message)

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> dict:
        """Make an API request and return the decoded JSON body.

        Error statuses are not raised by httpx: Neocities reports failures
        such as ``invalid_auth`` with a 4xx status and a JSON body, and the
        body is what gets classified.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data

        Raises:
            NeocitiesNetworkError: If no response was received
            NeocitiesInvalidResponseError: If the body is not a JSON object
            NeocitiesAPIError: For error results reported by the API
        """
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        client = self._get_client()
        logger.debug("%s %s", method, url)

        try:
            response = client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise NeocitiesNetworkError(f"Network error: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise NeocitiesInvalidResponseError(
                f"Invalid JSON response from server (status {response.status_code})"
            ) from e
        if not isinstance(data, dict):
            raise NeocitiesInvalidResponseError(
                f"Unexpected response from server: {data!r}"
            )

        self._raise_for_error(data)
        return data

    # =========================
    # Authentication
    # =========================

    def get_api_key(self, username: str, password: str) -> Optional[str]:
        """Exchange a username and password for an API key.

        Args:
            username: Site name
            password: Account password

        Returns:
            The API key, or None if the credentials were rejected
        """
        try:
            data = self._request("GET", "/key", auth=(username, password))
        except NeocitiesAuthenticationError:
            return None
        api_key = data.get("api_key")
        if not api_key:
            raise NeocitiesInvalidResponseError("Response did not contain an API key")
        return api_key

    # =========================
    # File Operations
    # =========================

    def list_files(self) -> list[RemoteEntry]:
        """List every file and directory on the site.

        Returns:
            List of RemoteEntry objects
        """
        data = self._request("GET", "/list")
        files = data.get("files")
        if not isinstance(files, list):
            raise NeocitiesInvalidResponseError("Response did not contain a file list")
        return [RemoteEntry.from_dict(item) for item in files]

    def upload(self, files: dict[str, bytes]) -> None:
        """Upload files in a single request.

        Args:
            files: Mapping of site path to file content. An empty mapping
                sends no request.
        """
        if not files:
            return
        # Each part is named by its destination path
        parts = [(path, (path, content)) for path, content in files.items()]
        logger.debug("Uploading %d file(s)", len(parts))
        self._request("POST", "/upload", files=parts)

    def delete(self, paths: Iterable[str]) -> None:
        """Delete files in a single request.

        ``index.html`` can never be deleted and is dropped from the batch.

        Args:
            paths: Site paths to delete. Sends no request if nothing is
                left after dropping ``index.html``.
        """
        filenames = sorted(p for p in paths if p != INDEX_FILE_NAME)
        if not filenames:
            return
        logger.debug("Deleting %d file(s)", len(filenames))
        self._request("POST", "/delete", data={"filenames[]": filenames})
