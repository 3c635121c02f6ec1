"""
Custom exception types for the ConnectWise Manage API client.

These exceptions allow callers to distinguish between a tenant that
could not be resolved, a server that could not be reached, and a
server that answered but rejected the request.
"""

from __future__ import annotations

from typing import List, Optional


class ConnectWiseError(Exception):
    """Base exception for all ConnectWise client errors."""


class ConnectWiseResolutionError(ConnectWiseError):
    """Raised when the ``companyinfo`` lookup for a tenant fails."""

    def __init__(self, message: str, *, company: str, site: str) -> None:
        super().__init__(message)
        self.company = company
        self.site = site


class ConnectWiseConnectionError(ConnectWiseError):
    """Raised when the API server could not be reached."""

    def __init__(self, message: str, *, url: str) -> None:
        super().__init__(message)
        self.url = url


class ConnectWiseBodyReadError(ConnectWiseConnectionError):
    """Raised when the response body could not be read after the headers arrived."""


class ConnectWiseAPIError(ConnectWiseError):
    """Raised when the API answers with an unexpected HTTP status.

    Attributes
    ----------
    status_code : int
        The numeric HTTP status code.
    reason : str
        The status text sent by the server (e.g. ``"Not Found"``).
    body : bytes
        The raw response body.  ConnectWise usually puts a structured
        JSON error here.
    url : str
        The request URL, without credentials.
    """

    def __init__(
        self,
        status_code: int,
        reason: str,
        body: bytes,
        url: str,
        *,
        expected: int,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.url = url
        self.expected = expected
        super().__init__(
            "Non-%d status: Code: %d Status: %d %s Message: %s"
            % (expected, status_code, status_code, reason, self.text)
        )

    @property
    def text(self) -> str:
        """The response body decoded as UTF-8."""
        return self.body.decode("utf-8", errors="replace")


class ConnectWisePaginationError(ConnectWiseError):
    """Raised when a request fails while walking the pages of a listing.

    ``pages`` holds the bodies collected before the failure and
    ``page`` the 1-based index of the page that failed.  The original
    error is available as ``cause`` (and ``__cause__``).
    """

    def __init__(
        self, path: str, page: int, pages: List[bytes], cause: ConnectWiseError
    ) -> None:
        super().__init__(f"Cannot fetch page {page} of {path}: {cause}")
        self.path = path
        self.page = page
        self.pages = pages
        self.cause: Optional[ConnectWiseError] = cause


class ConnectWiseDecodeError(ConnectWiseError):
    """Raised when a response body is not the JSON shape a helper expects."""
