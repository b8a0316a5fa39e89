"""
Exception hierarchy for talking to the WordPress APIs.

Listing failures for posts and pages propagate and abort the run; the
events source and block-reference lookups catch :class:`WordPressError`
and degrade to "nothing found".
"""

from __future__ import annotations

from typing import Optional


class WordPressError(Exception):
    """Base class for every failure raised by the extraction core."""

    def __init__(self, message: str, *, status: Optional[int] = None, url: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class AuthenticationError(WordPressError):
    """401 from the API."""


class AuthorizationError(WordPressError):
    """403 from the API."""


class NotFoundError(WordPressError):
    """404 from the API."""


class ServerError(WordPressError):
    """5xx from the API."""


class HttpError(WordPressError):
    """Any other 4xx status."""


class NetworkError(WordPressError):
    """DNS failure, refused connection or timeout."""


class MalformedResponseError(WordPressError):
    """The payload does not have the expected shape."""


def raise_for_status(response, *, not_found_message: str = "") -> None:
    """Map an :class:`~wp_ingestion.http_client.HttpResponse` status to an exception."""
    status = response.status
    if status < 400:
        return
    if status == 401:
        raise AuthenticationError(
            f"Authentication failed ({status}): Please check your WordPress credentials",
            status=status,
            url=response.url,
        )
    if status == 403:
        raise AuthorizationError(
            f"Access forbidden ({status}): You don't have permission to access this WordPress site",
            status=status,
            url=response.url,
        )
    if status == 404:
        raise NotFoundError(
            not_found_message or f"Not found ({status}): {response.url}",
            status=status,
            url=response.url,
        )
    if status >= 500:
        raise ServerError(
            f"WordPress server error ({status}): {response.reason}. Please try again later",
            status=status,
            url=response.url,
        )
    raise HttpError(f"HTTP error ({status}): {response.reason}", status=status, url=response.url)
