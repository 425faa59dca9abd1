"""
Errors raised by the Sleeper client.

The aggregator treats the whole family as "this league is unavailable";
nothing in the client retries.
"""

from typing import Optional


class SleeperAPIError(RuntimeError):
    """Base class for every upstream failure."""


class UpstreamError(SleeperAPIError):
    """Sleeper answered, but not with a usable 2xx JSON body."""

    def __init__(self, status: Optional[int], message: str, url: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.url = url


class UpstreamUnreachable(SleeperAPIError):
    """No response: connection failure or the request timed out."""


class UpstreamRequestError(SleeperAPIError):
    """The request itself could not be built or sent (bad URL, protocol, ...)."""
