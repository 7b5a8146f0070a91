"""
Error types raised by the Bamboo registry client.

Every failure surfaced by a public operation is an instance of
``BambooClientError``. The hierarchy is closed: callers can rely on the
subclasses below being the only kinds they will ever see.
"""

from typing import Optional


class BambooClientError(Exception):
    """Base exception for all registry client errors."""

    default_message = "bamboo client error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidEndpointError(BambooClientError):
    """A malformed base URL was supplied for the cluster."""

    default_message = "Invalid bamboo endpoint specified"


class ClusterUnavailableError(BambooClientError):
    """No healthy cluster member could be obtained."""

    default_message = "All the bamboo hosts are presently down"


class ResourceNotFoundError(BambooClientError):
    """The server answered 404."""

    default_message = "The resource does not exist"


class InvalidResponseError(BambooClientError):
    """The server answered with a body that could not be trusted or decoded."""

    default_message = "Invalid response from bamboo"


class ServerError(BambooClientError):
    """The server rejected the request with an error message."""

    default_message = "unknown error"


class RequestTimeoutError(BambooClientError):
    """The request timed out before a response was received."""

    default_message = "The operation has timed out"


class InvalidArgumentError(BambooClientError):
    """A caller-supplied value failed a precondition."""

    default_message = "The argument passed is invalid"
