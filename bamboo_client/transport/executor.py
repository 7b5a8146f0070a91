"""HTTP call executor capability shared by the real transport and test doubles."""

from abc import ABC, abstractmethod

from bamboo_client.models.service import CallOutcome

HTTP_GET = "GET"
HTTP_PUT = "PUT"
HTTP_DELETE = "DELETE"
HTTP_POST = "POST"


class HTTPCallExecutor(ABC):
    """Executes one logical HTTP call against the registry."""

    @abstractmethod
    async def perform_call(self, method: str, path: str, body: bytes = b"") -> CallOutcome:
        """
        Execute a call and return the raw outcome.

        Args:
            method: HTTP method
            path: Resource path relative to a member base URL
            body: Encoded request body, empty for none

        Returns:
            Status code and buffered body of the response
        """
        pass

    async def close(self) -> None:
        """Release transport resources."""
