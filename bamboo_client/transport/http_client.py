"""
HTTP transport for the registry cluster.

This module executes a single logical call against the cluster: it picks a
member, sends the request with a fixed timeout, and fails over to another
member when the chosen one does not produce an HTTP response at all.
"""

import asyncio
import time
from typing import Optional

import httpx

from bamboo_client.cluster import ClusterMembershipProvider
from bamboo_client.config import DEFAULT_CONNECT_TIMEOUT, DEFAULT_REQUEST_TIMEOUT, ClientLogger
from bamboo_client.errors import (
    ClusterUnavailableError,
    InvalidResponseError,
    RequestTimeoutError,
)
from bamboo_client.models.service import CallOutcome

from .executor import HTTPCallExecutor

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ClusterHTTPExecutor(HTTPCallExecutor):
    """HTTP call executor with failover across cluster members."""

    def __init__(
        self,
        cluster: ClusterMembershipProvider,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        max_attempts: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[ClientLogger] = None,
    ):
        """
        Initialize the executor.

        Args:
            cluster: Membership provider handing out base URLs
            timeout: Overall timeout of one attempt in seconds
            connect_timeout: Timeout for establishing the connection; must be
                             below ``timeout`` so an unreachable member fails
                             over, half of ``timeout`` is used otherwise
            max_attempts: Attempts per call before giving up; defaults to
                          the number of cluster members
            http_client: Client to send requests with; owned by the caller
                         when given, created and owned here otherwise
            logger: Structured logger for calls and failovers
        """
        self.cluster = cluster
        self.timeout = timeout
        self.connect_timeout = connect_timeout if connect_timeout < timeout else timeout / 2
        self.max_attempts = max_attempts or max(len(cluster), 1)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self._get_timeout_config())
        self._logger = logger or ClientLogger()

    def _get_timeout_config(self) -> httpx.Timeout:
        """Get the HTTPX timeouts applied to every attempt."""
        return httpx.Timeout(self.timeout, connect=self.connect_timeout)

    async def perform_call(self, method: str, path: str, body: bytes = b"") -> CallOutcome:
        """
        Execute the call, failing over on connection-level errors.

        Raises:
            ClusterUnavailableError: No member is available, or every
                                     attempt failed to reach a server
            RequestTimeoutError: The request timed out after connecting
            InvalidResponseError: The response body could not be read
        """
        last_error = None

        for attempt in range(1, self.max_attempts + 1):
            member = await self.cluster.select_member()
            url = f"{member}/{path}"
            self._logger.debug(
                "Sending registry request",
                method=method,
                url=url,
                attempt=attempt,
                body=body.decode("utf-8", errors="replace"),
            )

            start_time = time.time()
            try:
                outcome = await asyncio.wait_for(
                    self._send(method, url, body), timeout=self.timeout
                )
            except asyncio.TimeoutError as e:
                raise RequestTimeoutError(
                    f"Request to {url} timed out after {self.timeout}s"
                ) from e
            except httpx.ConnectTimeout as e:
                last_error = e
            except httpx.TimeoutException as e:
                raise RequestTimeoutError(f"Request to {url} timed out: {e}") from e
            except httpx.TransportError as e:
                last_error = e
            else:
                response_time = (time.time() - start_time) * 1000
                self._logger.log_api_call(
                    method,
                    path,
                    outcome.status_code,
                    response_time,
                    url=url,
                    content=outcome.text,
                )
                return outcome

            # No HTTP response at all: report the member and try another one
            self.cluster.mark_current_unhealthy()
            self._logger.log_failover(member, attempt, str(last_error) or type(last_error).__name__)

        raise ClusterUnavailableError(
            f"All {self.max_attempts} attempts failed, last error: {last_error}"
        )

    async def _send(self, method: str, url: str, body: bytes) -> CallOutcome:
        # Per-request timeouts also apply to a client shared with the caller
        request = self._client.build_request(
            method, url, content=body, headers=DEFAULT_HEADERS, timeout=self._get_timeout_config()
        )
        response = await self._client.send(request, stream=True)
        try:
            content = b""
            if response.headers.get("content-length") != "0":
                try:
                    content = await response.aread()
                except httpx.TimeoutException as e:
                    raise RequestTimeoutError(f"Timed out reading response from {url}") from e
                except httpx.HTTPError as e:
                    raise InvalidResponseError(f"Failed to read response from {url}: {e}") from e
            return CallOutcome(status_code=response.status_code, content=content)
        finally:
            await response.aclose()

    async def close(self) -> None:
        """Close the HTTP client if it is owned by this executor."""
        if self._owns_client:
            await self._client.aclose()
