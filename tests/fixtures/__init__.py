"""Test fixtures for registry client tests."""

import asyncio
import json
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from bamboo_client.cluster import ClusterMembershipProvider
from bamboo_client.errors import ClusterUnavailableError
from bamboo_client.models.service import CallOutcome, Service
from bamboo_client.transport import HTTPCallExecutor

MEMBER_URLS = ["http://bamboo-1:8000", "http://bamboo-2:8000", "http://bamboo-3:8000"]


class FakeExecutor(HTTPCallExecutor):
    """Executor double returning queued outcomes and recording calls."""

    def __init__(self, outcomes: Optional[List[CallOutcome]] = None):
        self.outcomes = list(outcomes or [])
        self.calls: List[Tuple[str, str, bytes]] = []
        self.closed = False

    def queue(self, status_code: int, payload=None, raw: Optional[bytes] = None):
        if raw is None:
            raw = json.dumps(payload).encode("utf-8") if payload is not None else b""
        self.outcomes.append(CallOutcome(status_code=status_code, content=raw))

    async def perform_call(self, method: str, path: str, body: bytes = b"") -> CallOutcome:
        self.calls.append((method, path, body))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


class FakeCluster(ClusterMembershipProvider):
    """Membership provider double cycling through its members."""

    def __init__(self, members: List[str]):
        self._members = list(members)
        self.down: List[str] = []
        self.selected: List[str] = []
        self.mark_calls = 0

    def __len__(self) -> int:
        return len(self._members)

    async def select_member(self) -> str:
        healthy = [member for member in self._members if member not in self.down]
        if not healthy:
            raise ClusterUnavailableError()
        member = healthy[0]
        self.selected.append(member)
        return member

    def mark_current_unhealthy(self) -> None:
        self.mark_calls += 1
        self.down.append(self.selected[-1])


class BrokenStream(httpx.AsyncByteStream):
    """Response body that fails after the headers were received."""

    async def __aiter__(self):
        raise httpx.ReadError("connection reset by peer")
        yield b""


class StalledConnectTransport(httpx.AsyncBaseTransport):
    """
    Transport whose listed hosts never complete the connection.

    Like a black-holed host, a stalled connection only ends when the
    request's connect timeout runs out. Other hosts are answered by
    ``handler``.
    """

    def __init__(self, stalled_hosts, handler):
        self.stalled_hosts = set(stalled_hosts)
        self.handler = handler
        self.connect_timeouts: List[Optional[float]] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if request.url.host in self.stalled_hosts:
            connect_timeout = request.extensions["timeout"]["connect"]
            self.connect_timeouts.append(connect_timeout)
            try:
                await asyncio.wait_for(asyncio.Event().wait(), connect_timeout)
            except asyncio.TimeoutError as e:
                raise httpx.ConnectTimeout("connect timed out", request=request) from e
        return self.handler(request)


class MockRegistryServer:
    """
    In-memory registry answering on every member host.

    Hosts listed in ``down_hosts`` refuse connections. A forced response,
    given as (status, response kwargs), answers every request that
    reaches the server.
    """

    def __init__(self):
        self.services: Dict[str, Dict[str, str]] = {}
        self.down_hosts: set = set()
        self.requests: List[httpx.Request] = []
        self.forced: Optional[Tuple[int, dict]] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host in self.down_hosts:
            raise httpx.ConnectError("Connection refused", request=request)

        self.requests.append(request)
        if self.forced is not None:
            status_code, kwargs = self.forced
            return httpx.Response(status_code, **kwargs)

        path = request.url.path
        if path == "/health":
            return httpx.Response(200, json={"status": "ok"})

        if path == "/api/services":
            if request.method == "GET":
                return httpx.Response(200, json=self.services)
            if request.method == "POST":
                payload = json.loads(request.content)
                if payload["id"] in self.services:
                    return httpx.Response(409, json={"message": "service already exists"})
                self.services[payload["id"]] = payload
                return httpx.Response(200, json=payload)

        if path.startswith("/api/services"):
            name = path[len("/api/services"):]
            if name not in self.services:
                return httpx.Response(404)
            if request.method == "PUT":
                payload = json.loads(request.content)
                self.services[name] = payload
                return httpx.Response(200, json=payload)
            if request.method == "DELETE":
                return httpx.Response(200, json=self.services.pop(name))

        return httpx.Response(405, json={"message": "method not allowed"})


@pytest.fixture
def sample_service():
    """Create a sample service record for testing."""
    return Service(id="/web", acl="hdr(host) -i web.example.com")


@pytest.fixture
def fake_executor():
    """Create an executor double."""
    return FakeExecutor()


@pytest.fixture
def fake_cluster():
    """Create a membership provider double with three members."""
    return FakeCluster(MEMBER_URLS)


@pytest.fixture
def registry_server():
    """Create an in-memory registry server."""
    return MockRegistryServer()


@pytest_asyncio.fixture
async def mock_http_client(registry_server):
    """Create an HTTP client routed to the in-memory registry."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(registry_server.handler)) as client:
        yield client
