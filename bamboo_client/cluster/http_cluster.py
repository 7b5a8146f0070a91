"""
In-process cluster membership for the registry client.

This module keeps the list of registry base URLs, selects a healthy one per
attempt using a configurable strategy, and tracks members reported as down.
Down members come back either after a recovery period or after answering
an on-demand health probe.
"""

import random
from contextvars import ContextVar
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

import httpx

from bamboo_client.config import ClientLogger
from bamboo_client.errors import ClusterUnavailableError, InvalidEndpointError
from bamboo_client.models.service import ClusterMember

from .provider import ClusterMembershipProvider


class SelectionStrategy(str, Enum):
    """Member selection strategies."""
    FAILOVER = "failover"
    ROUND_ROBIN = "round_robin"
    RANDOM = "random"


def parse_members(urls: Union[str, Iterable[str]]) -> List[str]:
    """
    Validate and normalise the member base URLs.

    Args:
        urls: A comma-separated string or an iterable of base URLs

    Returns:
        Base URLs without trailing slashes, in the given order

    Raises:
        InvalidEndpointError: If any URL is malformed or none is given
    """
    if isinstance(urls, str):
        urls = urls.split(",")

    members = []
    for raw in urls:
        candidate = raw.strip().rstrip("/")
        if not candidate:
            continue
        try:
            parsed = httpx.URL(candidate)
        except httpx.InvalidURL as e:
            raise InvalidEndpointError(f"Invalid bamboo endpoint specified: {raw!r}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise InvalidEndpointError(f"Invalid bamboo endpoint specified: {raw!r}")
        members.append(candidate)

    if not members:
        raise InvalidEndpointError("No bamboo endpoint specified")
    return members


class HttpCluster(ClusterMembershipProvider):
    """
    Cluster of interchangeable registry endpoints.

    Member state is only mutated between awaits. The member handed out by
    ``select_member`` is remembered per task, so concurrent calls sharing
    one instance each mark down the member they actually used.
    """

    def __init__(
        self,
        urls: Union[str, Iterable[str]],
        health_check_path: str = "",
        strategy: SelectionStrategy = SelectionStrategy.FAILOVER,
        recovery_seconds: Optional[float] = None,
        health_check_timeout: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[ClientLogger] = None,
    ):
        """
        Initialize the cluster.

        Args:
            urls: Member base URLs, comma-separated or as an iterable
            health_check_path: Path probed on down members, empty to disable probing
            strategy: How a healthy member is picked
            recovery_seconds: Seconds after which a down member is selectable again
            health_check_timeout: Timeout for a single probe in seconds
            http_client: Client used for probes; a short-lived one is created if omitted
            logger: Structured logger for member state changes
        """
        self._members = [ClusterMember(url=url) for url in parse_members(urls)]
        self.health_check_path = health_check_path.lstrip("/")
        self.strategy = strategy
        self.recovery_seconds = recovery_seconds
        self.health_check_timeout = health_check_timeout
        self._http_client = http_client
        self._logger = logger or ClientLogger()
        self._active = 0
        self._counter = 0
        self._current = ContextVar(f"bamboo_cluster_current_{id(self)}", default=None)

    def __len__(self) -> int:
        return len(self._members)

    @property
    def members(self) -> List[ClusterMember]:
        """Snapshots of the member bookkeeping."""
        return [member.model_copy() for member in self._members]

    @property
    def current(self) -> Optional[str]:
        """Base URL returned by the last selection made in the calling task."""
        member = self._current.get()
        return member.url if member else None

    async def select_member(self) -> str:
        """Select a healthy member, probing down members if none is left."""
        self._revive_recovered()
        healthy = self._healthy_members()

        if not healthy and self.health_check_path:
            await self.check_health()
            healthy = self._healthy_members()

        if not healthy:
            self._logger.warning(
                "No healthy cluster members available",
                total_members=len(self._members),
            )
            raise ClusterUnavailableError()

        selected = self._pick(healthy)
        self._current.set(selected)
        self._logger.debug(
            "Cluster member selected",
            member=selected.url,
            strategy=self.strategy.value,
            healthy_members=len(healthy),
        )
        return selected.url

    def mark_current_unhealthy(self) -> None:
        """Mark the member last selected by the calling task as down."""
        member = self._current.get()
        if member is None or not member.healthy:
            return
        self._mark(member, healthy=False)

    async def check_health(self) -> Dict[str, bool]:
        """
        Probe every down member and revive those that answer.

        Returns:
            Mapping of probed member URL to probe result; empty when
            probing is disabled
        """
        if not self.health_check_path:
            return {}

        results = {}
        for member in self._members:
            if member.healthy:
                continue
            healthy = await self._probe(member)
            member.last_health_check = datetime.now(timezone.utc)
            if healthy:
                self._mark(member, healthy=True)
            results[member.url] = healthy
        return results

    def reset(self) -> None:
        """Mark every member healthy again."""
        for member in self._members:
            if not member.healthy:
                self._mark(member, healthy=True)

    def _healthy_members(self) -> List[ClusterMember]:
        return [member for member in self._members if member.healthy]

    def _pick(self, healthy: List[ClusterMember]) -> ClusterMember:
        if self.strategy == SelectionStrategy.ROUND_ROBIN:
            selected = healthy[self._counter % len(healthy)]
            self._counter += 1
            return selected

        if self.strategy == SelectionStrategy.RANDOM:
            return random.choice(healthy)

        # Failover: stay on the active member until it is marked down
        total = len(self._members)
        for offset in range(total):
            index = (self._active + offset) % total
            if self._members[index].healthy:
                self._active = index
                return self._members[index]
        return healthy[0]

    def _revive_recovered(self) -> None:
        if self.recovery_seconds is None:
            return
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=self.recovery_seconds)
        for member in self._members:
            if not member.healthy and member.last_failure and member.last_failure <= cutoff:
                self._mark(member, healthy=True, reason="recovery period elapsed")

    def _mark(self, member: ClusterMember, healthy: bool, **kwargs) -> None:
        member.healthy = healthy
        if not healthy:
            member.failures += 1
            member.last_failure = datetime.now(timezone.utc)
        self._logger.log_member_status(member.url, healthy, failures=member.failures, **kwargs)

    async def _probe(self, member: ClusterMember) -> bool:
        health_url = f"{member.url}/{self.health_check_path}"
        try:
            if self._http_client is not None:
                response = await self._http_client.get(health_url, timeout=self.health_check_timeout)
            else:
                async with httpx.AsyncClient(timeout=self.health_check_timeout) as client:
                    response = await client.get(health_url)
        except httpx.HTTPError as e:
            self._logger.debug("Health check failed", member=member.url, url=health_url, error=str(e))
            return False

        healthy = response.is_success
        self._logger.debug(
            "Health check completed",
            member=member.url,
            url=health_url,
            status_code=response.status_code,
        )
        return healthy
