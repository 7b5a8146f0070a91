"""
Cluster membership contract consumed by the transport.

A provider tracks which base URLs of the registry cluster are usable and
hands one out per attempt. It is the single source of truth for member
liveness; the transport only reports failures back to it.
"""

from abc import ABC, abstractmethod


class ClusterMembershipProvider(ABC):
    """Abstract base class for cluster membership providers."""

    @abstractmethod
    async def select_member(self) -> str:
        """
        Pick a currently healthy member.

        Returns:
            Base URL of the selected member

        Raises:
            ClusterUnavailableError: If no healthy member is available
        """
        pass

    @abstractmethod
    def mark_current_unhealthy(self) -> None:
        """
        Mark the member returned by the last selection as unhealthy.

        Implementations shared by concurrent tasks must track the last
        selection per task.
        """
        pass

    def __len__(self) -> int:
        """Number of members known to the provider."""
        return 1
