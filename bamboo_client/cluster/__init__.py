"""
Cluster membership package.

This package contains the membership contract consumed by the transport
and the in-process implementation that tracks registry endpoints.
"""

from .http_cluster import HttpCluster, SelectionStrategy, parse_members
from .provider import ClusterMembershipProvider

__all__ = [
    "ClusterMembershipProvider",
    "HttpCluster",
    "SelectionStrategy",
    "parse_members",
]
