"""Data models for the registry client."""

from .service import CallOutcome, ClusterMember, ErrorMessage, Service

__all__ = [
    "CallOutcome",
    "ClusterMember",
    "ErrorMessage",
    "Service",
]
