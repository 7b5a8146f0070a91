"""Registry operations exposed to applications."""

from .registry import (
    SERVICES_API_URI,
    BambooClient,
    ServiceRegistryAPI,
    new_client,
)

__all__ = [
    "BambooClient",
    "SERVICES_API_URI",
    "ServiceRegistryAPI",
    "new_client",
]
