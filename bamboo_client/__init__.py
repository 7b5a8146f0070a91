"""
Client for the Bamboo service registry HTTP API.

Typical use::

    async with new_client(ClientConfig(url="http://bamboo-1:8000,http://bamboo-2:8000")) as client:
        await client.create_service(Service.create("/web", "hdr(host) -i web.example.com"))
        services = await client.all_services()
"""

import logging

from .cluster import ClusterMembershipProvider, HttpCluster, SelectionStrategy
from .config import ClientConfig, load_config, new_default_config
from .errors import (
    BambooClientError,
    ClusterUnavailableError,
    InvalidArgumentError,
    InvalidEndpointError,
    InvalidResponseError,
    RequestTimeoutError,
    ResourceNotFoundError,
    ServerError,
)
from .models import CallOutcome, Service
from .services import SERVICES_API_URI, BambooClient, ServiceRegistryAPI, new_client
from .transport import ClusterHTTPExecutor, HTTPCallExecutor, ResponseClassifier

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BambooClient",
    "BambooClientError",
    "CallOutcome",
    "ClientConfig",
    "ClusterHTTPExecutor",
    "ClusterMembershipProvider",
    "ClusterUnavailableError",
    "HTTPCallExecutor",
    "HttpCluster",
    "InvalidArgumentError",
    "InvalidEndpointError",
    "InvalidResponseError",
    "RequestTimeoutError",
    "ResourceNotFoundError",
    "ResponseClassifier",
    "SERVICES_API_URI",
    "SelectionStrategy",
    "ServerError",
    "Service",
    "ServiceRegistryAPI",
    "load_config",
    "new_client",
    "new_default_config",
]
