"""
Service registry operations.

This module exposes the registry API as a capability interface and
implements it on top of an HTTP call executor: encode the payload, perform
the call, classify the outcome.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from bamboo_client.cluster import HttpCluster
from bamboo_client.config import ClientConfig, ClientLogger, new_default_config
from bamboo_client.errors import InvalidArgumentError
from bamboo_client.models.service import Service
from bamboo_client.transport import (
    HTTP_DELETE,
    HTTP_GET,
    HTTP_POST,
    HTTP_PUT,
    ClusterHTTPExecutor,
    HTTPCallExecutor,
    ResponseClassifier,
)

SERVICES_API_URI = "api/services"

ServiceMap = Dict[str, Service]


class ServiceRegistryAPI(ABC):
    """Operations offered by the Bamboo service registry."""

    @abstractmethod
    async def has_service(self, name: str) -> bool:
        """Check whether a service is registered under ``name``."""

    @abstractmethod
    async def all_services(self) -> ServiceMap:
        """Get every registered service keyed by name."""

    @abstractmethod
    async def create_service(self, service: Service) -> Service:
        """Register a new service."""

    @abstractmethod
    async def update_service(self, service: Service) -> Optional[Service]:
        """Replace an existing service."""

    @abstractmethod
    async def delete_service(self, name: str) -> Optional[Service]:
        """Remove a service."""

    async def close(self) -> None:
        """Release resources held by the client."""

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


class BambooClient(ServiceRegistryAPI):
    """
    Registry client issuing calls through an HTTP call executor.

    Errors from the executor and the classifier are propagated unchanged;
    the client adds only argument checks of its own.
    """

    def __init__(
        self,
        executor: HTTPCallExecutor,
        classifier: Optional[ResponseClassifier] = None,
        logger: Optional[ClientLogger] = None,
    ):
        self.executor = executor
        self.classifier = classifier or ResponseClassifier()
        self._logger = logger or ClientLogger()

    async def has_service(self, name: str) -> bool:
        services = await self.all_services()
        service = services.get(name)
        # Both the map key and the embedded identifier have to match
        return service is not None and service.id == name

    async def all_services(self) -> ServiceMap:
        services = await self._api_get(SERVICES_API_URI, result_type=Optional[ServiceMap])
        return services or {}

    async def create_service(self, service: Service) -> Service:
        self._check_service(service)
        return await self._api_post(SERVICES_API_URI, service, result_type=Service)

    async def update_service(self, service: Service) -> Optional[Service]:
        self._check_service(service)
        # No separator: the registry routes on the concatenated path
        return await self._api_put(
            SERVICES_API_URI + service.id, service, result_type=Service, allow_empty=True
        )

    async def delete_service(self, name: str) -> Optional[Service]:
        self._check_name(name)
        return await self._api_delete(
            SERVICES_API_URI + name, result_type=Service, allow_empty=True
        )

    async def close(self) -> None:
        await self.executor.close()

    async def _api_get(self, uri: str, post: Any = None, **kwargs) -> Any:
        return await self._api_call(HTTP_GET, uri, post, **kwargs)

    async def _api_post(self, uri: str, post: Any = None, **kwargs) -> Any:
        return await self._api_call(HTTP_POST, uri, post, **kwargs)

    async def _api_put(self, uri: str, post: Any = None, **kwargs) -> Any:
        return await self._api_call(HTTP_PUT, uri, post, **kwargs)

    async def _api_delete(self, uri: str, post: Any = None, **kwargs) -> Any:
        return await self._api_call(HTTP_DELETE, uri, post, **kwargs)

    async def _api_call(
        self,
        method: str,
        uri: str,
        post: Any = None,
        result_type: Optional[Any] = None,
        allow_empty: bool = False,
    ) -> Any:
        body = post.model_dump_json().encode("utf-8") if post is not None else b""
        outcome = await self.executor.perform_call(method, uri, body)
        result = self.classifier.classify(outcome, result_type, allow_empty=allow_empty)
        self._logger.debug("Registry call result", method=method, uri=uri, result=repr(result))
        return result

    def _check_service(self, service: Service) -> None:
        if not isinstance(service, Service):
            raise InvalidArgumentError(f"Expected a Service, got {type(service).__name__}")
        self._check_name(service.id)

    def _check_name(self, name: str) -> None:
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError("The service identifier must be a non-empty string")


def new_client(config: Optional[ClientConfig] = None, http_client=None) -> ServiceRegistryAPI:
    """
    Build a registry client from configuration.

    Args:
        config: Client configuration; defaults to a registry on the loopback address
        http_client: Optional ``httpx.AsyncClient`` shared with the caller

    Returns:
        A ready to use client

    Raises:
        InvalidEndpointError: If the configured URLs are malformed
    """
    if config is None:
        config = new_default_config()

    logger = config.build_logger()
    cluster = HttpCluster(
        config.urls,
        health_check_path=config.health_check_path,
        recovery_seconds=config.member_recovery_seconds,
        http_client=http_client,
        logger=logger,
    )
    executor = ClusterHTTPExecutor(
        cluster,
        timeout=config.request_timeout,
        connect_timeout=config.connect_timeout,
        max_attempts=config.max_failover_attempts,
        http_client=http_client,
        logger=logger,
    )
    return BambooClient(executor, logger=logger)
