"""
Data models for the Bamboo registry client.

This module defines the registry record, the error body returned by the
server, the per-attempt call outcome and cluster member bookkeeping.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Service(BaseModel):
    """A service record held by the registry."""
    id: str = Field(..., description="Service identifier, also used as the resource path segment")
    acl: str = Field(default="", description="Access-control string, passed through verbatim")

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def create(cls, id: str, acl: str) -> "Service":
        """Build a service record from its identifier and ACL."""
        return cls(id=id, acl=acl)


class ErrorMessage(BaseModel):
    """Error body returned by the registry for rejected requests."""
    message: Optional[str] = Field(default="", description="Human readable error reason")

    model_config = ConfigDict(extra="ignore")


class CallOutcome(BaseModel):
    """Raw result of a single HTTP attempt."""
    status_code: int = Field(..., description="HTTP status code")
    content: bytes = Field(default=b"", description="Buffered response body")

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299


class ClusterMember(BaseModel):
    """Bookkeeping for one base URL of the registry cluster."""
    url: str = Field(..., description="Base URL of the member, without trailing slash")
    healthy: bool = Field(default=True, description="Current health status")
    failures: int = Field(default=0, description="Number of times the member was marked down")
    last_failure: Optional[datetime] = Field(default=None, description="When the member was last marked down")
    last_health_check: Optional[datetime] = Field(default=None, description="When the member was last probed")
