"""
Transport package.

This package contains the HTTP call executor capability, the cluster-aware
HTTP executor and the response classifier.
"""

from .classifier import ResponseClassifier
from .executor import HTTP_DELETE, HTTP_GET, HTTP_POST, HTTP_PUT, HTTPCallExecutor
from .http_client import DEFAULT_HEADERS, ClusterHTTPExecutor

__all__ = [
    "ClusterHTTPExecutor",
    "DEFAULT_HEADERS",
    "HTTPCallExecutor",
    "HTTP_DELETE",
    "HTTP_GET",
    "HTTP_POST",
    "HTTP_PUT",
    "ResponseClassifier",
]
