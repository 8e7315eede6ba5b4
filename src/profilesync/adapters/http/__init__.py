"""HTTP adapter for the remote profile store."""

from __future__ import annotations

from .client import (
    HttpStoreContext,
    HttpStoreContextFactory,
    RemoteStoreAPIError,
    build_http_client,
)
from .schema import BatchRequest, EntityPayload

__all__ = [
    "BatchRequest",
    "EntityPayload",
    "HttpStoreContext",
    "HttpStoreContextFactory",
    "RemoteStoreAPIError",
    "build_http_client",
]
