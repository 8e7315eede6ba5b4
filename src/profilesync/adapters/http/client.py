"""HTTP client for the remote profile store."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final, Literal, cast
from uuid import uuid4

import httpx
from pydantic import ValidationError

from profilesync.domain.errors import StoreUnavailableError
from profilesync.domain.model import EntityHandle

from .schema import BatchRequest, CreateEntityOperation, EntityPayload, SetFacetOperation
from .translator import create_entity_operation, entity_from_payload, set_facet_operation

if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Set as AbstractSet
    from types import TracebackType
    from uuid import UUID

    from profilesync.config.store import RemoteStoreConfig
    from profilesync.domain.model import (
        Classification,
        EntityIdentifier,
        FacetTarget,
        RemoteEntity,
    )

log = getLogger(__name__)

UNAVAILABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({502, 503, 504})

type ClientFactory = Callable[[RemoteStoreConfig], httpx.Client]


class RemoteStoreAPIError(RuntimeError):
    """Raised when the profile store answers with an unexpected response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def build_http_client(config: RemoteStoreConfig) -> httpx.Client:
    return httpx.Client(
        base_url=config.base_url,
        timeout=config.timeout_seconds,
        headers=dict(config.default_headers()),
    )


class HttpStoreContext:
    """One conversation with the HTTP profile store.

    Reads are sent immediately. ``create_entity`` and ``set_facet`` are queued and
    sent as a single batch on ``commit``; leaving the context without committing
    drops them.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client
        self._pending: list[CreateEntityOperation | SetFacetOperation] = []

    def __enter__(self) -> HttpStoreContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.close()
        return False

    def close(self) -> None:
        if self._pending:
            log.debug("Discarding %s uncommitted operations", len(self._pending))
        self._pending.clear()
        self._client.close()

    @property
    def pending_operations(self) -> tuple[CreateEntityOperation | SetFacetOperation, ...]:
        return tuple(self._pending)

    def get_by_identifier(
        self,
        source: str,
        identifier: str,
        *,
        facets: AbstractSet[str],
        timeout: float | None,
    ) -> RemoteEntity | None:
        params = {"source": source, "identifier": identifier, **self._expand_param(facets)}
        return self._get_entity("/entities/lookup", params=params, facets=facets, timeout=timeout)

    def get_by_id(
        self,
        entity_id: UUID,
        *,
        facets: AbstractSet[str],
        timeout: float | None,
    ) -> RemoteEntity | None:
        return self._get_entity(
            f"/entities/{entity_id}",
            params=self._expand_param(facets),
            facets=facets,
            timeout=timeout,
        )

    def create_entity(self, identifier: EntityIdentifier) -> EntityHandle:
        handle = EntityHandle(id=uuid4(), identifier=identifier)
        self._pending.append(create_entity_operation(handle))
        return handle

    def set_facet(self, target: FacetTarget, facet_name: str, value: Classification) -> None:
        self._pending.append(set_facet_operation(target, facet_name, value))

    def commit(self) -> None:
        if not self._pending:
            return
        batch = BatchRequest(operations=list(self._pending))
        self._send(
            "POST",
            "/batch",
            json=batch.model_dump(mode="json", by_alias=True),
            timeout=None,
        )
        log.debug("Committed %s operations", len(batch.operations))
        self._pending.clear()

    def _get_entity(
        self,
        path: str,
        *,
        params: dict[str, str],
        facets: AbstractSet[str],
        timeout: float | None,
    ) -> RemoteEntity | None:
        response = self._send("GET", path, params=params, timeout=timeout, allow_missing=True)
        if response is None:
            return None
        try:
            payload = EntityPayload.model_validate(response.json())
            return entity_from_payload(payload, facets)
        except (ValidationError, ValueError) as exc:
            raise RemoteStoreAPIError(f"Malformed entity payload from {path}: {exc}") from exc

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
        timeout: float | None,
        allow_missing: bool = False,
    ) -> httpx.Response | None:
        request_timeout = httpx.USE_CLIENT_DEFAULT if timeout is None else timeout
        try:
            response = self._client.request(
                method, path, params=params, json=json, timeout=request_timeout
            )
        except httpx.TransportError as exc:
            raise StoreUnavailableError(f"{method} {path} failed: {exc}") from exc

        if response.status_code in UNAVAILABLE_STATUS_CODES:
            raise StoreUnavailableError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}"
            )
        if allow_missing and response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_error:
            raise RemoteStoreAPIError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _expand_param(facets: AbstractSet[str]) -> dict[str, str]:
        return {"expand": ",".join(sorted(facets))} if facets else {}


class HttpStoreContextFactory:
    """Opens a fresh HTTP client per context."""

    def __init__(
        self,
        *,
        config: RemoteStoreConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or build_http_client

    def create(self) -> HttpStoreContext:
        return HttpStoreContext(self._client_factory(self._config))


if TYPE_CHECKING:
    from profilesync.domain.ports import StoreContext, StoreContextFactory

    _context_check: StoreContext = HttpStoreContext(httpx.Client())
    _factory_check: StoreContextFactory = HttpStoreContextFactory(
        config=cast("RemoteStoreConfig", object())
    )
