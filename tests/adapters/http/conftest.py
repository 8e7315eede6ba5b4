"""Shared fixtures for the HTTP profile store adapter tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from profilesync.adapters.http import HttpStoreContextFactory
from profilesync.config import RemoteStoreConfig
from tests.helpers.http_store import RecordingTransport

if TYPE_CHECKING:
    from tests.helpers.http_store import FactoryBuilder, Handler


@pytest.fixture
def store_config() -> RemoteStoreConfig:
    return RemoteStoreConfig(base_url="https://profiles.example.test/api", api_key="secret")


@pytest.fixture
def make_factory(store_config: RemoteStoreConfig) -> FactoryBuilder:
    def build(handler: Handler) -> tuple[HttpStoreContextFactory, RecordingTransport]:
        transport = RecordingTransport(handler)

        def client_factory(config: RemoteStoreConfig) -> httpx.Client:
            return httpx.Client(
                base_url=config.base_url,
                headers=dict(config.default_headers()),
                transport=httpx.MockTransport(transport),
            )

        factory = HttpStoreContextFactory(config=store_config, client_factory=client_factory)
        return factory, transport

    return build
