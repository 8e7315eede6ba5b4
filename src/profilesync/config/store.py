"""Remote profile store configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from .env import optional_env_var, optional_seconds, require_env_vars

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_STORE_TIMEOUT_SECONDS = 30.0

type StoreBackend = Literal["http", "embedded"]


@dataclass(frozen=True, slots=True)
class RemoteStoreConfig:
    """Connection settings for the HTTP profile store."""

    base_url: str
    timeout_seconds: float | None = DEFAULT_STORE_TIMEOUT_SECONDS
    api_key: str | None = None

    def default_headers(self) -> Mapping[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


def get_store_backend() -> StoreBackend:
    """Use the HTTP store when a URL is configured, the embedded store otherwise."""

    return "http" if optional_env_var("PROFILESYNC_STORE_URL") else "embedded"


def get_remote_store_config() -> RemoteStoreConfig:
    values = require_env_vars(("PROFILESYNC_STORE_URL",))
    return RemoteStoreConfig(
        base_url=values["PROFILESYNC_STORE_URL"].rstrip("/"),
        timeout_seconds=optional_seconds(
            "PROFILESYNC_STORE_TIMEOUT", default=DEFAULT_STORE_TIMEOUT_SECONDS
        ),
        api_key=optional_env_var("PROFILESYNC_STORE_API_KEY"),
    )
