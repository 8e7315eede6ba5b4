"""Defaults for save operations."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_seconds

DEFAULT_OPERATION_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class SaveConfig:
    operation_timeout_seconds: float | None = DEFAULT_OPERATION_TIMEOUT_SECONDS


def get_save_config() -> SaveConfig:
    return SaveConfig(
        operation_timeout_seconds=optional_seconds(
            "PROFILESYNC_OPERATION_TIMEOUT", default=DEFAULT_OPERATION_TIMEOUT_SECONDS
        )
    )
