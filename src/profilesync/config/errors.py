"""Errors raised while reading profilesync settings."""

from __future__ import annotations

from profilesync.domain.errors import ProfileSyncError


class ConfigurationError(ProfileSyncError, RuntimeError):
    """A setting is present but cannot be used (bad number, unreadable facet file)."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""
