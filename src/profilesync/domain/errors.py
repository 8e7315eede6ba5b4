"""Error taxonomy for profile synchronisation."""

from __future__ import annotations


class ProfileSyncError(Exception):
    """Base class for errors raised by profilesync."""


class InvalidArgumentError(ProfileSyncError, ValueError):
    """Raised for missing or malformed input, before any remote call is made."""


class StoreUnavailableError(ProfileSyncError):
    """Raised by store adapters when the remote store cannot be reached."""


class RemoteUnavailableError(ProfileSyncError):
    """Canonical signal that a remote read, write or commit could not reach the store.

    Always raised ``from`` the adapter error; ``cause`` keeps it for diagnostics.
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Remote profile store unavailable: {cause}")
        self.cause = cause
