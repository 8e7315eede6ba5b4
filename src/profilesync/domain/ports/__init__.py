"""Domain port definitions for adapters."""

from __future__ import annotations

from .store import StoreContext, StoreContextFactory

__all__ = ["StoreContext", "StoreContextFactory"]
