"""Uniform failure-translation boundary around store contexts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from profilesync.domain.errors import RemoteUnavailableError, StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable

    from profilesync.domain.ports import StoreContext, StoreContextFactory

log = logging.getLogger(__name__)


def execute_with_exception_handling[T](
    context_factory: StoreContextFactory,
    func: Callable[[StoreContext], T],
) -> T:
    """Run ``func`` inside one freshly acquired context.

    The context is released on every exit path. ``StoreUnavailableError`` from
    creation, reads, writes, commit or release is re-raised as
    ``RemoteUnavailableError``; anything else propagates untouched. No retries.
    """

    try:
        with context_factory.create() as context:
            return func(context)
    except StoreUnavailableError as exc:
        log.warning("Profile store unavailable: %s", exc)
        raise RemoteUnavailableError(exc) from exc
