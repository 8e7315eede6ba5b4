"""Process-wide set of facet names requested on every remote read."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from profilesync.domain.errors import InvalidArgumentError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from profilesync.config.facets import FacetConfig

log = logging.getLogger(__name__)


class FacetRegistry:
    """Copy-on-write registry of facet names.

    The current set is an immutable ``frozenset`` that is replaced wholesale on
    registration. Readers take no lock; a single attribute read always sees a
    complete snapshot. Writers are serialised among themselves so two concurrent
    registrations cannot drop each other's name. Names are never removed.
    """

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._snapshot: frozenset[str] = frozenset()
        self._write_lock = threading.Lock()
        self.register_all(names)

    def snapshot(self) -> frozenset[str]:
        """Return the facet names for a single read. May grow between two calls."""

        return self._snapshot

    def register(self, name: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError(f"facet name must be a non-blank string, got {name!r}")
        name = name.strip()
        if name in self._snapshot:
            return
        with self._write_lock:
            current = self._snapshot
            if name in current:
                return
            self._snapshot = current | {name}
        log.debug("Registered facet %s", name)

    def register_all(self, names: Iterable[str]) -> None:
        for name in names:
            self.register(name)

    def register_from_config(self, config: FacetConfig) -> None:
        self.register_all(config.facet_keys)

    def __contains__(self, name: object) -> bool:
        return name in self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)
