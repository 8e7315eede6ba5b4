"""Facet keys requested on every remote read.

Keys come from two places, merged in order:

* ``PROFILESYNC_FACETS``: a comma separated list of facet keys.
* ``PROFILESYNC_FACETS_FILE``: a TOML document with one table per facet::

      [[facet]]
      facetKey = "Classification"

      [[facet]]
      facetKey = "Personal"
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, cast

from .env import optional_env_var
from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable

log = logging.getLogger(__name__)

FACET_TABLE = "facet"
FACET_KEY_ATTRIBUTE = "facetKey"


@dataclass(frozen=True, slots=True)
class FacetConfig:
    facet_keys: tuple[str, ...] = ()


def _dedupe(keys: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for key in keys:
        seen.setdefault(key, None)
    return tuple(seen)


def parse_facet_list(raw: str) -> tuple[str, ...]:
    return _dedupe(part.strip() for part in raw.split(",") if part.strip())


def parse_facet_document(document: dict[str, object]) -> tuple[str, ...]:
    """Extract facet keys from a parsed TOML document."""

    unexpected = set(document) - {FACET_TABLE}
    if unexpected:
        raise ConfigurationError(
            f"Unexpected facet configuration sections: {', '.join(sorted(unexpected))}"
        )
    tables = document.get(FACET_TABLE, [])
    if not isinstance(tables, list):
        raise ConfigurationError(f"'{FACET_TABLE}' must be an array of tables")

    keys: list[str] = []
    for index, table in enumerate(cast(list[object], tables)):
        if not isinstance(table, dict):
            raise ConfigurationError(f"{FACET_TABLE}[{index}] must be a table")
        value = cast(dict[str, object], table).get(FACET_KEY_ATTRIBUTE)
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(
                f"{FACET_TABLE}[{index}] is missing a non-blank '{FACET_KEY_ATTRIBUTE}'"
            )
        keys.append(value.strip())
    return _dedupe(keys)


def load_facet_file(path: Path) -> tuple[str, ...]:
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Facet configuration file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid facet configuration file {path}: {exc}") from exc
    return parse_facet_document(document)


def get_facet_config() -> FacetConfig:
    keys: list[str] = []
    raw_list = optional_env_var("PROFILESYNC_FACETS")
    if raw_list is not None:
        keys.extend(parse_facet_list(raw_list))
    file_name = optional_env_var("PROFILESYNC_FACETS_FILE")
    if file_name is not None:
        keys.extend(load_facet_file(Path(file_name).expanduser()))
    config = FacetConfig(facet_keys=_dedupe(keys))
    log.debug("Configured facets: %s", ", ".join(config.facet_keys) or "<none>")
    return config
