from __future__ import annotations

from uuid import UUID

import pytest

from profilesync.domain.errors import InvalidArgumentError
from profilesync.domain.model import (
    TRACKER_SOURCE,
    IdentifierMapping,
    IdentifierType,
    to_canonical_identifier,
    tracker_identifier,
    tracker_mapping,
)

VISITOR_ID = UUID("3fa85f64-5717-4562-b3fc-2c963f66afa6")


def test_canonical_identifier_is_lowercase_hex_without_separators() -> None:
    assert to_canonical_identifier(VISITOR_ID) == "3fa85f6457174562b3fc2c963f66afa6"


def test_canonical_identifier_ignores_input_spelling() -> None:
    upper = UUID("{3FA85F64-5717-4562-B3FC-2C963F66AFA6}")

    assert to_canonical_identifier(upper) == to_canonical_identifier(VISITOR_ID)


def test_distinct_ids_give_distinct_identifiers() -> None:
    other = UUID("3fa85f64-5717-4562-b3fc-2c963f66afa7")

    assert to_canonical_identifier(other) != to_canonical_identifier(VISITOR_ID)


@pytest.mark.parametrize("value", [None, "3fa85f6457174562b3fc2c963f66afa6", 7])
def test_canonical_identifier_rejects_non_uuid(value: object) -> None:
    with pytest.raises(InvalidArgumentError):
        to_canonical_identifier(value)  # type: ignore[arg-type]


def test_tracker_mapping_uses_tracker_source() -> None:
    assert tracker_mapping(VISITOR_ID) == IdentifierMapping(
        TRACKER_SOURCE, "3fa85f6457174562b3fc2c963f66afa6"
    )


def test_tracker_identifier_is_anonymous() -> None:
    identifier = tracker_identifier(VISITOR_ID)

    assert identifier.identifier_type is IdentifierType.ANONYMOUS
    assert identifier.mapping == tracker_mapping(VISITOR_ID)
