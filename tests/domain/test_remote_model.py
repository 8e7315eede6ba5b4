from __future__ import annotations

from uuid import uuid4

import pytest

from profilesync.domain.errors import InvalidArgumentError, RemoteUnavailableError
from profilesync.domain.model import (
    CLASSIFICATION_FACET,
    Classification,
    MergeInfo,
    RemoteEntity,
    SystemInfo,
)
from profilesync.domain.saving import cached_classification, copy_system_data
from tests.helpers.profile_store import make_visitor


def test_merge_info_requires_successor_when_obsolete() -> None:
    with pytest.raises(ValueError, match="successor"):
        MergeInfo(obsolete=True)


def test_remote_entity_exposes_merge_state() -> None:
    successor = uuid4()
    entity = RemoteEntity(id=uuid4(), merge_info=MergeInfo(obsolete=True, successor_id=successor))

    assert entity.obsolete
    assert entity.successor_id == successor


def test_get_facet_checks_type() -> None:
    entity = RemoteEntity(
        id=uuid4(),
        facets={CLASSIFICATION_FACET: Classification(2, 1), "Personal": {"firstName": "Ada"}},
    )

    assert entity.get_facet(CLASSIFICATION_FACET, Classification) == Classification(2, 1)
    assert entity.get_facet("Personal", Classification) is None
    assert entity.get_facet("Missing", Classification) is None


def test_classification_matches_both_levels() -> None:
    classification = Classification(classification_level=3, override_classification_level=1)

    assert classification.matches(3, 1)
    assert not classification.matches(3, 2)
    assert not classification.matches(1, 1)


def test_copy_system_data_overwrites_both_levels() -> None:
    classification = Classification(classification_level=9, override_classification_level=9)

    system = SystemInfo(classification_level=2, override_classification_level=0)

    copy_system_data(system, classification)

    assert classification == Classification(2, 0)


def test_copy_system_data_rejects_missing_classification() -> None:
    with pytest.raises(InvalidArgumentError):
        copy_system_data(SystemInfo(), None)  # type: ignore[arg-type]


def test_cached_classification_distinguishes_not_loaded_from_absent() -> None:
    assert cached_classification(make_visitor(remote_facets=None)) is None
    assert cached_classification(make_visitor(remote_facets={})) is None
    assert cached_classification(
        make_visitor(remote_facets={CLASSIFICATION_FACET: {"classificationLevel": 1}})
    ) is None

    cached = Classification(1, 0)
    visitor = make_visitor(remote_facets={CLASSIFICATION_FACET: cached})
    assert cached_classification(visitor) is cached


def test_remote_unavailable_keeps_cause() -> None:
    cause = TimeoutError("read timed out")

    error = RemoteUnavailableError(cause)

    assert error.cause is cause
    assert "read timed out" in str(error)
