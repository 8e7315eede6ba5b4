from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import pytest

from profilesync.domain.errors import InvalidArgumentError, RemoteUnavailableError
from profilesync.domain.facets import FacetRegistry
from profilesync.domain.model import (
    CLASSIFICATION_FACET,
    TRACKER_SOURCE,
    Classification,
    EntityIdentifier,
    IdentifierType,
    LocalVisitor,
    MergeInfo,
    SaveOptions,
    tracker_mapping,
)
from profilesync.domain.resolution import IdentifierResolver
from profilesync.domain.saving import SaveCoordinator
from tests.helpers.profile_store import (
    InMemoryProfileStore,
    RecordingStoreContext,
    RecordingStoreContextFactory,
    make_visitor,
)

if TYPE_CHECKING:
    from profilesync.domain.model import FacetTarget


def _coordinator(
    factory: RecordingStoreContextFactory,
    registry: FacetRegistry | None = None,
) -> SaveCoordinator:
    resolver = IdentifierResolver(factory, registry or FacetRegistry())
    return SaveCoordinator(factory, resolver)


def test_coordinator_registers_classification_facet(
    recording_factory: RecordingStoreContextFactory,
) -> None:
    registry = FacetRegistry(["Personal"])

    _coordinator(recording_factory, registry)

    assert registry.snapshot() == frozenset({"Personal", CLASSIFICATION_FACET})


def test_new_visitor_creates_entity_with_classification(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(classification_level=2, override_classification_level=1)

    assert _coordinator(recording_factory).save(visitor, SaveOptions(is_new=True)) is True

    context = recording_factory.last
    assert context.calls == ["create_entity", "set_facet", "commit", "exit"]
    (entity,) = profile_store.entities.values()
    assert entity.identifiers == (
        EntityIdentifier(TRACKER_SOURCE, visitor.id.hex, IdentifierType.ANONYMOUS),
    )
    assert profile_store.classification_of(entity.id) == Classification(2, 1)


def test_update_with_current_cached_classification_writes_nothing(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(
        classification_level=2,
        override_classification_level=1,
        remote_facets={CLASSIFICATION_FACET: Classification(2, 1)},
    )
    profile_store.add_tracked(visitor.id, classification=Classification(2, 1))

    assert _coordinator(recording_factory).save(visitor, SaveOptions(is_new=False)) is True

    context = recording_factory.last
    assert context.calls == ["exit"]
    assert context.write_count == 0


def test_update_with_stale_cache_writes_both_levels(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    cached = Classification(1, 0)
    visitor = make_visitor(
        classification_level=3,
        override_classification_level=2,
        remote_facets={CLASSIFICATION_FACET: cached},
    )
    stored = profile_store.add_tracked(visitor.id, classification=Classification(1, 0))

    _coordinator(recording_factory).save(visitor, SaveOptions(is_new=False))

    context = recording_factory.last
    assert context.calls == ["set_facet", "commit", "exit"]
    assert profile_store.classification_of(stored.id) == Classification(3, 2)
    # the visitor's cached facet is left untouched
    assert cached == Classification(1, 0)


def test_update_without_cache_reads_remote_then_writes(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(classification_level=5, override_classification_level=0)
    stored = profile_store.add_tracked(visitor.id, classification=Classification(1, 1))

    _coordinator(recording_factory).save(visitor, SaveOptions(is_new=False))

    context = recording_factory.last
    assert context.calls == ["get_by_identifier", "set_facet", "commit", "exit"]
    assert CLASSIFICATION_FACET in context.requested_facets[0]
    assert profile_store.classification_of(stored.id) == Classification(5, 0)


def test_update_without_cache_skips_write_when_remote_matches(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(classification_level=5, override_classification_level=0)
    profile_store.add_tracked(visitor.id, classification=Classification(5, 0))

    _coordinator(recording_factory).save(visitor, SaveOptions(is_new=False))

    assert recording_factory.last.calls == ["get_by_identifier", "exit"]


def test_update_when_remote_has_no_classification_writes_fresh_one(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(classification_level=0, override_classification_level=0)
    stored = profile_store.add_tracked(visitor.id)

    _coordinator(recording_factory).save(visitor, SaveOptions(is_new=False))

    assert recording_factory.last.count("set_facet") == 1
    assert profile_store.classification_of(stored.id) == Classification(0, 0)


def test_update_loaded_without_classification_reads_remote(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(classification_level=1, remote_facets={"Personal": {}})
    profile_store.add_tracked(visitor.id, classification=Classification(0, 0))

    _coordinator(recording_factory).save(visitor, SaveOptions(is_new=False))

    assert recording_factory.last.calls[0] == "get_by_identifier"


def test_repeated_save_is_idempotent(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(classification_level=4, override_classification_level=4)
    stored = profile_store.add_tracked(visitor.id, classification=Classification(0, 0))
    coordinator = _coordinator(recording_factory)

    coordinator.save(visitor, SaveOptions(is_new=False))
    coordinator.save(visitor, SaveOptions(is_new=False))

    first, second = recording_factory.contexts
    assert first.write_count == 1
    assert second.write_count == 0
    assert profile_store.classification_of(stored.id) == Classification(4, 4)


def test_unknown_novelty_creates_when_not_found(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(classification_level=1)

    _coordinator(recording_factory).save(visitor, SaveOptions())

    assert recording_factory.last.calls == [
        "get_by_identifier",
        "create_entity",
        "set_facet",
        "commit",
        "exit",
    ]
    assert len(profile_store.entities) == 1
    assert recording_factory.create_calls == 1


def test_unknown_novelty_updates_when_found(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(classification_level=1)
    stored = profile_store.add_tracked(visitor.id, classification=Classification(0, 0))

    _coordinator(recording_factory).save(visitor, SaveOptions(is_new=None))

    assert recording_factory.last.count("create_entity") == 0
    assert recording_factory.last.count("get_by_identifier") == 1
    assert profile_store.classification_of(stored.id) == Classification(1, 0)
    assert len(profile_store.entities) == 1


def test_update_targets_tracker_identifier_not_successor(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(classification_level=3)
    survivor = profile_store.add_entity(
        EntityIdentifier("crm", "ada@example.com"),
        facets={CLASSIFICATION_FACET: Classification(0, 0)},
    )
    profile_store.add_tracked(
        visitor.id, merge_info=MergeInfo(obsolete=True, successor_id=survivor.id)
    )
    captured: list[FacetTarget] = []
    original_create = recording_factory.create

    def create() -> RecordingStoreContext:
        context = original_create()
        original_set_facet = context.set_facet

        def set_facet(target: FacetTarget, facet_name: str, value: Classification) -> None:
            captured.append(target)
            original_set_facet(target, facet_name, value)

        context.set_facet = set_facet  # type: ignore[method-assign]
        return context

    recording_factory.create = create  # type: ignore[method-assign]

    _coordinator(recording_factory).save(visitor, SaveOptions(is_new=False))

    assert captured == [tracker_mapping(visitor.id)]


def test_invalid_arguments_fail_before_opening_context(
    recording_factory: RecordingStoreContextFactory,
) -> None:
    coordinator = _coordinator(recording_factory)
    without_system = LocalVisitor(id=uuid4(), system=None)  # type: ignore[arg-type]
    bad_id = LocalVisitor(id="visitor-1", system=make_visitor().system)  # type: ignore[arg-type]

    with pytest.raises(InvalidArgumentError):
        coordinator.save(None, SaveOptions())  # type: ignore[arg-type]
    with pytest.raises(InvalidArgumentError):
        coordinator.save(make_visitor(), None)  # type: ignore[arg-type]
    with pytest.raises(InvalidArgumentError):
        coordinator.save(without_system, SaveOptions())
    with pytest.raises(InvalidArgumentError):
        coordinator.save(bad_id, SaveOptions(is_new=True))

    assert recording_factory.create_calls == 0


@pytest.mark.parametrize(
    ("operation", "options"),
    [
        ("create", SaveOptions(is_new=True)),
        ("get_by_identifier", SaveOptions()),
        ("create_entity", SaveOptions(is_new=True)),
        ("set_facet", SaveOptions(is_new=False)),
        ("commit", SaveOptions(is_new=True)),
        ("exit", SaveOptions(is_new=True)),
    ],
)
def test_store_outage_surfaces_as_remote_unavailable(
    profile_store: InMemoryProfileStore,
    operation: str,
    options: SaveOptions,
) -> None:
    factory = RecordingStoreContextFactory(profile_store, fail_on={operation})  # type: ignore[arg-type]
    visitor = make_visitor(classification_level=1)

    with pytest.raises(RemoteUnavailableError) as excinfo:
        _coordinator(factory).save(visitor, options)

    assert excinfo.value.__cause__ is excinfo.value.cause
    assert all(context.closed for context in factory.contexts)
    if operation != "exit":
        assert profile_store.entities == {}


def test_failed_commit_leaves_store_unchanged(
    profile_store: InMemoryProfileStore,
) -> None:
    visitor = make_visitor(classification_level=9)
    stored = profile_store.add_tracked(visitor.id, classification=Classification(1, 1))
    factory = RecordingStoreContextFactory(profile_store, fail_on={"commit"})

    with pytest.raises(RemoteUnavailableError):
        _coordinator(factory).save(visitor, SaveOptions(is_new=False))

    assert profile_store.classification_of(stored.id) == Classification(1, 1)


def test_unexpected_errors_propagate_unwrapped(
    recording_factory: RecordingStoreContextFactory,
) -> None:
    class Boom(RuntimeError):
        pass

    def explode(*_: object, **__: object) -> None:
        raise Boom("not an outage")

    original_create = recording_factory.create

    def create() -> RecordingStoreContext:
        context = original_create()
        context.create_entity = explode  # type: ignore[method-assign]
        return context

    recording_factory.create = create  # type: ignore[method-assign]

    with pytest.raises(Boom):
        _coordinator(recording_factory).save(make_visitor(), SaveOptions(is_new=True))

    assert recording_factory.last.closed


def test_worked_example_for_unknown_visitor(
    profile_store: InMemoryProfileStore,
    recording_factory: RecordingStoreContextFactory,
) -> None:
    visitor = make_visitor(
        UUID("3fa85f64-5717-4562-b3fc-2c963f66afa6"),
        classification_level=5,
        override_classification_level=0,
    )

    _coordinator(recording_factory).save(visitor, SaveOptions())

    context = recording_factory.last
    assert context.count("create_entity") == 1
    assert context.count("set_facet") == 1
    assert context.count("commit") == 1
    (entity,) = profile_store.entities.values()
    assert entity.identifiers == (
        EntityIdentifier(
            "local-tracker", "3fa85f6457174562b3fc2c963f66afa6", IdentifierType.ANONYMOUS
        ),
    )
    assert profile_store.classification_of(entity.id) == Classification(5, 0)
