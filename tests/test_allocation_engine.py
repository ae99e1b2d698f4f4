"""Tests for allocation state transitions and their invariants."""

from __future__ import annotations

from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import pytest

from tier_allocation.domain.errors import NotFoundError, ValidationError
from tier_allocation.domain.models import AllocationSnapshot, Election, FinancialTool, Member
from tier_allocation.services.allocation_service import AllocationEngine
from tier_allocation.services.catalog_service import (
    ResourceCatalog,
    create_alt_employer_resource,
    create_medicare_resource,
    standard_tiers,
)


def _build_catalog() -> ResourceCatalog:
    return ResourceCatalog(
        [
            *standard_tiers(),
            create_medicare_resource(resource_id="medicare"),
            create_alt_employer_resource("Spouse Employer", 2400, resource_id="alt-employer"),
        ]
    )


def _build_members() -> list[Member]:
    return [
        Member("1", "John Smith", 15000, True),
        Member("2", "Sarah Johnson", 102000, True),
        Member("3", "Mike Davis", 1000, True),
        Member("4", "Emily Chen", 1000, True),
        Member("5", "David Wilson", 1000, False),
    ]


def _build_engine(**kwargs) -> AllocationEngine:
    return AllocationEngine(catalog=_build_catalog(), members=_build_members(), **kwargs)


def _bucket_counts(snapshot: AllocationSnapshot) -> Counter:
    counts = Counter(snapshot.unassigned)
    for member_ids in snapshot.assignments.values():
        counts.update(member_ids)
    return counts


def _assert_conserved(snapshot: AllocationSnapshot) -> None:
    counts = _bucket_counts(snapshot)
    assert set(counts) == {member.member_id for member in snapshot.members}
    assert all(count == 1 for count in counts.values())


# --- Initial state ---

def test_new_engine_starts_with_every_member_unassigned():
    engine = _build_engine()
    snapshot = engine.get_allocation()

    assert snapshot.unassigned == ("1", "2", "3", "4", "5")
    assert all(member_ids == () for member_ids in snapshot.assignments.values())
    assert set(snapshot.assignments) == {
        resource.resource_id for resource in engine.list_resources()
    }


def test_engine_rejects_duplicate_member_ids():
    members = _build_members() + [Member("1", "Duplicate", 0, True)]
    with pytest.raises(ValidationError):
        AllocationEngine(catalog=_build_catalog(), members=members)


def test_engine_rejects_duplicate_tool_names():
    tools = [FinancialTool("Credit", True, 1, 2), FinancialTool("Credit", False, 1, 2)]
    with pytest.raises(ValidationError):
        _build_engine(tools=tools)


def test_elections_seed_members_into_default_resource():
    catalog = _build_catalog()
    family = catalog.get("resource-4")
    engine = AllocationEngine(
        catalog=catalog,
        members=_build_members(),
        elections=[Election("John Smith", family), Election("Nobody", family)],
    )
    snapshot = engine.get_allocation()

    assert snapshot.assignments["resource-4"] == ("1",)
    assert "1" not in snapshot.unassigned
    _assert_conserved(snapshot)


def test_election_with_foreign_resource_raises():
    foreign = create_medicare_resource(resource_id="not-in-catalog")
    with pytest.raises(NotFoundError):
        AllocationEngine(
            catalog=_build_catalog(),
            members=_build_members(),
            elections=[Election("John Smith", foreign)],
        )


# --- Reassign ---

def test_reassign_moves_member_between_buckets():
    engine = _build_engine()
    engine.reassign("1", "resource-1")
    snapshot = engine.reassign("1", "medicare")

    assert snapshot.assignments["medicare"] == ("1",)
    assert snapshot.assignments["resource-1"] == ()
    assert "1" not in snapshot.unassigned
    assert snapshot.bucket_of("1") == "medicare"


def test_reassign_to_none_returns_member_to_unassigned():
    engine = _build_engine()
    engine.reassign("2", "resource-2")
    snapshot = engine.reassign("2", None)

    assert snapshot.assignments["resource-2"] == ()
    assert snapshot.unassigned[-1] == "2"
    assert snapshot.bucket_of("2") is None


def test_reassign_preserves_insertion_order_within_bucket():
    engine = _build_engine()
    engine.reassign("3", "resource-4")
    engine.reassign("1", "resource-4")
    snapshot = engine.reassign("2", "resource-4")

    assert snapshot.assignments["resource-4"] == ("3", "1", "2")
    assert [member.name for member in snapshot.members_in("resource-4")] == [
        "Mike Davis",
        "John Smith",
        "Sarah Johnson",
    ]


def test_reassign_to_current_bucket_is_noop():
    engine = _build_engine()
    engine.reassign("3", "resource-4")
    engine.reassign("1", "resource-4")
    once = engine.reassign("3", "resource-4")
    twice = engine.reassign("3", "resource-4")

    assert once == twice
    assert twice.assignments["resource-4"] == ("3", "1")


def test_reassign_unassigned_member_to_unassigned_is_noop():
    engine = _build_engine()
    before = engine.get_allocation()

    assert engine.reassign("4", None) == before


def test_reassign_unknown_member_leaves_allocation_unchanged():
    engine = _build_engine()
    engine.reassign("1", "medicare")
    before = engine.get_allocation()

    with pytest.raises(NotFoundError):
        engine.reassign("does-not-exist", "resource-1")

    assert engine.get_allocation() == before


def test_reassign_unknown_resource_leaves_allocation_unchanged():
    engine = _build_engine()
    engine.reassign("1", "medicare")
    before = engine.get_allocation()

    with pytest.raises(NotFoundError):
        engine.reassign("1", "resource-99")

    assert engine.get_allocation() == before
    assert engine.get_allocation().bucket_of("1") == "medicare"


def test_members_are_conserved_across_reassignment_sequence():
    engine = _build_engine()
    moves = [
        ("1", "resource-1"),
        ("2", "medicare"),
        ("1", "alt-employer"),
        ("3", "resource-4"),
        ("2", None),
        ("5", "resource-1"),
        ("3", "resource-4"),
        ("4", "medicare"),
    ]
    for member_id, destination in moves:
        snapshot = engine.reassign(member_id, destination)
        _assert_conserved(snapshot)


def test_snapshot_is_isolated_from_later_writes():
    engine = _build_engine()
    snapshot = engine.get_allocation()
    engine.reassign("1", "resource-1")

    assert snapshot.assignments["resource-1"] == ()
    assert "1" in snapshot.unassigned


def test_concurrent_reassignments_keep_invariants():
    engine = _build_engine()
    destinations = ["resource-1", "resource-2", "medicare", None, "alt-employer"]

    def worker(index: int) -> None:
        for step in range(50):
            member_id = str((index + step) % 5 + 1)
            engine.reassign(member_id, destinations[(index * step) % len(destinations)])

    with ThreadPoolExecutor(max_workers=4) as executor:
        list(executor.map(worker, range(8)))

    _assert_conserved(engine.get_allocation())


# --- Toggle default enrollment ---

def test_toggle_default_enrollment_flips_canonical_record():
    engine = _build_engine()
    snapshot = engine.toggle_default_enrollment("5")

    assert snapshot.member("5").default_enrolled is True
    assert engine.toggle_default_enrollment("5").member("5").default_enrolled is False


def test_toggle_is_consistent_across_every_view():
    engine = _build_engine()
    engine.reassign("1", "medicare")
    snapshot = engine.toggle_default_enrollment("1")

    listed = {member.member_id: member for member in engine.list_members()}
    in_bucket = {member.member_id: member for member in snapshot.members_in("medicare")}
    assert listed["1"].default_enrolled is False
    assert in_bucket["1"].default_enrolled is False
    assert snapshot.member("1").default_enrolled is False

    moved = engine.reassign("1", None)
    assert [m.default_enrolled for m in moved.members_in(None) if m.member_id == "1"] == [False]


def test_toggle_does_not_move_member():
    engine = _build_engine()
    engine.reassign("2", "resource-3")
    snapshot = engine.toggle_default_enrollment("2")

    assert snapshot.assignments["resource-3"] == ("2",)


def test_toggle_unknown_member_raises_not_found():
    engine = _build_engine()
    before = engine.get_allocation()

    with pytest.raises(NotFoundError):
        engine.toggle_default_enrollment("missing")

    assert engine.get_allocation() == before


# --- Financial tools ---

def test_set_tool_used_unknown_tool_raises_not_found():
    engine = _build_engine(tools=[FinancialTool("Credit", True, 6000, 12000)])

    with pytest.raises(NotFoundError):
        engine.set_tool_used("Missing", False)


def test_set_tool_used_does_not_touch_allocation():
    engine = _build_engine(tools=[FinancialTool("Credit", True, 6000, 12000)])
    engine.reassign("1", "alt-employer")
    before = engine.get_allocation()

    tool = engine.set_tool_used("Credit", False)

    assert tool.is_used is False
    assert engine.get_allocation() == before
