"""Domain models for coverage resources, members and allocation state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union


class CoverageTier(str, Enum):
    SINGLE = "single"
    MULTI = "multi"


@dataclass(frozen=True)
class StandardResource:
    """A sponsor coverage tier. Carries no alternative-plan pricing."""

    resource_id: str
    name: str
    member_cost: float
    client_cost: float

    @property
    def is_alternative(self) -> bool:
        return False

    @property
    def annual_member_cost(self) -> float:
        return self.member_cost


@dataclass(frozen=True)
class AlternativeResource:
    """Coverage outside the sponsor's tiers (Medicare, a spouse's plan, ...)."""

    resource_id: str
    name: str
    member_cost: float
    cost_eligible: bool = False
    is_government_plan: bool = False
    cost_per_interval: Optional[float] = None
    intervals_per_year: Optional[int] = None

    @property
    def is_alternative(self) -> bool:
        return True

    @property
    def client_cost(self) -> float:
        return 0.0

    @property
    def annual_member_cost(self) -> float:
        if self.cost_per_interval is not None and self.intervals_per_year is not None:
            return self.cost_per_interval * self.intervals_per_year
        return self.member_cost

    @property
    def generates_opt_out_credit(self) -> bool:
        return self.cost_eligible and not self.is_government_plan


Resource = Union[StandardResource, AlternativeResource]


@dataclass(frozen=True)
class Member:
    member_id: str
    name: str
    claim_impact: float
    default_enrolled: bool
    coverage_tier: CoverageTier = CoverageTier.SINGLE


@dataclass(frozen=True)
class Election:
    name: str
    default_resource: Resource


@dataclass(frozen=True)
class FinancialTool:
    name: str
    is_used: bool
    single_credit: float
    multi_credit: float
    opt_out_total: float = 0.0

    def credit_for(self, tier: CoverageTier) -> float:
        if tier is CoverageTier.MULTI:
            return self.multi_credit
        return self.single_credit


@dataclass(frozen=True)
class AllocationSnapshot:
    """Immutable view of the allocation at one point in time.

    ``assignments`` maps every catalog resource id to the ordered member ids in
    that bucket. Member records live only in ``members``; buckets hold ids.
    """

    resources: tuple[Resource, ...]
    members: tuple[Member, ...]
    assignments: Mapping[str, tuple[str, ...]]
    unassigned: tuple[str, ...]
    _member_index: Mapping[str, Member] = field(
        init=False, repr=False, compare=False
    )
    _resource_index: Mapping[str, Resource] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "assignments", MappingProxyType(dict(self.assignments))
        )
        object.__setattr__(
            self,
            "_member_index",
            MappingProxyType({member.member_id: member for member in self.members}),
        )
        object.__setattr__(
            self,
            "_resource_index",
            MappingProxyType({resource.resource_id: resource for resource in self.resources}),
        )

    def member(self, member_id: str) -> Member:
        return self._member_index[member_id]

    def resource(self, resource_id: str) -> Resource:
        return self._resource_index[resource_id]

    def members_in(self, resource_id: str | None) -> list[Member]:
        """Join a bucket's ids back to canonical member records."""
        member_ids = (
            self.unassigned if resource_id is None else self.assignments[resource_id]
        )
        return [self._member_index[member_id] for member_id in member_ids]

    def assigned_pairs(self) -> list[tuple[Resource, Member]]:
        pairs: list[tuple[Resource, Member]] = []
        for resource in self.resources:
            for member_id in self.assignments.get(resource.resource_id, ()):
                pairs.append((resource, self._member_index[member_id]))
        return pairs

    def bucket_of(self, member_id: str) -> str | None:
        for resource_id, member_ids in self.assignments.items():
            if member_id in member_ids:
                return resource_id
        return None
