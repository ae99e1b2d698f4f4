"""Allocation state and derived financial figures for a benefits group."""

from __future__ import annotations

from dataclasses import dataclass, replace
from threading import RLock
from typing import Iterable, Optional, Sequence

from tier_allocation.domain.constraints import (
    validate_financial_tool,
    validate_member,
    validate_unique_ids,
)
from tier_allocation.domain.errors import NotFoundError
from tier_allocation.domain.models import (
    AllocationSnapshot,
    Election,
    FinancialTool,
    Member,
    Resource,
)
from tier_allocation.services.catalog_service import ResourceCatalog
from tier_allocation.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class FinancialSummary:
    claim_impact: float
    opt_out_credit: float
    employer_cost: float
    member_cost: float
    tools: tuple[FinancialTool, ...]


def compute_claim_impact_summary(snapshot: AllocationSnapshot) -> float:
    """Claims liability of default-enrolled members who moved to alternatives."""
    return float(
        sum(
            member.claim_impact
            for resource, member in snapshot.assigned_pairs()
            if resource.is_alternative and member.default_enrolled
        )
    )


def _credit_for_tool(snapshot: AllocationSnapshot, tool: FinancialTool) -> float:
    validate_financial_tool(tool)
    if not tool.is_used:
        return 0.0
    return float(
        sum(
            tool.credit_for(member.coverage_tier)
            for resource, member in snapshot.assigned_pairs()
            if resource.is_alternative and resource.generates_opt_out_credit
        )
    )


def compute_tool_breakdown(
    snapshot: AllocationSnapshot,
    tools: Sequence[FinancialTool],
) -> tuple[FinancialTool, ...]:
    """Return ``tools`` with ``opt_out_total`` set for the given allocation."""
    return tuple(
        replace(tool, opt_out_total=_credit_for_tool(snapshot, tool)) for tool in tools
    )


def compute_opt_out_credit(
    snapshot: AllocationSnapshot,
    tools: Sequence[FinancialTool],
) -> float:
    return float(sum(_credit_for_tool(snapshot, tool) for tool in tools))


def compute_employer_cost(snapshot: AllocationSnapshot) -> float:
    return float(
        sum(
            resource.client_cost
            for resource, _ in snapshot.assigned_pairs()
            if not resource.is_alternative
        )
    )


def compute_member_cost(snapshot: AllocationSnapshot) -> float:
    return float(
        sum(resource.annual_member_cost for resource, _ in snapshot.assigned_pairs())
    )


def compute_financial_summary(
    snapshot: AllocationSnapshot,
    tools: Sequence[FinancialTool],
) -> FinancialSummary:
    breakdown = compute_tool_breakdown(snapshot, tools)
    return FinancialSummary(
        claim_impact=compute_claim_impact_summary(snapshot),
        opt_out_credit=float(sum(tool.opt_out_total for tool in breakdown)),
        employer_cost=compute_employer_cost(snapshot),
        member_cost=compute_member_cost(snapshot),
        tools=breakdown,
    )


class AllocationEngine:
    """Owns the member-to-resource allocation for one session.

    Members are stored once; buckets hold member ids only, so a member's
    ``default_enrolled`` flag cannot diverge between views. Every write runs
    inside one lock-held critical section and readers get immutable snapshots.
    """

    def __init__(
        self,
        catalog: ResourceCatalog,
        members: Iterable[Member],
        tools: Iterable[FinancialTool] = (),
        elections: Optional[Iterable[Election]] = None,
    ) -> None:
        member_list = list(members)
        tool_list = list(tools)
        for member in member_list:
            validate_member(member)
        validate_unique_ids((member.member_id for member in member_list), "member")
        for tool in tool_list:
            validate_financial_tool(tool)
        validate_unique_ids((tool.name for tool in tool_list), "financial tool")

        self._catalog = catalog
        self._lock = RLock()
        self._members: dict[str, Member] = {member.member_id: member for member in member_list}
        self._tools: dict[str, FinancialTool] = {tool.name: tool for tool in tool_list}
        self._assignments: dict[str, list[str]] = {
            resource.resource_id: [] for resource in catalog.list_resources()
        }
        self._unassigned: list[str] = [member.member_id for member in member_list]

        if elections is not None:
            self._seed_from_elections(list(elections))

    def _seed_from_elections(self, elections: list[Election]) -> None:
        default_by_name = {
            election.name: election.default_resource for election in elections
        }
        seeded = 0
        for member in list(self._members.values()):
            resource = default_by_name.get(member.name)
            if resource is None:
                continue
            # Resolve through the catalog so an election cannot name a foreign resource.
            self._catalog.get(resource.resource_id)
            self._move(member.member_id, resource.resource_id)
            seeded += 1
        logger.info(
            "Allocation seeded from elections | elections=%s | members_seeded=%s",
            len(elections),
            seeded,
        )

    def _require_member(self, member_id: str) -> Member:
        member = self._members.get(member_id)
        if member is None:
            raise NotFoundError(f"Member not found: {member_id}")
        return member

    def _bucket_of(self, member_id: str) -> Optional[str]:
        for resource_id, member_ids in self._assignments.items():
            if member_id in member_ids:
                return resource_id
        return None

    def _bucket(self, resource_id: Optional[str]) -> list[str]:
        if resource_id is None:
            return self._unassigned
        return self._assignments[resource_id]

    def _move(self, member_id: str, destination_resource_id: Optional[str]) -> bool:
        """Move a validated member between validated buckets. Lock must be held."""
        source_resource_id = self._bucket_of(member_id)
        if source_resource_id == destination_resource_id:
            return False
        destination = self._bucket(destination_resource_id)
        self._bucket(source_resource_id).remove(member_id)
        destination.append(member_id)
        return True

    def _snapshot(self) -> AllocationSnapshot:
        return AllocationSnapshot(
            resources=self._catalog.list_resources(),
            members=tuple(self._members.values()),
            assignments={
                resource_id: tuple(member_ids)
                for resource_id, member_ids in self._assignments.items()
            },
            unassigned=tuple(self._unassigned),
        )

    @property
    def catalog(self) -> ResourceCatalog:
        return self._catalog

    def list_members(self) -> tuple[Member, ...]:
        with self._lock:
            return tuple(self._members.values())

    def list_resources(self) -> tuple[Resource, ...]:
        return self._catalog.list_resources()

    def list_tools(self) -> tuple[FinancialTool, ...]:
        snapshot, tools = self._read_state()
        return compute_tool_breakdown(snapshot, tools)

    def get_allocation(self) -> AllocationSnapshot:
        with self._lock:
            return self._snapshot()

    def _read_state(self) -> tuple[AllocationSnapshot, tuple[FinancialTool, ...]]:
        with self._lock:
            return self._snapshot(), tuple(self._tools.values())

    def reassign(
        self,
        member_id: str,
        destination_resource_id: Optional[str],
    ) -> AllocationSnapshot:
        """Move a member to a resource, or back to unassigned when ``None``."""
        with self._lock:
            self._require_member(member_id)
            if destination_resource_id is not None:
                self._catalog.get(destination_resource_id)
            source_resource_id = self._bucket_of(member_id)
            moved = self._move(member_id, destination_resource_id)
            if moved:
                logger.info(
                    "Member reassigned | member_id=%s | source=%s | destination=%s",
                    member_id,
                    source_resource_id or "unassigned",
                    destination_resource_id or "unassigned",
                )
            else:
                logger.debug(
                    "Reassignment skipped; member already in bucket | member_id=%s | bucket=%s",
                    member_id,
                    destination_resource_id or "unassigned",
                )
            return self._snapshot()

    def toggle_default_enrollment(self, member_id: str) -> AllocationSnapshot:
        with self._lock:
            member = self._require_member(member_id)
            updated = replace(member, default_enrolled=not member.default_enrolled)
            self._members[member_id] = updated
            logger.info(
                "Default enrollment toggled | member_id=%s | default_enrolled=%s",
                member_id,
                updated.default_enrolled,
            )
            return self._snapshot()

    def set_tool_used(self, tool_name: str, is_used: bool) -> FinancialTool:
        with self._lock:
            tool = self._tools.get(tool_name)
            if tool is None:
                raise NotFoundError(f"Financial tool not found: {tool_name}")
            self._tools[tool_name] = replace(tool, is_used=is_used)
            logger.info(
                "Financial tool updated | tool=%s | is_used=%s",
                tool_name,
                is_used,
            )
            snapshot = self._snapshot()
            updated = self._tools[tool_name]
        return compute_tool_breakdown(snapshot, [updated])[0]

    def compute_claim_impact_summary(self) -> float:
        return compute_claim_impact_summary(self.get_allocation())

    def compute_opt_out_credit(self) -> float:
        snapshot, tools = self._read_state()
        return compute_opt_out_credit(snapshot, tools)

    def compute_employer_cost(self) -> float:
        return compute_employer_cost(self.get_allocation())

    def summary(self) -> FinancialSummary:
        snapshot, tools = self._read_state()
        summary = compute_financial_summary(snapshot, tools)
        logger.debug(
            (
                "Financial summary computed | claim_impact=%.2f | opt_out_credit=%.2f | "
                "employer_cost=%.2f | member_cost=%.2f"
            ),
            summary.claim_impact,
            summary.opt_out_credit,
            summary.employer_cost,
            summary.member_cost,
        )
        return summary
