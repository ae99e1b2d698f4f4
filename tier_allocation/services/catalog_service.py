"""Resource catalog and factories for standard tiers and alternative plans."""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Iterable, Optional
from uuid import uuid4

from tier_allocation.domain.constraints import (
    validate_interval_pricing,
    validate_non_negative,
    validate_resource,
    validate_unique_ids,
)
from tier_allocation.domain.errors import NotFoundError, ValidationError
from tier_allocation.domain.models import AlternativeResource, Resource, StandardResource
from tier_allocation.utils.currency import format_currency
from tier_allocation.utils.logger import get_logger


logger = get_logger(__name__)


def _resolve_id(resource_id: Optional[str]) -> str:
    return resource_id if resource_id is not None else uuid4().hex


def create_standard_resource(
    name: str,
    member_cost: float,
    client_cost: float,
    *,
    resource_id: Optional[str] = None,
) -> StandardResource:
    validate_non_negative(member_cost, "member_cost")
    validate_non_negative(client_cost, "client_cost")
    return StandardResource(
        resource_id=_resolve_id(resource_id),
        name=name,
        member_cost=float(member_cost),
        client_cost=float(client_cost),
    )


def create_alternative_resource(
    name: Optional[str] = None,
    cost: float = 0,
    cost_eligible: bool = False,
    *,
    cost_per_interval: Optional[float] = None,
    intervals_per_year: Optional[int] = None,
    is_government_plan: bool = False,
    resource_id: Optional[str] = None,
) -> AlternativeResource:
    """Build an alternative resource; client cost is always zero.

    When per-interval pricing is supplied, ``member_cost`` holds the
    annualized figure; an explicit non-zero ``cost`` must agree with it.
    """
    validate_non_negative(cost, "cost")
    validate_interval_pricing(cost_per_interval, intervals_per_year)
    annual_cost = float(cost)
    if cost_per_interval is not None:
        annual_cost = float(cost_per_interval) * intervals_per_year
        if cost and not math.isclose(cost, annual_cost):
            raise ValidationError(
                f"cost {cost} disagrees with annualized interval pricing {annual_cost}"
            )
    resource = AlternativeResource(
        resource_id=_resolve_id(resource_id),
        name=name or "",
        member_cost=annual_cost,
        cost_eligible=cost_eligible,
        is_government_plan=is_government_plan,
        cost_per_interval=None if cost_per_interval is None else float(cost_per_interval),
        intervals_per_year=intervals_per_year,
    )
    if name is None:
        resource = replace(
            resource,
            name=f"Alt Resource ({format_currency(resource.annual_member_cost)})",
        )
    return resource


def create_medicare_resource(
    cost: float = 0,
    *,
    resource_id: Optional[str] = None,
) -> AlternativeResource:
    return create_alternative_resource(
        f"Medicare ({format_currency(cost)})",
        cost,
        cost_eligible=False,
        is_government_plan=True,
        resource_id=resource_id,
    )


def create_medicaid_resource(*, resource_id: Optional[str] = None) -> AlternativeResource:
    return create_alternative_resource(
        "Medicaid",
        0,
        cost_eligible=False,
        is_government_plan=True,
        resource_id=resource_id,
    )


def create_alt_employer_resource(
    name: Optional[str] = None,
    cost: float = 0,
    *,
    resource_id: Optional[str] = None,
) -> AlternativeResource:
    """A spouse's or second employer's plan; always counts toward opt-out credit."""
    return create_alternative_resource(
        name if name is not None else f"Alternative Employer ({format_currency(cost)})",
        cost,
        cost_eligible=True,
        resource_id=resource_id,
    )


def standard_tiers() -> list[StandardResource]:
    return [
        create_standard_resource("Employee", 8500, 19220.80, resource_id="resource-1"),
        create_standard_resource("Employee/Spouse", 10500, 28090.97, resource_id="resource-2"),
        create_standard_resource("Employee/Child", 9800, 26181.02, resource_id="resource-3"),
        create_standard_resource("Family", 12062, 32000.36, resource_id="resource-4"),
    ]


class ResourceCatalog:
    """Immutable, validated set of resources keyed by id."""

    def __init__(self, resources: Iterable[Resource]) -> None:
        ordered = tuple(resources)
        for resource in ordered:
            validate_resource(resource)
        validate_unique_ids((resource.resource_id for resource in ordered), "resource")
        self._resources = ordered
        self._by_id = {resource.resource_id: resource for resource in ordered}
        logger.info(
            "Resource catalog loaded | resources=%s | alternatives=%s",
            len(ordered),
            sum(1 for resource in ordered if resource.is_alternative),
        )

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._by_id

    def list_resources(self) -> tuple[Resource, ...]:
        return self._resources

    def get(self, resource_id: str) -> Resource:
        try:
            return self._by_id[resource_id]
        except KeyError as exc:
            raise NotFoundError(f"Resource not found: {resource_id}") from exc
