"""Domain-level validation rules for resources, members and financial tools."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from tier_allocation.domain.errors import ValidationError
from tier_allocation.domain.models import FinancialTool, Member, Resource


def validate_non_negative(value: float, field_name: str) -> None:
    if not math.isfinite(value):
        raise ValidationError(f"{field_name} must be a finite number, got {value}")
    if value < 0:
        raise ValidationError(f"{field_name} must be >= 0, got {value}")


def validate_interval_pricing(
    cost_per_interval: Optional[float],
    intervals_per_year: Optional[int],
) -> None:
    if (cost_per_interval is None) != (intervals_per_year is None):
        raise ValidationError(
            "cost_per_interval and intervals_per_year must be provided together"
        )
    if cost_per_interval is None:
        return
    validate_non_negative(cost_per_interval, "cost_per_interval")
    if intervals_per_year <= 0:
        raise ValidationError("intervals_per_year must be > 0")


def validate_financial_tool(tool: FinancialTool) -> None:
    if not tool.name.strip():
        raise ValidationError("financial tool name must be non-empty")
    validate_non_negative(tool.single_credit, "single_credit")
    validate_non_negative(tool.multi_credit, "multi_credit")


def validate_member(member: Member) -> None:
    if not member.member_id.strip():
        raise ValidationError("member_id must be non-empty")
    validate_non_negative(member.claim_impact, "claim_impact")


def validate_unique_ids(ids: Iterable[str], kind: str) -> None:
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            raise ValidationError(f"duplicate {kind} id: {item_id}")
        seen.add(item_id)


def validate_resource(resource: Resource) -> None:
    if not resource.resource_id.strip():
        raise ValidationError("resource_id must be non-empty")
    validate_non_negative(resource.member_cost, "member_cost")
    validate_non_negative(resource.client_cost, "client_cost")
    if resource.is_alternative:
        validate_interval_pricing(
            resource.cost_per_interval,
            resource.intervals_per_year,
        )
        if resource.cost_per_interval is not None and not math.isclose(
            resource.member_cost, resource.annual_member_cost
        ):
            raise ValidationError(
                f"member_cost {resource.member_cost} must equal annualized interval "
                f"pricing {resource.annual_member_cost}"
            )
