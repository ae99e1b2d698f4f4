"""HTTP controller layer for member allocation and financial summaries."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from tier_allocation.controllers.dependencies import get_allocation_engine
from tier_allocation.domain.errors import NotFoundError, ValidationError
from tier_allocation.domain.models import (
    AllocationSnapshot,
    CoverageTier,
    FinancialTool,
    Member,
    Resource,
)
from tier_allocation.services.allocation_service import AllocationEngine
from tier_allocation.utils.currency import format_currency
from tier_allocation.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["allocation"])


class MemberResponse(BaseModel):
    member_id: str
    name: str
    claim_impact: float = Field(ge=0.0)
    default_enrolled: bool
    coverage_tier: CoverageTier


class ResourceResponse(BaseModel):
    resource_id: str
    name: str
    is_alternative: bool
    member_cost: float = Field(ge=0.0)
    annual_member_cost: float = Field(ge=0.0)
    client_cost: float = Field(ge=0.0)
    cost_eligible: bool | None = None
    is_government_plan: bool | None = None
    cost_per_interval: float | None = None
    intervals_per_year: int | None = None


class BucketResponse(BaseModel):
    resource: ResourceResponse
    members: list[MemberResponse]
    assigned_count: int = Field(ge=0)


class AllocationResponse(BaseModel):
    buckets: list[BucketResponse]
    unassigned: list[MemberResponse]


class FinancialToolResponse(BaseModel):
    name: str
    is_used: bool
    single_credit: float = Field(ge=0.0)
    multi_credit: float = Field(ge=0.0)
    opt_out_total: float = Field(ge=0.0)


class SummaryFigure(BaseModel):
    amount: float
    formatted: str


class SummaryResponse(BaseModel):
    claim_impact: SummaryFigure
    opt_out_credit: SummaryFigure
    employer_cost: SummaryFigure
    member_cost: SummaryFigure
    tools: list[FinancialToolResponse]


class ReassignRequest(BaseModel):
    member_id: str = Field(min_length=1)
    destination_resource_id: Optional[str] = Field(default=None, min_length=1)


class SetToolUsedRequest(BaseModel):
    is_used: bool


def _member_response(member: Member) -> MemberResponse:
    return MemberResponse(
        member_id=member.member_id,
        name=member.name,
        claim_impact=member.claim_impact,
        default_enrolled=member.default_enrolled,
        coverage_tier=member.coverage_tier,
    )


def _resource_response(resource: Resource) -> ResourceResponse:
    alternative_fields: dict[str, object] = {}
    if resource.is_alternative:
        alternative_fields = {
            "cost_eligible": resource.cost_eligible,
            "is_government_plan": resource.is_government_plan,
            "cost_per_interval": resource.cost_per_interval,
            "intervals_per_year": resource.intervals_per_year,
        }
    return ResourceResponse(
        resource_id=resource.resource_id,
        name=resource.name,
        is_alternative=resource.is_alternative,
        member_cost=resource.member_cost,
        annual_member_cost=resource.annual_member_cost,
        client_cost=resource.client_cost,
        **alternative_fields,
    )


def _tool_response(tool: FinancialTool) -> FinancialToolResponse:
    return FinancialToolResponse(
        name=tool.name,
        is_used=tool.is_used,
        single_credit=tool.single_credit,
        multi_credit=tool.multi_credit,
        opt_out_total=tool.opt_out_total,
    )


def _allocation_response(snapshot: AllocationSnapshot) -> AllocationResponse:
    buckets = []
    for resource in snapshot.resources:
        members = snapshot.members_in(resource.resource_id)
        buckets.append(
            BucketResponse(
                resource=_resource_response(resource),
                members=[_member_response(member) for member in members],
                assigned_count=len(members),
            )
        )
    return AllocationResponse(
        buckets=buckets,
        unassigned=[_member_response(member) for member in snapshot.members_in(None)],
    )


def _figure(amount: float) -> SummaryFigure:
    return SummaryFigure(amount=amount, formatted=format_currency(amount))


@router.get("/members", response_model=list[MemberResponse])
async def list_members(
    engine: AllocationEngine = Depends(get_allocation_engine),
) -> list[MemberResponse]:
    return [_member_response(member) for member in engine.list_members()]


@router.get("/resources", response_model=list[ResourceResponse])
async def list_resources(
    engine: AllocationEngine = Depends(get_allocation_engine),
) -> list[ResourceResponse]:
    return [_resource_response(resource) for resource in engine.list_resources()]


@router.get("/allocation", response_model=AllocationResponse)
async def get_allocation(
    engine: AllocationEngine = Depends(get_allocation_engine),
) -> AllocationResponse:
    return _allocation_response(engine.get_allocation())


@router.get("/tools", response_model=list[FinancialToolResponse])
async def list_tools(
    engine: AllocationEngine = Depends(get_allocation_engine),
) -> list[FinancialToolResponse]:
    return [_tool_response(tool) for tool in engine.list_tools()]


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    engine: AllocationEngine = Depends(get_allocation_engine),
) -> SummaryResponse:
    """Cost and credit are separate line items; nothing is netted here."""
    try:
        summary = engine.summary()
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected summary failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute financial summary",
        ) from exc
    return SummaryResponse(
        claim_impact=_figure(summary.claim_impact),
        opt_out_credit=_figure(summary.opt_out_credit),
        employer_cost=_figure(summary.employer_cost),
        member_cost=_figure(summary.member_cost),
        tools=[_tool_response(tool) for tool in summary.tools],
    )


@router.post(
    "/reassign",
    response_model=AllocationResponse,
    status_code=status.HTTP_200_OK,
)
async def reassign(
    payload: ReassignRequest,
    engine: AllocationEngine = Depends(get_allocation_engine),
) -> AllocationResponse:
    """Move a member to a resource; a null destination returns them to unassigned."""
    try:
        snapshot = engine.reassign(payload.member_id, payload.destination_resource_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected reassignment failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reassign member",
        ) from exc
    return _allocation_response(snapshot)


@router.post(
    "/members/{member_id}/toggle_default_enrollment",
    response_model=AllocationResponse,
    status_code=status.HTTP_200_OK,
)
async def toggle_default_enrollment(
    member_id: str,
    engine: AllocationEngine = Depends(get_allocation_engine),
) -> AllocationResponse:
    try:
        snapshot = engine.toggle_default_enrollment(member_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected default enrollment toggle failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to toggle default enrollment",
        ) from exc
    return _allocation_response(snapshot)


@router.put(
    "/tools/{tool_name}",
    response_model=FinancialToolResponse,
    status_code=status.HTTP_200_OK,
)
async def set_tool_used(
    tool_name: str,
    payload: SetToolUsedRequest,
    engine: AllocationEngine = Depends(get_allocation_engine),
) -> FinancialToolResponse:
    try:
        tool = engine.set_tool_used(tool_name, payload.is_used)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected financial tool update failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update financial tool",
        ) from exc
    return _tool_response(tool)
