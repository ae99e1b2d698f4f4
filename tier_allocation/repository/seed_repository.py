"""Repository layer that supplies the session's startup data."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as SchemaValidationError,
    model_validator,
)

from tier_allocation.domain.errors import NotFoundError, ValidationError
from tier_allocation.domain.models import (
    CoverageTier,
    Election,
    FinancialTool,
    Member,
    Resource,
)
from tier_allocation.services.catalog_service import (
    ResourceCatalog,
    create_alt_employer_resource,
    create_alternative_resource,
    create_medicaid_resource,
    create_medicare_resource,
    create_standard_resource,
    standard_tiers,
)
from tier_allocation.utils.config import Settings, get_settings
from tier_allocation.utils.logger import get_logger


logger = get_logger(__name__)


_SHARED_RESOURCE_FIELDS = frozenset({"resource_id", "kind"})

# Fields each kind passes through to its factory; anything else would be dropped.
_RESOURCE_KIND_FIELDS = {
    "standard": frozenset({"name", "member_cost", "client_cost"}),
    "alternative": frozenset(
        {
            "name",
            "member_cost",
            "cost_eligible",
            "is_government_plan",
            "cost_per_interval",
            "intervals_per_year",
        }
    ),
    "medicare": frozenset({"member_cost"}),
    "medicaid": frozenset(),
    "alt_employer": frozenset({"name", "member_cost"}),
}


class ResourceSeed(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    resource_id: str = Field(min_length=1)
    kind: Literal["standard", "alternative", "medicare", "medicaid", "alt_employer"]
    name: Optional[str] = None
    member_cost: float = 0.0
    client_cost: float = 0.0
    cost_eligible: bool = False
    is_government_plan: bool = False
    cost_per_interval: Optional[float] = None
    intervals_per_year: Optional[int] = None

    @model_validator(mode="after")
    def validate_kind_fields(self) -> "ResourceSeed":
        if self.kind == "standard" and self.name is None:
            raise ValueError("standard resources require a name")
        accepted = _SHARED_RESOURCE_FIELDS | _RESOURCE_KIND_FIELDS[self.kind]
        ignored = sorted(
            field
            for field in self.model_fields_set - accepted
            if getattr(self, field) != ResourceSeed.model_fields[field].default
        )
        if ignored:
            raise ValueError(f"{self.kind} resources do not accept: {', '.join(ignored)}")
        return self


class MemberSeed(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    member_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    claim_impact: float = Field(default=0.0, ge=0.0)
    default_enrolled: bool = True
    coverage_tier: CoverageTier = CoverageTier.SINGLE


class ElectionSeed(BaseModel):
    name: str = Field(min_length=1)
    default_resource_id: str = Field(min_length=1)


class FinancialToolSeed(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    name: str = Field(min_length=1)
    is_used: bool = False
    single_credit: float = Field(default=0.0, ge=0.0)
    multi_credit: float = Field(default=0.0, ge=0.0)


class SessionSeed(BaseModel):
    resources: list[ResourceSeed]
    members: list[MemberSeed] = Field(default_factory=list)
    elections: list[ElectionSeed] = Field(default_factory=list)
    tools: list[FinancialToolSeed] = Field(default_factory=list)


@dataclass(frozen=True)
class SessionData:
    catalog: ResourceCatalog
    members: list[Member]
    elections: list[Election]
    tools: list[FinancialTool]


def _build_resource(seed: ResourceSeed) -> Resource:
    if seed.kind == "standard":
        return create_standard_resource(
            seed.name,
            seed.member_cost,
            seed.client_cost,
            resource_id=seed.resource_id,
        )
    if seed.kind == "medicare":
        return create_medicare_resource(seed.member_cost, resource_id=seed.resource_id)
    if seed.kind == "medicaid":
        return create_medicaid_resource(resource_id=seed.resource_id)
    if seed.kind == "alt_employer":
        return create_alt_employer_resource(
            seed.name,
            seed.member_cost,
            resource_id=seed.resource_id,
        )
    return create_alternative_resource(
        seed.name,
        seed.member_cost,
        seed.cost_eligible,
        is_government_plan=seed.is_government_plan,
        cost_per_interval=seed.cost_per_interval,
        intervals_per_year=seed.intervals_per_year,
        resource_id=seed.resource_id,
    )


def build_session_data(seed: SessionSeed) -> SessionData:
    """Convert a validated seed document into domain objects."""
    catalog = ResourceCatalog(_build_resource(item) for item in seed.resources)
    members = [
        Member(
            member_id=item.member_id,
            name=item.name,
            claim_impact=item.claim_impact,
            default_enrolled=item.default_enrolled,
            coverage_tier=item.coverage_tier,
        )
        for item in seed.members
    ]
    elections = [
        Election(name=item.name, default_resource=catalog.get(item.default_resource_id))
        for item in seed.elections
    ]
    tools = [
        FinancialTool(
            name=item.name,
            is_used=item.is_used,
            single_credit=item.single_credit,
            multi_credit=item.multi_credit,
        )
        for item in seed.tools
    ]
    return SessionData(catalog=catalog, members=members, elections=elections, tools=tools)


def sample_session_data() -> SessionData:
    tiers = standard_tiers()
    family = tiers[3]
    catalog = ResourceCatalog(
        [
            *tiers,
            create_medicare_resource(resource_id="resource-5"),
            create_medicaid_resource(resource_id="resource-6"),
            create_alt_employer_resource(None, 2400, resource_id="resource-7"),
        ]
    )
    members = [
        Member("1", "John Smith", 15000, True),
        Member("2", "Sarah Johnson", 102000, True, CoverageTier.MULTI),
        Member("3", "Mike Davis", 1000, True),
        Member("4", "Emily Chen", 1000, True),
        Member("5", "David Wilson", 1000, False),
        Member("6", "Stephen Funk", 4000, True, CoverageTier.MULTI),
        Member("7", "Louisa Funk", 2500, True, CoverageTier.MULTI),
        Member("8", "Victoria Funk", 800, True, CoverageTier.MULTI),
    ]
    elections = [
        Election("Stephen Funk", family),
        Election("Louisa Funk", family),
        Election("Victoria Funk", family),
    ]
    tools = [
        FinancialTool("Opt-Out Credit", is_used=True, single_credit=6000, multi_credit=12000),
    ]
    return SessionData(catalog=catalog, members=members, elections=elections, tools=tools)


class SeedRepository:
    """Loads startup data from a JSON seed file or the built-in sample."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    @property
    def seed_path(self) -> Optional[Path]:
        return self._settings.seed_path

    def load(self) -> SessionData:
        if self.seed_path is None:
            logger.info("No seed file configured; using built-in sample data")
            return sample_session_data()
        return self.load_file(self.seed_path)

    def load_file(self, path: Path) -> SessionData:
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ValidationError(f"Seed file could not be read: {path}: {exc}") from exc
        try:
            seed = SessionSeed.model_validate(raw)
        except SchemaValidationError as exc:
            raise ValidationError(f"Seed file is invalid: {path}: {exc}") from exc
        try:
            data = build_session_data(seed)
        except NotFoundError as exc:
            raise ValidationError(f"Seed file references unknown resource: {exc}") from exc
        logger.info(
            "Seed file loaded | path=%s | resources=%s | members=%s | elections=%s | tools=%s",
            path,
            len(data.catalog),
            len(data.members),
            len(data.elections),
            len(data.tools),
        )
        return data
