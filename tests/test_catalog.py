from __future__ import annotations

import pytest

from tier_allocation.domain.errors import NotFoundError, ValidationError
from tier_allocation.domain.models import AlternativeResource, StandardResource
from tier_allocation.services.catalog_service import (
    ResourceCatalog,
    create_alt_employer_resource,
    create_alternative_resource,
    create_medicaid_resource,
    create_medicare_resource,
    create_standard_resource,
    standard_tiers,
)
from tier_allocation.utils.currency import format_currency


def test_standard_resource_is_not_alternative():
    resource = create_standard_resource("Family", 12062, 32000.36, resource_id="fam")

    assert isinstance(resource, StandardResource)
    assert resource.is_alternative is False
    assert resource.client_cost == 32000.36
    assert resource.annual_member_cost == 12062
    assert not hasattr(resource, "cost_per_interval")
    assert not hasattr(resource, "cost_eligible")


@pytest.mark.parametrize("member_cost, client_cost", [(-1, 0), (0, -0.5)])
def test_standard_resource_rejects_negative_costs(member_cost, client_cost):
    with pytest.raises(ValidationError):
        create_standard_resource("Employee", member_cost, client_cost)


def test_alternative_resource_defaults():
    resource = create_alternative_resource()

    assert isinstance(resource, AlternativeResource)
    assert resource.is_alternative is True
    assert resource.client_cost == 0.0
    assert resource.cost_eligible is False
    assert resource.is_government_plan is False
    assert resource.name == "Alt Resource ($0.00)"


def test_alternative_resource_default_name_formats_cost():
    resource = create_alternative_resource(None, 1234.5, True)

    assert resource.name == "Alt Resource ($1,234.50)"
    assert resource.cost_eligible is True


def test_alternative_resource_rejects_negative_cost():
    with pytest.raises(ValidationError):
        create_alternative_resource("Spouse plan", -10)


def test_alternative_resource_annualizes_interval_pricing():
    resource = create_alternative_resource(
        cost_per_interval=150.0,
        intervals_per_year=26,
    )

    assert resource.annual_member_cost == 3900.0
    assert resource.name == "Alt Resource ($3,900.00)"
    assert resource.member_cost == 3900.0


def test_medicare_is_government_and_never_cost_eligible():
    resource = create_medicare_resource(1200)

    assert resource.name == "Medicare ($1,200.00)"
    assert resource.is_government_plan is True
    assert resource.cost_eligible is False
    assert resource.generates_opt_out_credit is False


def test_medicaid_is_zero_cost_government_plan():
    resource = create_medicaid_resource()

    assert resource.name == "Medicaid"
    assert resource.member_cost == 0.0
    assert resource.is_government_plan is True
    assert resource.cost_eligible is False


def test_alt_employer_plan_is_cost_eligible():
    resource = create_alt_employer_resource(None, 2400)

    assert resource.name == "Alternative Employer ($2,400.00)"
    assert resource.cost_eligible is True
    assert resource.generates_opt_out_credit is True


def test_generated_resource_ids_are_unique():
    first = create_medicaid_resource()
    second = create_medicaid_resource()

    assert first.resource_id != second.resource_id


def test_standard_tiers_match_published_rates():
    tiers = {tier.name: tier for tier in standard_tiers()}

    assert tiers["Employee"].client_cost == 19220.80
    assert tiers["Employee/Spouse"].member_cost == 10500
    assert tiers["Employee/Child"].client_cost == 26181.02
    assert tiers["Family"].resource_id == "resource-4"


def test_catalog_lookup_and_membership():
    catalog = ResourceCatalog(standard_tiers())

    assert len(catalog) == 4
    assert "resource-2" in catalog
    assert catalog.get("resource-2").name == "Employee/Spouse"


def test_catalog_unknown_resource_raises_not_found():
    catalog = ResourceCatalog(standard_tiers())

    with pytest.raises(NotFoundError):
        catalog.get("resource-99")


def test_catalog_rejects_duplicate_ids():
    with pytest.raises(ValidationError):
        ResourceCatalog(
            [
                create_medicaid_resource(resource_id="dup"),
                create_medicare_resource(resource_id="dup"),
            ]
        )


def test_catalog_is_read_only():
    catalog = ResourceCatalog(standard_tiers())

    assert isinstance(catalog.list_resources(), tuple)


def test_format_currency_rounds_only_for_display():
    assert format_currency(19220.804) == "$19,220.80"
    assert format_currency(-6000) == "-$6,000.00"
    assert format_currency(1000000, symbol="USD ") == "USD 1,000,000.00"


def test_alternative_resource_accepts_matching_annual_cost():
    resource = create_alternative_resource(
        "Spouse plan", 2600, cost_per_interval=100.0, intervals_per_year=26
    )

    assert resource.member_cost == 2600.0


def test_alternative_resource_rejects_cost_that_disagrees_with_interval_pricing():
    with pytest.raises(ValidationError, match="annualized"):
        create_alternative_resource(
            "Spouse plan", 500, cost_per_interval=100.0, intervals_per_year=26
        )


def test_catalog_rejects_member_cost_out_of_step_with_interval_pricing():
    resource = AlternativeResource(
        "spouse",
        "Spouse plan",
        0.0,
        cost_per_interval=100.0,
        intervals_per_year=26,
    )

    with pytest.raises(ValidationError, match="member_cost"):
        ResourceCatalog([resource])


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_factories_reject_non_finite_costs(value):
    with pytest.raises(ValidationError, match="finite"):
        create_standard_resource("Employee", value, 5)
    with pytest.raises(ValidationError, match="finite"):
        create_standard_resource("Employee", 5, value)
    with pytest.raises(ValidationError, match="finite"):
        create_alternative_resource("Spouse plan", value)
