#!/usr/bin/env python3
"""Validate local environment readiness for the allocation engine."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tier_allocation.repository.seed_repository import SeedRepository
from tier_allocation.services.allocation_service import AllocationEngine
from tier_allocation.utils.config import get_settings
from tier_allocation.utils.currency import format_currency

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable with versions
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    from importlib.metadata import version

    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            _ = version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Seed data loads into a catalog and engine
    engine: AllocationEngine | None = None
    settings = get_settings()
    try:
        data = SeedRepository(settings).load()
        engine = AllocationEngine(
            catalog=data.catalog,
            members=data.members,
            tools=data.tools,
            elections=data.elections if settings.seed_elections else None,
        )
        ok, line = _print_result(
            "Seed data",
            True,
            f": {len(data.catalog)} resources, {len(data.members)} members",
        )
    except Exception as exc:
        ok, line = _print_result("Seed data", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4: Allocation conserves every member
    if engine is not None:
        try:
            snapshot = engine.get_allocation()
            bucketed = list(snapshot.unassigned)
            for member_ids in snapshot.assignments.values():
                bucketed.extend(member_ids)
            expected = sorted(member.member_id for member in snapshot.members)
            if sorted(bucketed) != expected:
                raise RuntimeError("member buckets do not match the member list")
            ok, line = _print_result("Allocation conservation", True)
        except Exception as exc:
            ok, line = _print_result("Allocation conservation", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Financial summary computes
        try:
            summary = engine.summary()
            ok, line = _print_result(
                "Financial summary",
                True,
                (
                    f": employer={format_currency(summary.employer_cost)} "
                    f"credit={format_currency(summary.opt_out_credit)}"
                ),
            )
        except Exception as exc:
            ok, line = _print_result("Financial summary", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Tier Allocation Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
