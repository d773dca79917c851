"""Bundled sample dataset used when no stored records exist."""

from __future__ import annotations

import random
from collections.abc import Callable
from decimal import Decimal

from resplan.models.records import ResourceAssignment, ResourceStatus, new_record_id

BOOTSTRAP_TEAM = "GrafTech"
BOOTSTRAP_MONTH = "2025-01"
TEAM_MEMBERS = ("Vika", "Vlad", "Kirill", "Yura", "Lesha", "Zhenya", "Dima", "Andrey")
PRODUCTS = (
    "Avtograf.PRO",
    "GrafBoard",
    "Avtograf.Standard",
    "Avtograf.MVP",
    "GrafDoc",
    "DWG Viewer",
)
STACKS = ("Bitrix", "ROR", "Gravity", "8most")

WEEKLY_HOURS_RANGE = (10, 29)
HOURLY_RATE_RANGE = (1000, 2999)
WEEKS_PER_MONTH = 4

BootstrapGenerator = Callable[[], list[ResourceAssignment]]


def generate_bootstrap_records(
    rng: random.Random | None = None,
    *,
    id_factory: Callable[[], str] = new_record_id,
) -> list[ResourceAssignment]:
    """One active record per team member with randomized product, hours and rate."""

    rng = rng or random.Random()
    records: list[ResourceAssignment] = []
    for member in TEAM_MEMBERS:
        product = rng.choice(PRODUCTS)
        stack = rng.choice(STACKS)
        weekly_hours = rng.randint(*WEEKLY_HOURS_RANGE)
        records.append(
            ResourceAssignment(
                id=id_factory(),
                name=member,
                team=BOOTSTRAP_TEAM,
                product=product,
                project=f"{product} - Project",
                stack=stack,
                hours_per_month=Decimal(weekly_hours * WEEKS_PER_MONTH),
                hourly_rate=Decimal(rng.randint(*HOURLY_RATE_RANGE)),
                month=BOOTSTRAP_MONTH,
                status=ResourceStatus.ACTIVE,
            )
        )
    return records


def seeded_generator(seed: int | None) -> BootstrapGenerator:
    """Bind a generator to a seed; ``None`` means nondeterministic sample data."""

    def generate() -> list[ResourceAssignment]:
        return generate_bootstrap_records(random.Random(seed))

    return generate
