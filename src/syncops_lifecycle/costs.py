"""Static storage cost model (USD, per decimal GB)."""

from __future__ import annotations

from dataclasses import dataclass

from syncops_lifecycle.models import StorageTier

BYTES_PER_GB = 1e9

STORAGE_TIER_COSTS: dict[str, float] = {
    StorageTier.HOT.value: 0.023,
    StorageTier.WARM.value: 0.0125,
    StorageTier.COLD.value: 0.004,
    StorageTier.GLACIER.value: 0.0036,
    StorageTier.DEEP_ARCHIVE.value: 0.00099,
}


@dataclass(frozen=True)
class RestoreCost:
    """Retrieval pricing for bringing data back from a tier."""

    per_gb: float
    hours: float


RESTORE_COSTS: dict[str, RestoreCost] = {
    StorageTier.HOT.value: RestoreCost(per_gb=0.0, hours=0.0),
    StorageTier.WARM.value: RestoreCost(per_gb=0.01, hours=0.0),
    StorageTier.COLD.value: RestoreCost(per_gb=0.01, hours=0.0),
    StorageTier.GLACIER.value: RestoreCost(per_gb=0.03, hours=5.0),
    StorageTier.DEEP_ARCHIVE.value: RestoreCost(per_gb=0.02, hours=12.0),
}


def _tier_key(tier: str | StorageTier) -> str:
    return tier.value if isinstance(tier, StorageTier) else str(tier)


def calculate_monthly_storage_cost(tier: str | StorageTier, size_bytes: float) -> float:
    """Monthly cost of keeping ``size_bytes`` in ``tier``. Unknown tiers cost 0."""
    return STORAGE_TIER_COSTS.get(_tier_key(tier), 0.0) * (size_bytes / BYTES_PER_GB)


def calculate_storage_cost_savings(
    from_tier: str | StorageTier,
    to_tier: str | StorageTier,
    size_bytes: float,
) -> float:
    """Monthly savings of moving ``size_bytes`` from one tier to another.

    Negative results are a cost increase (moving to a pricier tier); callers
    check the sign before labelling the figure as savings. Unknown tiers yield 0.
    """

    from_cost = STORAGE_TIER_COSTS.get(_tier_key(from_tier))
    to_cost = STORAGE_TIER_COSTS.get(_tier_key(to_tier))
    if from_cost is None or to_cost is None:
        return 0.0
    return (from_cost - to_cost) * (size_bytes / BYTES_PER_GB)


def estimate_restore_cost(tier: str | StorageTier, size_bytes: float) -> float:
    restore = RESTORE_COSTS.get(_tier_key(tier))
    if restore is None:
        return 0.0
    return restore.per_gb * (size_bytes / BYTES_PER_GB)


def estimate_restore_hours(tier: str | StorageTier) -> float:
    restore = RESTORE_COSTS.get(_tier_key(tier))
    return restore.hours if restore else 0.0
