from collections.abc import Mapping
from typing import NamedTuple

from rollengine.core.enums import RarityTier, ResolutionSource
from rollengine.engine.pity_config import PityConfig, PityConfigTable


class Resolution(NamedTuple):
    tier: RarityTier
    guaranteed: bool
    source: ResolutionSource


def current_rate(config: PityConfig, pity: int) -> float:
    """Drop rate for a tier at the given pity count, soft pity included."""
    ramp = max(0, pity - config.soft_pity_start) * config.soft_pity_increase
    return min(max(config.base_rate + ramp, config.base_rate), config.max_rate)


def find_hard_pity(ledger: Mapping[RarityTier, int], table: PityConfigTable) -> RarityTier | None:
    for tier in RarityTier.rarest_first():
        limit = table[tier].hard_pity_limit
        if limit > 0 and ledger[tier] >= limit:
            return tier
    return None


def resolve_rarity(
    ledger: Mapping[RarityTier, int], table: PityConfigTable, draw: float
) -> Resolution:
    """Pick the tier for one roll.

    Args:
        ledger: Snapshot of the player's pity counters.
        table: Pity configuration.
        draw: Uniform random number in [0, 1). Ignored when hard pity applies.

    Returns:
        The chosen tier, whether pity drove it, and which path produced it.
    """
    hard_pity_tier = find_hard_pity(ledger, table)
    if hard_pity_tier is not None:
        return Resolution(hard_pity_tier, True, ResolutionSource.HARD_PITY)

    running_total = 0.0
    for tier in table.draw_order:
        config = table[tier]
        running_total += current_rate(config, ledger[tier])
        if draw <= running_total:
            soft_pity_active = ledger[tier] >= config.soft_pity_start
            return Resolution(tier, soft_pity_active, ResolutionSource.WEIGHTED)

    return Resolution(RarityTier.commonest(), False, ResolutionSource.FALLBACK)
