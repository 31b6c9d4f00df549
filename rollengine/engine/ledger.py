from collections.abc import Mapping
from types import MappingProxyType

from rollengine.core.enums import RarityTier


class PityLedger:
    """Per-player pity counters, one non-negative integer per tier."""

    def __init__(self, counters: Mapping[RarityTier, int] | None = None) -> None:
        self._counters: dict[RarityTier, int] = dict.fromkeys(RarityTier, 0)
        for tier, value in (counters or {}).items():
            if value < 0:
                msg = f"Pity counter for {tier} cannot be negative: {value}"
                raise ValueError(msg)
            self._counters[RarityTier(tier)] = value

    def __getitem__(self, tier: RarityTier) -> int:
        return self._counters[tier]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PityLedger):
            return self._counters == other._counters
        if isinstance(other, Mapping):
            return self._counters == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        counters = ", ".join(f"{tier.name}={value}" for tier, value in self._counters.items())
        return f"PityLedger({counters})"

    def snapshot(self) -> Mapping[RarityTier, int]:
        """Read-only copy of the counters at this moment."""
        return MappingProxyType(dict(self._counters))

    def reset(self, tier: RarityTier) -> None:
        self._counters[tier] = 0

    def increment(self, tier: RarityTier) -> None:
        self._counters[tier] += 1


def apply_roll(ledger: PityLedger, won_tier: RarityTier, *, reset: bool) -> PityLedger:
    """Update the ledger after a tier has been resolved.

    With ``reset`` the won tier and every commoner tier go back to zero while rarer
    tiers keep their counters. Without it (the fallback path) every tier other than
    the won one moves up by one.
    """
    if reset:
        ledger.reset(won_tier)
        for tier in won_tier.commoner_tiers():
            ledger.reset(tier)
    else:
        for tier in RarityTier:
            if tier is not won_tier:
                ledger.increment(tier)
    return ledger
