from enum import StrEnum
from typing import Self


class RarityTier(StrEnum):
    """Card rarity tiers, declared rarest first.

    Declaration order is load-bearing: hard pity scans, weighted draws and
    cascading resets all walk the tiers in this order.
    """

    ULTIMATE = "ULTIMATE"
    MYTHICAL = "MYTHICAL"
    LEGENDARY = "LEGENDARY"
    EPIC = "EPIC"
    RARE = "RARE"
    UNCOMMON = "UNCOMMON"
    COMMON = "COMMON"

    @property
    def rank(self) -> int:
        """0 for the rarest tier, increasing towards common."""
        return list(RarityTier).index(self)

    def is_rarer_than(self, other: Self) -> bool:
        return self.rank < other.rank

    def commoner_tiers(self) -> list["RarityTier"]:
        """Every tier strictly commoner than this one, in canonical order."""
        return list(RarityTier)[self.rank + 1 :]

    @classmethod
    def rarest_first(cls) -> list["RarityTier"]:
        return list(cls)

    @classmethod
    def commonest(cls) -> "RarityTier":
        return list(cls)[-1]


class RollType(StrEnum):
    DAILY = "DAILY"
    PREMIUM = "PREMIUM"
    BONUS = "BONUS"
    EVENT = "EVENT"
    PITY = "PITY"


class Currency(StrEnum):
    COINS = "COINS"
    GEMS = "GEMS"
    TICKETS = "TICKETS"
    EVENT_TOKENS = "EVENT_TOKENS"


class ResolutionSource(StrEnum):
    HARD_PITY = "HARD_PITY"
    WEIGHTED = "WEIGHTED"
    FALLBACK = "FALLBACK"


class ValidationFailure(StrEnum):
    NO_PROFILE = "NO_PROFILE"
    UNKNOWN_ROLL_TYPE = "UNKNOWN_ROLL_TYPE"
    INVALID_COUNT = "INVALID_COUNT"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    RATE_LIMITED = "RATE_LIMITED"


class EventType(StrEnum):
    ROLL = "ROLL"
    PLAYER_CREATED = "PLAYER_CREATED"
    INCREASE_CURRENCY = "INCREASE_CURRENCY"
