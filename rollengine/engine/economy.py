import math
from collections.abc import Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field

from rollengine.core.enums import Currency, RollType
from rollengine.schemas.roll import RollCost


class CostEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency: Currency
    unit_cost: int = Field(ge=0)
    max_count: int = Field(default=10, ge=1)


class BulkDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_count: int = Field(ge=1)
    discount: float = Field(ge=0.0, lt=1.0)


DEFAULT_COST_ENTRIES: dict[RollType, CostEntry] = {
    RollType.DAILY: CostEntry(currency=Currency.COINS, unit_cost=100, max_count=1),
    RollType.PREMIUM: CostEntry(currency=Currency.GEMS, unit_cost=160),
    RollType.BONUS: CostEntry(currency=Currency.TICKETS, unit_cost=1),
    RollType.EVENT: CostEntry(currency=Currency.EVENT_TOKENS, unit_cost=5),
    RollType.PITY: CostEntry(currency=Currency.GEMS, unit_cost=300, max_count=1),
}

DEFAULT_BULK_DISCOUNTS: tuple[BulkDiscount, ...] = (
    BulkDiscount(min_count=10, discount=0.10),
    BulkDiscount(min_count=5, discount=0.05),
)


class RollCostTable:
    def __init__(
        self,
        entries: Mapping[RollType, CostEntry] | None = None,
        bulk_discounts: Sequence[BulkDiscount] | None = None,
    ) -> None:
        self._entries = dict(DEFAULT_COST_ENTRIES if entries is None else entries)
        discounts = DEFAULT_BULK_DISCOUNTS if bulk_discounts is None else bulk_discounts
        self._discounts = sorted(discounts, key=lambda d: d.min_count, reverse=True)

    def get_entry(self, roll_type: RollType) -> CostEntry | None:
        return self._entries.get(roll_type)

    def get_discount(self, count: int) -> float:
        """Discount fraction of the largest bulk tier ``count`` qualifies for."""
        for bulk in self._discounts:
            if count >= bulk.min_count:
                return bulk.discount
        return 0.0

    def get_roll_cost(self, roll_type: RollType, count: int) -> RollCost:
        """Quote the cost of rolling ``count`` cards.

        Raises:
            KeyError: If the roll type has no cost entry.
        """
        entry = self._entries.get(roll_type)
        if entry is None:
            msg = f"No cost entry for roll type {roll_type}"
            raise KeyError(msg)

        original_amount = entry.unit_cost * count
        discount = self.get_discount(count)
        amount = original_amount - math.floor(original_amount * discount)
        return RollCost(
            currency=entry.currency,
            amount=amount,
            original_amount=original_amount,
            discount=discount,
        )
