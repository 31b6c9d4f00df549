from pydantic import BaseModel, Field

from rollengine.core.enums import Currency


class PlayerCreate(BaseModel):
    id: int = Field(description="External player ID")
    name: str | None = None
    balances: dict[Currency, int] = Field(
        default_factory=dict, description="Starting balance per currency"
    )


class CurrencyAdjustment(BaseModel):
    """Schema for granting a player currency."""

    currency: Currency
    amount: int = Field(gt=0, description="Amount to add (must be positive)")
    reason: str = Field(min_length=1, max_length=255, description="Reason for adjustment")


class PlayerSummary(BaseModel):
    id: int
    name: str | None
    balances: dict[Currency, int]
    owned_cards: int
