import datetime

from pydantic import BaseModel, ConfigDict, Field

from rollengine.core.enums import Currency, RarityTier, RollType, ValidationFailure
from rollengine.utils.misc import get_utc_now


class RollRequest(BaseModel):
    """A single request to roll cards. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    player_id: int
    roll_type: RollType
    count: int
    timestamp: datetime.datetime = Field(default_factory=get_utc_now)


class RollRequestBody(BaseModel):
    """Request body for the roll endpoint; the server stamps the time."""

    player_id: int
    roll_type: RollType
    count: int = Field(default=1, description="Number of cards to roll")


class CardRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    card_id: int
    name: str
    tier: RarityTier


class CardRollResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    card: CardRef
    tier: RarityTier
    """Tier chosen by the resolver, even if the catalog had to substitute a card"""
    is_new: bool
    is_pity_result: bool
    pity_count_at_draw: int
    roll_position: int
    reveal_delay_ms: int
    effect_intensity: float = Field(ge=0.0, le=1.0)


class RollCost(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency: Currency
    amount: int
    original_amount: int
    discount: float = 0.0
    """Fraction taken off original_amount"""


class TimingData(BaseModel):
    model_config = ConfigDict(frozen=True)

    optimal_reveal_ms: int
    psychological_delay_ms: int
    total_duration_ms: int


class RollResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    cards: tuple[CardRollResult, ...]
    total_cards: int
    pity_used: tuple[RarityTier, ...]
    guarantee_used: bool
    roll_cost: RollCost
    timing_data: TimingData


class RollResponse(BaseModel):
    success: bool
    data: RollResult | None = None
    error_message: str | None = None
    failure: ValidationFailure | None = None
    processing_time_ms: float = 0.0


class RollStatistics(BaseModel):
    total_rolls: int = 0
    total_cards: int = 0
    tier_histogram: dict[RarityTier, int] = Field(
        default_factory=lambda: dict.fromkeys(RarityTier, 0)
    )
    pity_usage_rate: float = 0.0
    """Blended as (old + used) / 2 after each roll, not a windowed average"""
    engagement_score: float = Field(default=0.0, ge=0.0, le=1.0)
    last_roll_at: datetime.datetime | None = None


class TierPityStatus(BaseModel):
    tier: RarityTier
    pity_count: int
    current_rate: float
    soft_pity_start: int
    hard_pity_limit: int


class PityStatusResponse(BaseModel):
    player_id: int
    tiers: list[TierPityStatus]
