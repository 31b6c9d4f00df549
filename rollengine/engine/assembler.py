import random
from collections.abc import Sequence
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from rollengine.core.enums import RarityTier
from rollengine.schemas.roll import CardRef, CardRollResult, RollCost, RollResult, TimingData

TIER_REVEAL_MULTIPLIERS: dict[RarityTier, float] = {
    RarityTier.ULTIMATE: 3.0,
    RarityTier.MYTHICAL: 2.5,
    RarityTier.LEGENDARY: 2.0,
    RarityTier.EPIC: 1.5,
    RarityTier.RARE: 1.25,
    RarityTier.UNCOMMON: 1.1,
    RarityTier.COMMON: 1.0,
}

TIER_BASE_INTENSITY: dict[RarityTier, float] = {
    RarityTier.ULTIMATE: 1.0,
    RarityTier.MYTHICAL: 0.85,
    RarityTier.LEGENDARY: 0.7,
    RarityTier.EPIC: 0.5,
    RarityTier.RARE: 0.35,
    RarityTier.UNCOMMON: 0.2,
    RarityTier.COMMON: 0.1,
}

NEW_CARD_INTENSITY_BONUS = 0.2
PITY_INTENSITY_BONUS = 0.3


class RevealTuning(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_delay_ms: int = Field(default=500, ge=0)
    stagger_ms: int = Field(default=150, ge=0)
    jitter_ms: int = Field(default=120, ge=0)
    """Upper bound of the random anticipation delay added to every reveal"""
    anticipation_ms: int = Field(default=400, ge=0)
    pity_anticipation_ms: int = Field(default=600, ge=0)


class DrawnCard(NamedTuple):
    card: CardRef
    tier: RarityTier
    is_new: bool
    is_pity: bool
    pity_count_at_draw: int


def effect_intensity(tier: RarityTier, *, is_new: bool, is_pity: bool) -> float:
    intensity = TIER_BASE_INTENSITY[tier]
    if is_new:
        intensity += NEW_CARD_INTENSITY_BONUS
    if is_pity:
        intensity += PITY_INTENSITY_BONUS
    return min(max(intensity, 0.0), 1.0)


class RollOutcomeAssembler:
    def __init__(
        self, tuning: RevealTuning | None = None, rng: random.Random | None = None
    ) -> None:
        self.tuning = tuning or RevealTuning()
        self.rng = rng or random.Random()

    def reveal_delay_ms(self, tier: RarityTier, position: int) -> int:
        jitter = self.rng.uniform(0, self.tuning.jitter_ms)
        delay = (
            self.tuning.base_delay_ms * TIER_REVEAL_MULTIPLIERS[tier]
            + (position - 1) * self.tuning.stagger_ms
            + jitter
        )
        return round(delay)

    def timing(self, cards: Sequence[CardRollResult]) -> TimingData:
        """Summarise when the batch finishes revealing and how long to build suspense."""
        optimal_reveal_ms = max((card.reveal_delay_ms for card in cards), default=0)

        rarest = min((card.tier for card in cards), key=lambda tier: tier.rank, default=None)
        psychological_delay_ms = 0
        if rarest is not None:
            psychological_delay_ms = round(
                self.tuning.anticipation_ms * TIER_REVEAL_MULTIPLIERS[rarest]
            )
        if any(card.is_pity_result for card in cards):
            psychological_delay_ms += self.tuning.pity_anticipation_ms

        return TimingData(
            optimal_reveal_ms=optimal_reveal_ms,
            psychological_delay_ms=psychological_delay_ms,
            total_duration_ms=optimal_reveal_ms + psychological_delay_ms,
        )

    def assemble(self, draws: Sequence[DrawnCard], cost: RollCost) -> RollResult:
        cards = tuple(
            CardRollResult(
                card=draw.card,
                tier=draw.tier,
                is_new=draw.is_new,
                is_pity_result=draw.is_pity,
                pity_count_at_draw=draw.pity_count_at_draw,
                roll_position=position,
                reveal_delay_ms=self.reveal_delay_ms(draw.tier, position),
                effect_intensity=effect_intensity(
                    draw.tier, is_new=draw.is_new, is_pity=draw.is_pity
                ),
            )
            for position, draw in enumerate(draws, start=1)
        )

        pity_used: list[RarityTier] = []
        for card in cards:
            if card.is_pity_result and card.tier not in pity_used:
                pity_used.append(card.tier)

        return RollResult(
            cards=cards,
            total_cards=len(cards),
            pity_used=tuple(pity_used),
            guarantee_used=bool(pity_used),
            roll_cost=cost,
            timing_data=self.timing(cards),
        )
