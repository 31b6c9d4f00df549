import random

import pytest

from rollengine.core.enums import Currency, RarityTier
from rollengine.engine.assembler import (
    DrawnCard,
    RevealTuning,
    RollOutcomeAssembler,
    effect_intensity,
)
from rollengine.schemas.roll import CardRef, RollCost

COST = RollCost(currency=Currency.GEMS, amount=160, original_amount=160)


def drawn(tier: RarityTier, *, is_new: bool = False, is_pity: bool = False) -> DrawnCard:
    card = CardRef(card_id=tier.rank + 1, name=tier.title(), tier=tier)
    return DrawnCard(card=card, tier=tier, is_new=is_new, is_pity=is_pity, pity_count_at_draw=0)


@pytest.mark.parametrize(
    ("tier", "is_new", "is_pity", "expected"),
    [
        (RarityTier.COMMON, False, False, 0.1),
        (RarityTier.COMMON, True, False, 0.3),
        (RarityTier.EPIC, False, True, 0.8),
        (RarityTier.LEGENDARY, True, True, 1.0),
        (RarityTier.ULTIMATE, True, False, 1.0),
    ],
)
def test_effect_intensity(tier, is_new, is_pity, expected):
    assert effect_intensity(tier, is_new=is_new, is_pity=is_pity) == pytest.approx(expected)


def test_reveal_delay_scales_with_tier_and_position():
    assembler = RollOutcomeAssembler(RevealTuning(jitter_ms=0))

    assert assembler.reveal_delay_ms(RarityTier.COMMON, 1) == 500
    assert assembler.reveal_delay_ms(RarityTier.EPIC, 3) == 1050
    assert assembler.reveal_delay_ms(RarityTier.ULTIMATE, 1) == 1500


def test_jitter_stays_within_bounds():
    assembler = RollOutcomeAssembler(RevealTuning(jitter_ms=120), random.Random(3))

    delays = [assembler.reveal_delay_ms(RarityTier.COMMON, 1) for _ in range(200)]

    assert all(500 <= delay <= 620 for delay in delays)
    assert len(set(delays)) > 1


def test_assemble_packages_cards_and_timing():
    assembler = RollOutcomeAssembler(RevealTuning(jitter_ms=0))
    draws = [
        drawn(RarityTier.COMMON, is_new=True),
        drawn(RarityTier.EPIC, is_pity=True),
        drawn(RarityTier.RARE, is_pity=True),
        drawn(RarityTier.EPIC, is_pity=True),
    ]

    result = assembler.assemble(draws, COST)

    assert result.total_cards == 4
    assert [card.roll_position for card in result.cards] == [1, 2, 3, 4]
    assert result.pity_used == (RarityTier.EPIC, RarityTier.RARE)
    assert result.guarantee_used
    assert result.roll_cost == COST

    # Last epic: 500 * 1.5 + 3 * 150
    assert result.timing_data.optimal_reveal_ms == 1200
    # Rarest tier is epic: 400 * 1.5, plus the pity pause
    assert result.timing_data.psychological_delay_ms == 1200
    assert result.timing_data.total_duration_ms == 2400


def test_assemble_without_pity():
    assembler = RollOutcomeAssembler(RevealTuning(jitter_ms=0))

    result = assembler.assemble([drawn(RarityTier.COMMON)], COST)

    assert result.pity_used == ()
    assert not result.guarantee_used
    assert result.timing_data.psychological_delay_ms == 400
