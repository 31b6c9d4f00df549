import pytest

from rollengine.core.enums import RarityTier
from rollengine.engine.ledger import PityLedger, apply_roll


def test_new_ledger_is_zeroed():
    ledger = PityLedger()
    assert all(ledger[tier] == 0 for tier in RarityTier)


def test_negative_counters_are_rejected():
    with pytest.raises(ValueError, match="negative"):
        PityLedger({RarityTier.EPIC: -1})


def test_snapshot_is_detached_and_read_only():
    ledger = PityLedger({RarityTier.RARE: 4})
    snapshot = ledger.snapshot()

    ledger.increment(RarityTier.RARE)

    assert snapshot[RarityTier.RARE] == 4
    with pytest.raises(TypeError):
        snapshot[RarityTier.RARE] = 0  # type: ignore[index]


def test_winning_epic_cascades_down_and_leaves_rarer_tiers():
    ledger = PityLedger(
        {
            RarityTier.COMMON: 5,
            RarityTier.UNCOMMON: 3,
            RarityTier.RARE: 10,
            RarityTier.EPIC: 2,
            RarityTier.LEGENDARY: 40,
            RarityTier.MYTHICAL: 0,
            RarityTier.ULTIMATE: 0,
        }
    )

    apply_roll(ledger, RarityTier.EPIC, reset=True)

    assert ledger == {
        RarityTier.COMMON: 0,
        RarityTier.UNCOMMON: 0,
        RarityTier.RARE: 0,
        RarityTier.EPIC: 0,
        RarityTier.LEGENDARY: 40,
        RarityTier.MYTHICAL: 0,
        RarityTier.ULTIMATE: 0,
    }


@pytest.mark.parametrize("won", list(RarityTier))
def test_cascading_reset_for_every_tier(won):
    before = {tier: 7 for tier in RarityTier}
    ledger = PityLedger(before)

    apply_roll(ledger, won, reset=True)

    for tier in RarityTier:
        if tier.is_rarer_than(won):
            assert ledger[tier] == before[tier]
        else:
            assert ledger[tier] == 0


def test_fallback_increments_every_other_tier():
    ledger = PityLedger({RarityTier.COMMON: 2, RarityTier.LEGENDARY: 49})

    result = apply_roll(ledger, RarityTier.COMMON, reset=False)

    assert result is ledger
    assert ledger[RarityTier.COMMON] == 2
    assert ledger[RarityTier.LEGENDARY] == 50
    for tier in RarityTier.rarest_first()[:-1]:
        if tier is not RarityTier.LEGENDARY:
            assert ledger[tier] == 1
