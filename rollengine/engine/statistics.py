import datetime

from rollengine.schemas.roll import RollResult, RollStatistics


class RollStatisticsTracker:
    """Rolling per-player analytics. Nothing in roll resolution reads these."""

    def __init__(self, *, new_card_bonus: float = 0.01, pity_card_bonus: float = 0.02) -> None:
        self.new_card_bonus = new_card_bonus
        self.pity_card_bonus = pity_card_bonus
        self._stats: dict[int, RollStatistics] = {}

    def get(self, player_id: int) -> RollStatistics:
        return self._stats.get(player_id, RollStatistics()).model_copy(deep=True)

    def record(
        self, player_id: int, result: RollResult, timestamp: datetime.datetime
    ) -> RollStatistics:
        stats = self._stats.setdefault(player_id, RollStatistics())

        stats.total_rolls += 1
        stats.total_cards += result.total_cards
        for card in result.cards:
            stats.tier_histogram[card.tier] += 1

        # Simple blend toward 0 or 1, kept as is since it shapes long-run behaviour
        used_pity = 1.0 if result.guarantee_used else 0.0
        stats.pity_usage_rate = (stats.pity_usage_rate + used_pity) / 2

        new_cards = sum(card.is_new for card in result.cards)
        pity_cards = sum(card.is_pity_result for card in result.cards)
        bonus = new_cards * self.new_card_bonus + pity_cards * self.pity_card_bonus
        stats.engagement_score = min(1.0, stats.engagement_score + max(0.0, bonus))

        stats.last_roll_at = timestamp
        return stats.model_copy(deep=True)
