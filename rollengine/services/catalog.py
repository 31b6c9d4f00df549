import random
from collections import defaultdict
from collections.abc import Iterable
from pathlib import Path

from loguru import logger
from pydantic import TypeAdapter

from rollengine.core.enums import RarityTier
from rollengine.schemas.roll import CardRef


class InMemoryCardCatalog:
    """Read-only card catalog grouped by tier."""

    def __init__(self, cards: Iterable[CardRef], rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self._by_tier: dict[RarityTier, list[CardRef]] = defaultdict(list)
        for card in cards:
            self._by_tier[card.tier].append(card)

    def __len__(self) -> int:
        return sum(len(cards) for cards in self._by_tier.values())

    def cards_in(self, tier: RarityTier) -> list[CardRef]:
        return list(self._by_tier.get(tier, []))

    def get_random_card(self, tier: RarityTier) -> CardRef | None:
        cards = self._by_tier.get(tier)
        if not cards:
            return None
        return self.rng.choice(cards)


_cards_adapter = TypeAdapter(list[CardRef])


def load_catalog_file(path: str | Path) -> list[CardRef]:
    """Read ``[{"card_id": 1, "name": "...", "tier": "COMMON"}, ...]`` from a JSON file."""
    cards = _cards_adapter.validate_json(Path(path).read_bytes())
    logger.info(f"Read {len(cards)} cards from {path}")
    return cards
