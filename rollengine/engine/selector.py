from loguru import logger

from rollengine.core.enums import RarityTier
from rollengine.engine.ports import CardCatalog
from rollengine.schemas.roll import CardRef


class CatalogExhaustedError(Exception):
    """The catalog has no cards even for the commonest tier."""


class CardSelector:
    def __init__(self, catalog: CardCatalog) -> None:
        self.catalog = catalog

    def select(self, tier: RarityTier) -> CardRef:
        """Pick a card for a resolved tier, substituting the commonest tier on a miss."""
        card = self.catalog.get_random_card(tier)
        if card is not None:
            return card

        commonest = RarityTier.commonest()
        logger.warning(f"Catalog has no {tier} cards, substituting a {commonest} card")
        card = self.catalog.get_random_card(commonest)
        if card is None:
            msg = f"Catalog has no {commonest} cards to fall back on"
            raise CatalogExhaustedError(msg)
        return card
