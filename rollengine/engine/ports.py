"""Collaborators the roll engine depends on but does not own."""

from dataclasses import dataclass, field
from typing import Protocol

from rollengine.core.enums import Currency, RarityTier
from rollengine.engine.ledger import PityLedger
from rollengine.schemas.roll import CardRef


@dataclass
class PlayerProfile:
    player_id: int
    name: str | None = None
    balances: dict[Currency, int] = field(default_factory=dict)
    pity_ledger: PityLedger = field(default_factory=PityLedger)
    owned_card_ids: set[int] = field(default_factory=set)
    version: int = 0
    """Bumped each time a copy is handed to durable storage"""

    def balance(self, currency: Currency) -> int:
        return self.balances.get(currency, 0)


class ProfileStore(Protocol):
    def get_profile(self, player_id: int) -> PlayerProfile | None: ...

    def deduct(self, player_id: int, currency: Currency, amount: int) -> None: ...

    def add_card(self, player_id: int, card_id: int) -> None: ...

    def persist_pity_ledger(self, player_id: int, ledger: PityLedger) -> None:
        """Hand the ledger to durable storage. Must not block on the write."""
        ...


class CardCatalog(Protocol):
    def get_random_card(self, tier: RarityTier) -> CardRef | None:
        """A uniformly random card of ``tier``, or None if the tier has no cards."""
        ...
