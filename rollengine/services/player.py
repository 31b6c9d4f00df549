from typing import Annotated

from fastapi import Depends, HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from rollengine.core.db import get_db
from rollengine.core.enums import Currency, EventType
from rollengine.core.state import get_profile_store, get_profile_writer
from rollengine.engine.ports import PlayerProfile
from rollengine.schemas.player import PlayerCreate, PlayerSummary
from rollengine.services.persistence import ProfileRepository, ProfileWriter
from rollengine.services.profile_store import InMemoryProfileStore


def to_summary(profile: PlayerProfile) -> PlayerSummary:
    return PlayerSummary(
        id=profile.player_id,
        name=profile.name,
        balances=dict(profile.balances),
        owned_cards=len(profile.owned_card_ids),
    )


class PlayerService:
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db)],
        store: Annotated[InMemoryProfileStore, Depends(get_profile_store)],
        writer: Annotated[ProfileWriter, Depends(get_profile_writer)],
    ) -> None:
        self.db = db
        self.store = store
        self.writer = writer
        self.repository = ProfileRepository(db)

    def get_player(self, player_id: int) -> PlayerSummary | None:
        profile = self.store.get_profile(player_id)
        return to_summary(profile) if profile else None

    async def create_player(self, player: PlayerCreate) -> PlayerSummary:
        try:
            profile = self.store.create_profile(
                player.id, name=player.name, balances=player.balances
            )
        except ValueError as e:
            raise HTTPException(status_code=409, detail="Player already exists") from e

        await self.writer.save(self.store.snapshot(player.id))
        await self.repository.log_event(
            player.id,
            EventType.PLAYER_CREATED,
            {"balances": {currency.value: amount for currency, amount in player.balances.items()}},
        )
        return to_summary(profile)

    async def increase_currency(
        self, player_id: int, currency: Currency, amount: int, reason: str
    ) -> PlayerSummary:
        """Grant a player currency and log the event."""
        profile = self.store.get_profile(player_id)
        if not profile:
            raise HTTPException(status_code=404, detail="Player not found")

        self.store.credit(player_id, currency, amount)
        await self.writer.save(self.store.snapshot(player_id))
        await self.repository.log_event(
            player_id,
            EventType.INCREASE_CURRENCY,
            {"currency": currency.value, "amount": amount, "reason": reason},
        )
        return to_summary(profile)
