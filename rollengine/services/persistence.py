import asyncio
import concurrent.futures
from collections import defaultdict
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from rollengine.core.enums import Currency, EventType, RarityTier
from rollengine.engine.ledger import PityLedger
from rollengine.engine.ports import PlayerProfile
from rollengine.models.card import Card
from rollengine.models.event_log import EventLog
from rollengine.models.owned_card import OwnedCard
from rollengine.models.pity_counter import PityCounter
from rollengine.models.player import Player
from rollengine.models.wallet import Wallet
from rollengine.schemas.roll import CardRef


class ProfileRepository:
    """Reads and writes the durable copy of player profiles."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def load_profiles(self) -> list[PlayerProfile]:
        players = (await self.db.exec(select(Player))).all()

        balances: dict[int, dict[Currency, int]] = defaultdict(dict)
        for wallet in (await self.db.exec(select(Wallet))).all():
            balances[wallet.player_id][wallet.currency] = wallet.amount

        counters: dict[int, dict[RarityTier, int]] = defaultdict(dict)
        for counter in (await self.db.exec(select(PityCounter))).all():
            counters[counter.player_id][counter.tier] = counter.pity_count

        owned: dict[int, set[int]] = defaultdict(set)
        for owned_card in (await self.db.exec(select(OwnedCard))).all():
            owned[owned_card.player_id].add(owned_card.card_id)

        return [
            PlayerProfile(
                player_id=player.id,
                name=player.name,
                balances=balances[player.id],
                pity_ledger=PityLedger(counters[player.id]),
                owned_card_ids=owned[player.id],
            )
            for player in players
        ]

    async def load_catalog(self) -> list[CardRef]:
        cards = (await self.db.exec(select(Card))).all()
        return [CardRef(card_id=card.id, name=card.name, tier=card.rarity) for card in cards]

    async def seed_catalog(self, cards: list[CardRef]) -> None:
        for card in cards:
            self.db.add(Card(id=card.card_id, name=card.name, rarity=card.tier))
        await self.db.commit()
        logger.info(f"Seeded catalog with {len(cards)} cards")

    async def save_profile(self, profile: PlayerProfile) -> None:
        """Upsert every durable part of a profile and commit."""
        player_id = profile.player_id

        player = await self.db.get(Player, player_id)
        if player is None:
            self.db.add(Player(id=player_id, name=profile.name))

        wallets = {
            wallet.currency: wallet
            for wallet in (
                await self.db.exec(select(Wallet).where(Wallet.player_id == player_id))
            ).all()
        }
        for currency, amount in profile.balances.items():
            wallet = wallets.get(currency)
            if wallet is None:
                wallet = Wallet(player_id=player_id, currency=currency, amount=amount)
            else:
                wallet.amount = amount
            self.db.add(wallet)

        counters = {
            counter.tier: counter
            for counter in (
                await self.db.exec(select(PityCounter).where(PityCounter.player_id == player_id))
            ).all()
        }
        snapshot = profile.pity_ledger.snapshot()
        for tier in RarityTier:
            counter = counters.get(tier)
            if counter is None:
                counter = PityCounter(player_id=player_id, tier=tier, pity_count=snapshot[tier])
            else:
                counter.pity_count = snapshot[tier]
            self.db.add(counter)

        owned_result = await self.db.exec(
            select(OwnedCard.card_id).where(OwnedCard.player_id == player_id)
        )
        already_saved = set(owned_result.all())
        for card_id in profile.owned_card_ids - already_saved:
            self.db.add(OwnedCard(player_id=player_id, card_id=card_id))

        await self.db.commit()

    async def log_event(
        self, player_id: int, event_type: EventType, context: dict[str, Any]
    ) -> None:
        self.db.add(EventLog(player_id=player_id, event_type=event_type, context=context))
        await self.db.commit()


class ProfileWriter:
    """Profile sink backed by the database.

    Calling it is fire-and-forget and safe from any thread; ``save`` is the awaitable
    form for request handlers. Either way writes run on ``loop`` one at a time, and a
    copy older than the last one written for that player is dropped, so a slow write
    can never roll a player back. Fire-and-forget failures are logged and never retried.
    """

    def __init__(self, engine: AsyncEngine, loop: asyncio.AbstractEventLoop) -> None:
        self.engine = engine
        self.loop = loop
        self._write_lock = asyncio.Lock()
        self._pending: set[concurrent.futures.Future[None]] = set()
        self._written_versions: dict[int, int] = {}

    def __call__(self, profile: PlayerProfile) -> None:
        future = asyncio.run_coroutine_threadsafe(self._write(profile), self.loop)
        self._pending.add(future)
        future.add_done_callback(self._on_done)

    def _on_done(self, future: concurrent.futures.Future[None]) -> None:
        self._pending.discard(future)
        if not future.cancelled() and (exc := future.exception()) is not None:
            logger.opt(exception=exc).error("Failed to persist player profile")

    async def _write(self, profile: PlayerProfile) -> None:
        player_id = profile.player_id
        async with self._write_lock:
            written = self._written_versions.get(player_id, -1)
            if profile.version <= written:
                logger.debug(
                    f"Skipped stale profile v{profile.version} for player {player_id}, "
                    f"v{written} already written"
                )
                return

            async with AsyncSession(self.engine, expire_on_commit=False) as session:
                await ProfileRepository(session).save_profile(profile)
            self._written_versions[player_id] = profile.version
        logger.debug(f"Persisted profile v{profile.version} for player {player_id}")

    async def save(self, profile: PlayerProfile) -> None:
        """Write a profile copy now, in line with pending writes. Errors propagate."""
        await self._write(profile)

    async def drain(self) -> None:
        """Wait for every submitted write to finish."""
        if self._pending:
            await asyncio.gather(
                *(asyncio.wrap_future(future) for future in list(self._pending)),
                return_exceptions=True,
            )
