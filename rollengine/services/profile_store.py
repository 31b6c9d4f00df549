import copy
import threading
from collections.abc import Callable, Iterable

from loguru import logger

from rollengine.core.enums import Currency
from rollengine.engine.ledger import PityLedger
from rollengine.engine.ports import PlayerProfile

ProfileSink = Callable[[PlayerProfile], None]
"""Receives a detached copy of a profile whenever it should be made durable"""


class InMemoryProfileStore:
    """Profiles held in memory for the life of the process.

    Mutations take effect immediately. Durability is delegated to ``sink``, which is
    handed a versioned copy of the profile each time the pity ledger is persisted.
    Every mutation and copy happens under one lock, so a copy never sees half of an
    update.
    """

    def __init__(
        self, profiles: Iterable[PlayerProfile] = (), *, sink: ProfileSink | None = None
    ) -> None:
        self._profiles = {profile.player_id: profile for profile in profiles}
        self._guard = threading.Lock()
        self.sink = sink

    def __contains__(self, player_id: int) -> bool:
        return player_id in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def get_profile(self, player_id: int) -> PlayerProfile | None:
        return self._profiles.get(player_id)

    def create_profile(
        self,
        player_id: int,
        *,
        name: str | None = None,
        balances: dict[Currency, int] | None = None,
    ) -> PlayerProfile:
        with self._guard:
            if player_id in self._profiles:
                msg = f"Player {player_id} already has a profile"
                raise ValueError(msg)

            profile = PlayerProfile(player_id=player_id, name=name, balances=dict(balances or {}))
            self._profiles[player_id] = profile
        return profile

    def _require(self, player_id: int) -> PlayerProfile:
        profile = self._profiles.get(player_id)
        if profile is None:
            msg = f"Player {player_id} has no profile"
            raise KeyError(msg)
        return profile

    def credit(self, player_id: int, currency: Currency, amount: int) -> int:
        profile = self._require(player_id)
        with self._guard:
            profile.balances[currency] = profile.balance(currency) + amount
            return profile.balances[currency]

    def deduct(self, player_id: int, currency: Currency, amount: int) -> None:
        profile = self._require(player_id)
        with self._guard:
            balance = profile.balance(currency)
            if balance < amount:
                msg = f"Player {player_id} cannot pay {amount} {currency} with {balance}"
                raise ValueError(msg)
            profile.balances[currency] = balance - amount

    def add_card(self, player_id: int, card_id: int) -> None:
        profile = self._require(player_id)
        with self._guard:
            profile.owned_card_ids.add(card_id)

    def snapshot(self, player_id: int) -> PlayerProfile:
        """A detached copy of the profile carrying a fresh version.

        Copies taken later always carry a higher version, so durable storage can tell
        a stale copy from a newer one whatever order the writes land in.
        """
        profile = self._require(player_id)
        with self._guard:
            profile.version += 1
            return copy.deepcopy(profile)

    def persist_pity_ledger(self, player_id: int, ledger: PityLedger) -> None:
        profile = self._require(player_id)
        if profile.pity_ledger is not ledger:
            with self._guard:
                profile.pity_ledger = PityLedger(ledger.snapshot())

        if self.sink is None:
            return
        snapshot = self.snapshot(player_id)
        try:
            self.sink(snapshot)
        except Exception:
            # Durability belongs to the sink; a failed hand-off never fails the roll
            logger.exception(f"Failed to hand off profile {player_id} for persistence")
