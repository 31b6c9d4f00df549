import random
import threading
import time

from loguru import logger

from rollengine.core.config import Config
from rollengine.core.enums import RarityTier, ResolutionSource, ValidationFailure
from rollengine.engine.assembler import DrawnCard, RevealTuning, RollOutcomeAssembler
from rollengine.engine.economy import RollCostTable
from rollengine.engine.ledger import PityLedger, apply_roll
from rollengine.engine.pity_config import PityConfigTable, load_pity_config_table
from rollengine.engine.ports import CardCatalog, ProfileStore
from rollengine.engine.resolver import current_rate, find_hard_pity, resolve_rarity
from rollengine.engine.selector import CardSelector, CatalogExhaustedError
from rollengine.engine.statistics import RollStatisticsTracker
from rollengine.engine.validator import RollRequestValidator, RollValidationError
from rollengine.schemas.roll import (
    PityStatusResponse,
    RollRequest,
    RollResponse,
    RollStatistics,
    TierPityStatus,
)


class PlayerLocks:
    """One lock per player so concurrent rolls never interleave on the same ledger."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def get(self, player_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(player_id, threading.Lock())


class RollEngine:
    def __init__(  # noqa: PLR0913
        self,
        config_table: PityConfigTable,
        store: ProfileStore,
        catalog: CardCatalog,
        *,
        cost_table: RollCostTable | None = None,
        rng: random.Random | None = None,
        cooldown_seconds: float = 1.0,
        reveal_tuning: RevealTuning | None = None,
        statistics: RollStatisticsTracker | None = None,
    ) -> None:
        self.config_table = config_table
        self.store = store
        self.cost_table = cost_table or RollCostTable()
        self.rng = rng or random.Random()

        self.validator = RollRequestValidator(
            store, self.cost_table, cooldown_seconds=cooldown_seconds
        )
        self.selector = CardSelector(catalog)
        self.assembler = RollOutcomeAssembler(reveal_tuning, self.rng)
        self.statistics = statistics or RollStatisticsTracker()
        self.player_locks = PlayerLocks()

        commonest = RarityTier.commonest()
        if catalog.get_random_card(commonest) is None:
            msg = f"Catalog has no {commonest} cards to substitute for missing tiers"
            raise CatalogExhaustedError(msg)

    @classmethod
    def from_config(
        cls, config: Config, store: ProfileStore, catalog: CardCatalog
    ) -> "RollEngine":
        return cls(
            load_pity_config_table(config.pity_config_path),
            store,
            catalog,
            rng=random.Random(config.rng_seed),
            cooldown_seconds=config.cooldown_seconds,
            reveal_tuning=RevealTuning(
                base_delay_ms=config.reveal_base_delay_ms,
                stagger_ms=config.reveal_stagger_ms,
                jitter_ms=config.reveal_jitter_ms,
                anticipation_ms=config.anticipation_ms,
                pity_anticipation_ms=config.pity_anticipation_ms,
            ),
            statistics=RollStatisticsTracker(
                new_card_bonus=config.new_card_bonus, pity_card_bonus=config.pity_card_bonus
            ),
        )

    def roll_cards(self, request: RollRequest) -> RollResponse:
        """Validate, resolve and assemble one roll request.

        The whole pipeline runs under the player's lock with no suspension point, so
        the ledger a roll reads is the ledger it writes. Every card is resolved and
        selected against a scratch ledger before the player is charged: a roll either
        commits in full or changes nothing.
        """
        started = time.perf_counter()

        # Profiles are never removed, so a player unknown here gets no lock
        if self.store.get_profile(request.player_id) is None:
            error = RollValidationError(ValidationFailure.NO_PROFILE, f"player {request.player_id}")
            return self._reject(request, error, started)

        with self.player_locks.get(request.player_id):
            try:
                profile, cost = self.validator.validate(request)
            except RollValidationError as e:
                return self._reject(request, e, started)

            ledger = PityLedger(profile.pity_ledger.snapshot())
            owned_card_ids = set(profile.owned_card_ids)

            draws: list[DrawnCard] = []
            for _ in range(request.count):
                snapshot = ledger.snapshot()
                # Hard pity never consumes a random draw
                hard_pity_tier = find_hard_pity(snapshot, self.config_table)
                draw = self.rng.random() if hard_pity_tier is None else 0.0
                resolution = resolve_rarity(snapshot, self.config_table, draw)
                pity_count_at_draw = ledger[resolution.tier]
                apply_roll(
                    ledger,
                    resolution.tier,
                    reset=resolution.source is not ResolutionSource.FALLBACK,
                )

                card = self.selector.select(resolution.tier)
                is_new = card.card_id not in owned_card_ids
                owned_card_ids.add(card.card_id)

                draws.append(
                    DrawnCard(
                        card=card,
                        tier=resolution.tier,
                        is_new=is_new,
                        is_pity=resolution.guaranteed,
                        pity_count_at_draw=pity_count_at_draw,
                    )
                )

            self.store.deduct(request.player_id, cost.currency, cost.amount)
            for draw in draws:
                self.store.add_card(request.player_id, draw.card.card_id)
            self.store.persist_pity_ledger(request.player_id, ledger)

            result = self.assembler.assemble(draws, cost)
            self.statistics.record(request.player_id, result, request.timestamp)

        tiers = ", ".join(card.tier for card in result.cards)
        logger.info(f"Player {request.player_id} rolled {result.total_cards} card(s): {tiers}")
        return RollResponse(
            success=True, data=result, processing_time_ms=(time.perf_counter() - started) * 1000
        )

    def _reject(
        self, request: RollRequest, error: RollValidationError, started: float
    ) -> RollResponse:
        logger.info(f"Rejected roll for player {request.player_id}: {error}")
        return RollResponse(
            success=False,
            error_message=str(error),
            failure=error.reason,
            processing_time_ms=(time.perf_counter() - started) * 1000,
        )

    def get_statistics(self, player_id: int) -> RollStatistics:
        return self.statistics.get(player_id)

    def get_pity_status(self, player_id: int) -> PityStatusResponse | None:
        profile = self.store.get_profile(player_id)
        if profile is None:
            return None

        with self.player_locks.get(player_id):
            snapshot = profile.pity_ledger.snapshot()

        tiers = []
        for tier, config in self.config_table.items():
            tiers.append(
                TierPityStatus(
                    tier=tier,
                    pity_count=snapshot[tier],
                    current_rate=current_rate(config, snapshot[tier]),
                    soft_pity_start=config.soft_pity_start,
                    hard_pity_limit=config.hard_pity_limit,
                )
            )
        return PityStatusResponse(player_id=player_id, tiers=tiers)
