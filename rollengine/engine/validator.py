import datetime
from typing import NamedTuple

from loguru import logger

from rollengine.core.enums import ValidationFailure
from rollengine.engine.economy import RollCostTable
from rollengine.engine.ports import PlayerProfile, ProfileStore
from rollengine.schemas.roll import RollCost, RollRequest
from rollengine.utils.misc import seconds_between

FAILURE_MESSAGES: dict[ValidationFailure, str] = {
    ValidationFailure.NO_PROFILE: "Player profile not found",
    ValidationFailure.UNKNOWN_ROLL_TYPE: "Unknown roll type",
    ValidationFailure.INVALID_COUNT: "Invalid card count",
    ValidationFailure.INSUFFICIENT_FUNDS: "Insufficient funds",
    ValidationFailure.RATE_LIMITED: "Rolling too fast, please wait",
}


class RollValidationError(Exception):
    def __init__(self, reason: ValidationFailure, detail: str | None = None) -> None:
        self.reason = reason
        self.detail = detail
        message = FAILURE_MESSAGES[reason]
        super().__init__(f"{message}: {detail}" if detail else message)


class ValidatedRoll(NamedTuple):
    profile: PlayerProfile
    cost: RollCost


class RollRequestValidator:
    def __init__(
        self, store: ProfileStore, cost_table: RollCostTable, *, cooldown_seconds: float = 1.0
    ) -> None:
        self.store = store
        self.cost_table = cost_table
        self.cooldown_seconds = cooldown_seconds
        self._last_roll_at: dict[int, datetime.datetime] = {}

    def validate(self, request: RollRequest) -> ValidatedRoll:
        """Check a request before anything is resolved.

        Nothing is mutated on failure. On success the request timestamp is recorded for
        rate limiting, whether or not the roll goes on to succeed.

        Returns:
            The player's profile and the cost the request will be charged.

        Raises:
            RollValidationError: If any check fails.
        """
        profile = self.store.get_profile(request.player_id)
        if profile is None:
            raise RollValidationError(ValidationFailure.NO_PROFILE, f"player {request.player_id}")

        entry = self.cost_table.get_entry(request.roll_type)
        if entry is None:
            raise RollValidationError(ValidationFailure.UNKNOWN_ROLL_TYPE, str(request.roll_type))

        if not 1 <= request.count <= entry.max_count:
            raise RollValidationError(
                ValidationFailure.INVALID_COUNT,
                f"{request.roll_type} rolls take 1 to {entry.max_count} cards, got {request.count}",
            )

        cost = self.cost_table.get_roll_cost(request.roll_type, request.count)
        balance = profile.balance(cost.currency)
        if balance < cost.amount:
            raise RollValidationError(
                ValidationFailure.INSUFFICIENT_FUNDS,
                f"have {balance} {cost.currency}, need {cost.amount}",
            )

        last_roll_at = self._last_roll_at.get(request.player_id)
        if last_roll_at is not None:
            elapsed = seconds_between(last_roll_at, request.timestamp)
            if elapsed < self.cooldown_seconds:
                raise RollValidationError(
                    ValidationFailure.RATE_LIMITED,
                    f"{self.cooldown_seconds - elapsed:.2f}s remaining",
                )

        self._last_roll_at[request.player_id] = request.timestamp
        logger.debug(
            f"Validated roll for player {request.player_id}: {cost.amount} {cost.currency}"
        )
        return ValidatedRoll(profile, cost)
