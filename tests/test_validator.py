import datetime

import pytest

from rollengine.core.enums import Currency, RollType, ValidationFailure
from rollengine.engine.economy import DEFAULT_COST_ENTRIES, RollCostTable
from rollengine.engine.validator import RollRequestValidator, RollValidationError
from rollengine.schemas.roll import RollRequest
from tests.conftest import PLAYER_ID, T0


def request_at(seconds: float, **overrides) -> RollRequest:
    fields = {"player_id": PLAYER_ID, "roll_type": RollType.PREMIUM, "count": 1}
    fields.update(overrides)
    return RollRequest(timestamp=T0 + datetime.timedelta(seconds=seconds), **fields)


@pytest.fixture
def validator(store):
    return RollRequestValidator(store, RollCostTable(), cooldown_seconds=1.0)


def failure_of(validator: RollRequestValidator, request: RollRequest) -> ValidationFailure:
    with pytest.raises(RollValidationError) as excinfo:
        validator.validate(request)
    return excinfo.value.reason


def test_valid_request_returns_profile_and_cost(validator):
    profile, cost = validator.validate(request_at(0, count=10))

    assert profile.player_id == PLAYER_ID
    assert (cost.currency, cost.amount) == (Currency.GEMS, 1440)


def test_unknown_player(validator):
    assert failure_of(validator, request_at(0, player_id=999)) is ValidationFailure.NO_PROFILE


def test_roll_type_without_cost_entry(store):
    premium_only = RollCostTable(
        entries={RollType.PREMIUM: DEFAULT_COST_ENTRIES[RollType.PREMIUM]}
    )
    validator = RollRequestValidator(store, premium_only)

    failure = failure_of(validator, request_at(0, roll_type=RollType.EVENT))

    assert failure is ValidationFailure.UNKNOWN_ROLL_TYPE


@pytest.mark.parametrize(
    ("roll_type", "count"), [(RollType.PREMIUM, 0), (RollType.PREMIUM, 11), (RollType.DAILY, 2)]
)
def test_count_out_of_range(validator, roll_type, count):
    failure = failure_of(validator, request_at(0, roll_type=roll_type, count=count))
    assert failure is ValidationFailure.INVALID_COUNT


def test_insufficient_funds(validator, store):
    store.get_profile(PLAYER_ID).balances[Currency.GEMS] = 100

    with pytest.raises(RollValidationError, match="Insufficient funds") as excinfo:
        validator.validate(request_at(0))

    assert excinfo.value.reason is ValidationFailure.INSUFFICIENT_FUNDS


def test_second_roll_within_cooldown_is_rate_limited(validator):
    validator.validate(request_at(0))

    assert failure_of(validator, request_at(0.5)) is ValidationFailure.RATE_LIMITED
    # The rejected attempt does not push the window forward
    validator.validate(request_at(1.0))


def test_failed_validation_does_not_start_cooldown(validator, store):
    store.get_profile(PLAYER_ID).balances[Currency.GEMS] = 0
    failure_of(validator, request_at(0))

    store.get_profile(PLAYER_ID).balances[Currency.GEMS] = 1000
    validator.validate(request_at(0.1))


def test_cooldown_is_per_player(validator, store):
    store.create_profile(7, balances={Currency.GEMS: 1000})

    validator.validate(request_at(0))
    validator.validate(request_at(0.1, player_id=7))
