import datetime
import json
import os
import random
import tempfile
from collections.abc import Iterable, Iterator
from pathlib import Path

import pytest

_TMP_DIR = Path(tempfile.mkdtemp(prefix="rollengine-tests-"))
_CATALOG_PATH = _TMP_DIR / "cards.json"
_CATALOG_PATH.write_text(
    json.dumps(
        [
            {"card_id": 1, "name": "Ashen Monarch", "tier": "ULTIMATE"},
            {"card_id": 2, "name": "Tidecaller", "tier": "MYTHICAL"},
            {"card_id": 3, "name": "Sunforged Knight", "tier": "LEGENDARY"},
            {"card_id": 4, "name": "Glass Wyvern", "tier": "EPIC"},
            {"card_id": 5, "name": "Lantern Thief", "tier": "RARE"},
            {"card_id": 6, "name": "Moss Golem", "tier": "UNCOMMON"},
            {"card_id": 7, "name": "Field Mouse", "tier": "COMMON"},
            {"card_id": 8, "name": "Village Guard", "tier": "COMMON"},
        ]
    ),
    encoding="utf-8",
)

# Must be set before rollengine.core.config is imported anywhere
os.environ.setdefault("DB_URL", f"sqlite+aiosqlite:///{_TMP_DIR / 'api.db'}")
os.environ.setdefault("CATALOG_PATH", str(_CATALOG_PATH))

from loguru import logger  # noqa: E402

from rollengine.core.enums import Currency, RarityTier  # noqa: E402
from rollengine.engine.pity_config import load_pity_config_table  # noqa: E402
from rollengine.engine.ports import PlayerProfile  # noqa: E402
from rollengine.engine.roll_engine import RollEngine  # noqa: E402
from rollengine.schemas.roll import CardRef  # noqa: E402
from rollengine.services.catalog import InMemoryCardCatalog  # noqa: E402
from rollengine.services.profile_store import InMemoryProfileStore  # noqa: E402

T0 = datetime.datetime(2026, 1, 1, 12, 0, 0, tzinfo=datetime.UTC)
PLAYER_ID = 42


class ScriptedRandom(random.Random):
    """Returns queued values from random(), then a draw that always falls back."""

    def __init__(self, draws: Iterable[float] = ()) -> None:
        super().__init__(0)
        self.draws = list(draws)

    def random(self) -> float:
        if self.draws:
            return self.draws.pop(0)
        return 0.999


@pytest.fixture
def pity_table():
    return load_pity_config_table()


@pytest.fixture
def cards() -> list[CardRef]:
    return [
        CardRef(card_id=index, name=f"{tier.title()} Card", tier=tier)
        for index, tier in enumerate(RarityTier, start=1)
    ]


@pytest.fixture
def catalog(cards: list[CardRef]) -> InMemoryCardCatalog:
    return InMemoryCardCatalog(cards, random.Random(7))


@pytest.fixture
def store() -> InMemoryProfileStore:
    return InMemoryProfileStore(
        [PlayerProfile(player_id=PLAYER_ID, balances={Currency.GEMS: 10_000, Currency.COINS: 500})]
    )


@pytest.fixture
def make_engine(pity_table, store, catalog):
    def factory(draws: Iterable[float] = (), **kwargs) -> RollEngine:
        kwargs.setdefault("catalog", catalog)
        return RollEngine(pity_table, store, rng=ScriptedRandom(draws), **kwargs)

    return factory


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]))
    yield messages
    logger.remove(handler_id)
