import json
from collections.abc import Iterable, Mapping
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from rollengine.core.enums import RarityTier


class PityConfig(BaseModel):
    """Static pity settings for one rarity tier."""

    model_config = ConfigDict(frozen=True)

    soft_pity_start: int = Field(ge=0)
    """Counter value from which the rate starts ramping up"""
    hard_pity_limit: int = Field(default=0, ge=0)
    """Counter value that guarantees the tier; 0 disables hard pity"""
    soft_pity_increase: float = Field(default=0.0, ge=0.0)
    base_rate: float = Field(ge=0.0, le=1.0)
    max_rate: float = Field(ge=0.0, le=1.0)


DEFAULT_PITY_CONFIGS: dict[RarityTier, PityConfig] = {
    RarityTier.ULTIMATE: PityConfig(
        soft_pity_start=200,
        hard_pity_limit=400,
        soft_pity_increase=0.001,
        base_rate=0.0003,
        max_rate=0.02,
    ),
    RarityTier.MYTHICAL: PityConfig(
        soft_pity_start=120,
        hard_pity_limit=240,
        soft_pity_increase=0.003,
        base_rate=0.001,
        max_rate=0.06,
    ),
    RarityTier.LEGENDARY: PityConfig(
        soft_pity_start=25,
        hard_pity_limit=50,
        soft_pity_increase=0.06,
        base_rate=0.006,
        max_rate=0.32,
    ),
    RarityTier.EPIC: PityConfig(
        soft_pity_start=12,
        hard_pity_limit=20,
        soft_pity_increase=0.05,
        base_rate=0.03,
        max_rate=0.4,
    ),
    RarityTier.RARE: PityConfig(
        soft_pity_start=6,
        hard_pity_limit=10,
        soft_pity_increase=0.05,
        base_rate=0.1,
        max_rate=0.45,
    ),
    RarityTier.UNCOMMON: PityConfig(
        soft_pity_start=3, soft_pity_increase=0.05, base_rate=0.25, max_rate=0.45
    ),
    # Common is what's left after every rarer tier misses
    RarityTier.COMMON: PityConfig(soft_pity_start=0, base_rate=0.6127, max_rate=0.6127),
}

DEFAULT_DRAW_ORDER: tuple[RarityTier, ...] = tuple(RarityTier.rarest_first()[:-1])


class PityConfigTable:
    """Read-only per-tier pity configuration, shared by every request."""

    def __init__(
        self,
        configs: Mapping[RarityTier, PityConfig],
        draw_order: Iterable[RarityTier] | None = None,
    ) -> None:
        missing = [tier for tier in RarityTier if tier not in configs]
        if missing:
            msg = f"Pity config is missing tiers: {', '.join(missing)}"
            raise ValueError(msg)

        self._configs = {tier: configs[tier] for tier in RarityTier}
        order = DEFAULT_DRAW_ORDER if draw_order is None else tuple(draw_order)
        # The weighted draw always walks rarest to commonest
        self._draw_order = tuple(sorted(set(order), key=lambda tier: tier.rank))

    def __getitem__(self, tier: RarityTier) -> PityConfig:
        return self._configs[tier]

    def items(self) -> list[tuple[RarityTier, PityConfig]]:
        return list(self._configs.items())

    @property
    def draw_order(self) -> tuple[RarityTier, ...]:
        return self._draw_order

    def validate(self) -> list[str]:
        """Check the soft/hard pity invariant, logging every violation.

        Violations are reported but never fatal.
        """
        problems: list[str] = []
        for tier, config in self._configs.items():
            if config.hard_pity_limit > 0 and config.hard_pity_limit <= config.soft_pity_start:
                problems.append(
                    f"{tier}: hard_pity_limit ({config.hard_pity_limit}) must be greater than "
                    f"soft_pity_start ({config.soft_pity_start})"
                )
            if config.max_rate < config.base_rate:
                problems.append(
                    f"{tier}: max_rate ({config.max_rate}) is below base_rate ({config.base_rate})"
                )

        for problem in problems:
            logger.error(f"Invalid pity config: {problem}")
        return problems


_configs_adapter = TypeAdapter(dict[RarityTier, PityConfig])


def load_pity_config_table(path: str | Path | None = None) -> PityConfigTable:
    """Build the pity table from the defaults, overlaid with an optional JSON file.

    The file holds ``{"tiers": {"LEGENDARY": {...}}, "draw_order": [...]}``; both keys
    are optional and tiers not listed keep their defaults.
    """
    configs = dict(DEFAULT_PITY_CONFIGS)
    draw_order: list[RarityTier] | None = None

    if path is not None:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        configs.update(_configs_adapter.validate_python(raw.get("tiers", {})))
        if "draw_order" in raw:
            draw_order = [RarityTier(tier) for tier in raw["draw_order"]]
        logger.info(f"Loaded pity config overrides from {path}")

    table = PityConfigTable(configs, draw_order)
    table.validate()
    return table
