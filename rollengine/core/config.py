from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    db_url: str = "sqlite+aiosqlite:///./rollengine.db"
    env: Literal["prod", "dev"] = "prod"

    # Pity
    pity_config_path: str | None = None
    """Optional JSON file overriding the built-in pity table"""
    rng_seed: int | None = None

    # Catalog
    catalog_path: str | None = None
    """JSON list of cards used to seed an empty catalog"""

    # Rate limiting
    cooldown_seconds: float = 1.0

    # Reveal timing
    reveal_base_delay_ms: int = 500
    reveal_stagger_ms: int = 150
    reveal_jitter_ms: int = 120
    anticipation_ms: int = 400
    pity_anticipation_ms: int = 600

    # Engagement
    new_card_bonus: float = 0.01
    pity_card_bonus: float = 0.02

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"


load_dotenv()
settings = Config()
