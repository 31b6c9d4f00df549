import sqlmodel

from rollengine.core.enums import RarityTier

from ._base import BaseModel


class PityCounter(BaseModel, table=True):
    """Durable copy of one pity ledger counter."""

    __tablename__: str = "pity_counters"
    __table_args__ = (
        sqlmodel.UniqueConstraint("player_id", "tier", name="uq_pity_counter_player_tier"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    player_id: int = sqlmodel.Field(
        foreign_key="players.id", index=True, sa_type=sqlmodel.BigInteger
    )
    tier: RarityTier
    pity_count: int = sqlmodel.Field(default=0, ge=0)
    """Rolls counted toward this tier's pity since it was last reset"""
