import sqlmodel

from rollengine.core.enums import Currency

from ._base import BaseModel


class Wallet(BaseModel, table=True):
    """One balance per player and currency."""

    __tablename__: str = "wallets"
    __table_args__ = (
        sqlmodel.UniqueConstraint("player_id", "currency", name="uq_wallet_player_currency"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    player_id: int = sqlmodel.Field(
        foreign_key="players.id", index=True, sa_type=sqlmodel.BigInteger
    )
    currency: Currency
    amount: int = sqlmodel.Field(default=0, ge=0)
