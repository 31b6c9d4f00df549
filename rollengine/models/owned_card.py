import sqlmodel

from ._base import BaseModel


class OwnedCard(BaseModel, table=True):
    __tablename__: str = "owned_cards"
    __table_args__ = (
        sqlmodel.UniqueConstraint("player_id", "card_id", name="uq_owned_card_player_card"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    player_id: int = sqlmodel.Field(
        foreign_key="players.id", index=True, sa_type=sqlmodel.BigInteger
    )
    card_id: int = sqlmodel.Field(foreign_key="cards.id", index=True)
