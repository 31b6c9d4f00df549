import sqlmodel

from rollengine.core.enums import RarityTier

from ._base import BaseModel


class Card(BaseModel, table=True):
    __tablename__: str = "cards"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    name: str = sqlmodel.Field(max_length=100, index=True)
    rarity: RarityTier = sqlmodel.Field(index=True)

    def __str__(self) -> str:
        return f"{self.name} (#{self.id})"
