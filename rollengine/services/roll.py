import asyncio
from typing import Annotated

from fastapi import Depends, HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from rollengine.core.db import get_db
from rollengine.core.enums import EventType, RollType, ValidationFailure
from rollengine.core.state import get_roll_engine
from rollengine.engine.roll_engine import RollEngine
from rollengine.schemas.roll import (
    PityStatusResponse,
    RollCost,
    RollRequest,
    RollRequestBody,
    RollResponse,
    RollStatistics,
)
from rollengine.services.persistence import ProfileRepository

FAILURE_STATUS_CODES: dict[ValidationFailure, int] = {
    ValidationFailure.NO_PROFILE: 404,
    ValidationFailure.RATE_LIMITED: 429,
}


class RollService:
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db)],
        engine: Annotated[RollEngine, Depends(get_roll_engine)],
    ) -> None:
        self.db = db
        self.engine = engine

    async def roll_cards(self, body: RollRequestBody) -> RollResponse:
        """Run a roll through the engine and log it.

        Raises:
            HTTPException: If the request fails validation.
        """
        request = RollRequest(player_id=body.player_id, roll_type=body.roll_type, count=body.count)
        # The engine blocks on per-player locks, so it runs off the event loop
        response = await asyncio.to_thread(self.engine.roll_cards, request)

        if not response.success or response.data is None:
            status_code = 400
            if response.failure is not None:
                status_code = FAILURE_STATUS_CODES.get(response.failure, 400)
            raise HTTPException(status_code=status_code, detail=response.error_message)

        result = response.data
        await ProfileRepository(self.db).log_event(
            body.player_id,
            EventType.ROLL,
            {
                "roll_type": body.roll_type.value,
                "card_ids": [card.card.card_id for card in result.cards],
                "tiers": [card.tier.value for card in result.cards],
                "pity_used": [tier.value for tier in result.pity_used],
                "cost": result.roll_cost.model_dump(mode="json"),
            },
        )
        return response

    def get_pity(self, player_id: int) -> PityStatusResponse:
        status = self.engine.get_pity_status(player_id)
        if status is None:
            raise HTTPException(status_code=404, detail="Player not found")
        return status

    def get_statistics(self, player_id: int) -> RollStatistics:
        return self.engine.get_statistics(player_id)

    def quote(self, roll_type: RollType, count: int) -> RollCost:
        entry = self.engine.cost_table.get_entry(roll_type)
        if entry is None:
            raise HTTPException(status_code=400, detail="Unknown roll type")
        if not 1 <= count <= entry.max_count:
            raise HTTPException(
                status_code=400, detail=f"{roll_type} rolls take 1 to {entry.max_count} cards"
            )
        return self.engine.cost_table.get_roll_cost(roll_type, count)
