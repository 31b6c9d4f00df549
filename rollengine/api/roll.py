from typing import Annotated

from fastapi import APIRouter, Depends, Query

from rollengine.core.enums import RollType
from rollengine.schemas.common import APIResponse
from rollengine.schemas.roll import RollCost, RollRequestBody, RollResponse
from rollengine.services.roll import RollService

router = APIRouter(tags=["rolls"])


@router.post("/rolls")
async def roll_cards(
    body: RollRequestBody, service: Annotated[RollService, Depends()]
) -> APIResponse[RollResponse]:
    response = await service.roll_cards(body)
    return APIResponse(data=response)


@router.get("/cost")
async def get_roll_cost(
    service: Annotated[RollService, Depends()],
    roll_type: Annotated[RollType, Query()],
    count: Annotated[int, Query(ge=1)] = 1,
) -> APIResponse[RollCost]:
    """Quote what a roll would cost, bulk discount included."""
    return APIResponse(data=service.quote(roll_type, count))
