from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from rollengine.schemas.common import APIResponse
from rollengine.schemas.player import CurrencyAdjustment, PlayerCreate, PlayerSummary
from rollengine.schemas.roll import PityStatusResponse, RollStatistics
from rollengine.services.player import PlayerService
from rollengine.services.roll import RollService

router = APIRouter(prefix="/players", tags=["players"])


@router.get("/{player_id}")
async def get_player(
    player_id: int, service: Annotated[PlayerService, Depends()]
) -> APIResponse[PlayerSummary]:
    player = service.get_player(player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return APIResponse(data=player)


@router.post("/")
async def create_player(
    player: PlayerCreate, service: Annotated[PlayerService, Depends()]
) -> APIResponse[PlayerSummary]:
    created_player = await service.create_player(player)
    return APIResponse(data=created_player, message="Player created successfully")


@router.post("/{player_id}/currency/increase")
async def increase_currency(
    player_id: int,
    adjustment: CurrencyAdjustment,
    service: Annotated[PlayerService, Depends()],
) -> APIResponse[PlayerSummary]:
    player = await service.increase_currency(
        player_id, adjustment.currency, adjustment.amount, adjustment.reason
    )
    return APIResponse(
        data=player, message=f"Increased {adjustment.currency} by {adjustment.amount}"
    )


@router.get("/{player_id}/pity")
async def get_pity(
    player_id: int, service: Annotated[RollService, Depends()]
) -> APIResponse[PityStatusResponse]:
    return APIResponse(data=service.get_pity(player_id))


@router.get("/{player_id}/statistics")
async def get_statistics(
    player_id: int, service: Annotated[RollService, Depends()]
) -> APIResponse[RollStatistics]:
    return APIResponse(data=service.get_statistics(player_id))
