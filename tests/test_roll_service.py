import threading

import pytest
from fastapi import HTTPException

from rollengine.core.enums import RollType, ValidationFailure
from rollengine.schemas.roll import RollRequest, RollRequestBody, RollResponse
from rollengine.services.roll import RollService


class ThreadRecordingEngine:
    def __init__(self) -> None:
        self.thread_id: int | None = None

    def roll_cards(self, request: RollRequest) -> RollResponse:
        self.thread_id = threading.get_ident()
        return RollResponse(
            success=False, error_message="Rolling too fast", failure=ValidationFailure.RATE_LIMITED
        )


@pytest.mark.asyncio
async def test_engine_runs_off_the_event_loop_thread():
    engine = ThreadRecordingEngine()
    service = RollService(db=None, engine=engine)

    with pytest.raises(HTTPException) as exc_info:
        await service.roll_cards(RollRequestBody(player_id=1, roll_type=RollType.PREMIUM))

    assert exc_info.value.status_code == 429
    assert engine.thread_id is not None
    assert engine.thread_id != threading.get_ident()
