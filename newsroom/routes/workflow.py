"""Static workflow metadata for clients rendering progress and actions."""

from fastapi import APIRouter

from newsroom.schemas import StageInfo, StagesResponse
from newsroom.services.stage_machine import (
    STAGE_ORDER,
    actions_for_stage,
    stage_progress,
    status_for_stage,
)

router = APIRouter(prefix="/workflow", tags=["workflow"])


@router.get("/stages", response_model=StagesResponse)
async def list_stages():
    return StagesResponse(
        stages=[
            StageInfo(
                stage=stage,
                status=status_for_stage(stage),
                order=index,
                progress=stage_progress(stage),
                actions=actions_for_stage(stage),
            )
            for index, stage in enumerate(STAGE_ORDER)
        ]
    )
