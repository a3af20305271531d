from fastapi import APIRouter, Depends, HTTPException

from auth import get_current_user
from schemas import SchedulerStatusResponse, SchedulerTriggerResponse
from services.scheduler import scheduled_order_scheduler
from services.users_service import StoredUser

router = APIRouter(prefix="/api/scheduler", tags=["scheduler"])


@router.get("/status", response_model=SchedulerStatusResponse)
async def get_status(
    user: StoredUser = Depends(get_current_user),
) -> SchedulerStatusResponse:
    return SchedulerStatusResponse(**scheduled_order_scheduler.get_status())


@router.post("/start", response_model=SchedulerStatusResponse)
async def start_scheduler(
    user: StoredUser = Depends(get_current_user),
) -> SchedulerStatusResponse:
    try:
        await scheduled_order_scheduler.start()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return SchedulerStatusResponse(**scheduled_order_scheduler.get_status())


@router.post("/stop", response_model=SchedulerStatusResponse)
async def stop_scheduler(
    user: StoredUser = Depends(get_current_user),
) -> SchedulerStatusResponse:
    try:
        await scheduled_order_scheduler.stop()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return SchedulerStatusResponse(**scheduled_order_scheduler.get_status())


@router.post("/trigger", response_model=SchedulerTriggerResponse)
async def trigger_scheduler(
    user: StoredUser = Depends(get_current_user),
) -> SchedulerTriggerResponse:
    try:
        completed = await scheduled_order_scheduler.run_once()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return SchedulerTriggerResponse(
        completed=completed,
        status=SchedulerStatusResponse(**scheduled_order_scheduler.get_status()),
    )
