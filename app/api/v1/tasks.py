"""Scheduled task endpoints, called by Cloud Scheduler."""

from fastapi import (
    APIRouter,
    Depends,
)

from app.core.dependencies import (
    ContainerDep,
    verify_scheduler_token,
)
from app.core.logging import logger
from app.schemas.tasks import ReminderSweepResponse

router = APIRouter(dependencies=[Depends(verify_scheduler_token)])


@router.post("/reminders", response_model=ReminderSweepResponse)
async def run_reminder_sweep(container: ContainerDep):
    """Run one reminder sweep."""
    now = container.clock()
    logger.info("reminder_sweep_triggered", ran_at=now.isoformat())
    result = await container.reminder_service().run(now)
    return ReminderSweepResponse(
        ran_at=now,
        reminded=result.reminded,
        failed=result.failed,
        skipped=result.skipped,
    )
