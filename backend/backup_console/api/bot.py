"""Companion bot status API router."""

from fastapi import APIRouter, Depends

from backup_console.api.deps import get_bot_status_service
from backup_console.schemas import BotProcessStatus, BotStatusResponse, ErrorResponse
from backup_console.services import BotStatusService


router = APIRouter(prefix="/pm2", tags=["bot"])


@router.get(
    "/status",
    response_model=BotStatusResponse,
    responses={
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def bot_status(svc: BotStatusService = Depends(get_bot_status_service)) -> BotStatusResponse:
    """Report liveness and resource usage of PM2 processes whose name matches the bot."""
    processes = await svc.get_status()
    return BotStatusResponse(
        processes=[
            BotProcessStatus(
                name=p.name,
                status=p.status,
                uptime=p.uptime,
                memory=p.memory,
                cpu=p.cpu,
                restarts=p.restarts,
                pm_id=p.pm_id,
                version=p.version,
            )
            for p in processes
        ]
    )
