"""
Ping Route

Simple ping endpoint for frontend connectivity testing.
"""

from datetime import datetime
from fastapi import APIRouter
from pydantic import BaseModel

from common import global_config

router = APIRouter()


class PingResponse(BaseModel):
    """Response for ping endpoint."""

    message: str  # noqa: F841
    status: str  # noqa: F841
    service: str
    timestamp: str


@router.get("/ping", response_model=PingResponse)  # noqa
async def ping() -> PingResponse:
    """Simple ping endpoint for frontend connectivity testing."""
    return PingResponse(
        message="pong",
        status="ok",
        service=global_config.app_name,
        timestamp=datetime.now().isoformat(),
    )
