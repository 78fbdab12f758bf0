"""Status API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from samwise.app import Samwise
from samwise.constants import VERSION
from samwise.web.api.deps import get_core

router = APIRouter(tags=["status"])


@router.get("/status")
async def get_status(core: Samwise = Depends(get_core)) -> dict:
    """Get application status and version info."""
    controller = core.controller
    return {
        "version": VERSION,
        "status": "running",
        "app_name": "Samwise",
        "window": controller.state.name.lower() if controller is not None else None,
        "hotkey": controller.hotkey if controller is not None else None,
        "inflight": core.inflight,
    }
