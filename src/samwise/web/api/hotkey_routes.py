"""Global shortcut routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from samwise.app import Samwise
from samwise.errors import ConfigError
from samwise.input.hotkey import HotkeyRegistrationError
from samwise.web.api.deps import get_core

router = APIRouter(tags=["hotkey"])


class HotkeyRequest(BaseModel):
    hotkey: str


@router.get("/hotkey")
async def get_hotkey(core: Samwise = Depends(get_core)) -> dict:
    controller = core.controller
    return {
        "hotkey": core.get_config().global_hotkey,
        "registered": controller.hotkey if controller is not None else None,
    }


@router.put("/hotkey")
async def update_hotkey(req: HotkeyRequest, core: Samwise = Depends(get_core)) -> dict:
    """Re-register the global shortcut. The old binding survives a failure."""
    try:
        core.update_global_shortcut(req.hotkey)
    except HotkeyRegistrationError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"status": "ok", "hotkey": req.hotkey}
