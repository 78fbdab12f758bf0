"""Window, clipboard and settings routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from samwise.app import Samwise
from samwise.web.api.deps import get_core

router = APIRouter(tags=["window"])


class ClipboardRequest(BaseModel):
    text: str


@router.post("/window/show")
async def show_window(core: Samwise = Depends(get_core)) -> dict:
    return {"status": "ok", "changed": core.show_window()}


@router.post("/window/hide")
async def hide_window(core: Samwise = Depends(get_core)) -> dict:
    return {"status": "ok", "changed": core.hide_window()}


@router.post("/window/close")
async def close_window(core: Samwise = Depends(get_core)) -> dict:
    """The window's close button: hides the window, the app keeps running."""
    core.close_window()
    return {"status": "ok"}


@router.post("/window/quit")
async def quit_app(core: Samwise = Depends(get_core)) -> dict:
    """Quit the application. The server shuts down once the response is sent."""
    core.quit()
    return {"status": "ok"}


@router.post("/clipboard")
async def copy_to_clipboard(req: ClipboardRequest, core: Samwise = Depends(get_core)) -> dict:
    if not core.copy_to_clipboard(req.text):
        raise HTTPException(status_code=500, detail="Failed to copy to clipboard")
    return {"status": "ok"}


@router.post("/settings")
async def open_settings(core: Samwise = Depends(get_core)) -> dict:
    core.open_settings()
    return {"status": "ok"}
