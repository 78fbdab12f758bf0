"""Model selection API routes."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from samwise.app import Samwise
from samwise.errors import ConfigError
from samwise.web.api.deps import get_core

router = APIRouter(tags=["models"])


class SelectModelRequest(BaseModel):
    model: str


@router.get("/models")
async def list_models(core: Samwise = Depends(get_core)) -> dict:
    """List selectable models and the active one."""
    selected = core.get_config().selected_model
    return {
        "models": [{**asdict(m), "active": m.id == selected} for m in core.get_models()],
        "selected_model": selected,
    }


@router.put("/models/selected")
async def select_model(req: SelectModelRequest, core: Samwise = Depends(get_core)) -> dict:
    """Switch the model used for subsequent prompts."""
    if not req.model.strip():
        raise HTTPException(status_code=422, detail="Model id must not be empty")
    try:
        core.select_model(req.model)
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"status": "ok", "selected_model": req.model}
