"""Configuration API routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from samwise.app import Samwise
from samwise.config import AppConfig, check_llm_settings
from samwise.errors import ConfigError
from samwise.web.api.deps import get_core

router = APIRouter(tags=["config"])


@router.get("/config")
async def get_config(core: Samwise = Depends(get_core)) -> dict:
    """Get the full application configuration, API keys included."""
    return core.get_config().to_dict()


@router.put("/config")
async def update_config(data: dict[str, Any], core: Samwise = Depends(get_core)) -> dict:
    """Update configuration with partial data. Merges with existing config.

    The global hotkey is changed through ``PUT /api/hotkey`` so that it is
    re-registered, not here.
    """
    merged = core.get_config().to_dict()
    if isinstance(data.get("llm"), dict):
        try:
            check_llm_settings(data["llm"])
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        merged["llm"].update(data["llm"])
    if "selected_model" in data:
        merged["selected_model"] = data["selected_model"]

    try:
        core.save_config(AppConfig.from_dict(merged))
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"status": "ok", "message": "Configuration saved"}
