"""Prompt listing routes."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from samwise.app import Samwise
from samwise.web.api.deps import get_core

router = APIRouter(tags=["prompts"])


@router.get("/prompts")
async def list_prompts(core: Samwise = Depends(get_core)) -> dict:
    """List the prompts shown in the UI, in display order."""
    return {"prompts": [asdict(p) for p in core.get_prompts()]}
