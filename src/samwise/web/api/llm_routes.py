"""Prompt application and cancellation routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from samwise.app import Samwise, format_error
from samwise.errors import PromptNotFoundError
from samwise.llm.base import DispatchError
from samwise.web.api.deps import get_core

router = APIRouter(tags=["llm"])


class ApplyRequest(BaseModel):
    prompt_id: str
    text: str
    request_id: str | None = None


class CancelRequest(BaseModel):
    request_id: str | None = None


@router.post("/apply")
async def apply_prompt(req: ApplyRequest, core: Samwise = Depends(get_core)) -> dict:
    """Apply a prompt to the given text with the selected model.

    Failures are returned in the body, not as HTTP errors: the UI renders
    ``message`` in the result area either way.
    """
    try:
        text = await core.apply_prompt(req.prompt_id, req.text, request_id=req.request_id)
    except PromptNotFoundError as e:
        return {"ok": False, "kind": "prompt_not_found", "error": str(e), "message": format_error(e)}
    except DispatchError as e:
        prompt = next((p for p in core.get_prompts() if p.id == req.prompt_id), None)
        return {
            "ok": False,
            "kind": e.kind.value,
            "error": e.message,
            "message": format_error(e, prompt, req.text),
        }
    except ValueError as e:
        return {"ok": False, "kind": "duplicate_request", "error": str(e), "message": str(e)}
    return {"ok": True, "text": text}


@router.post("/cancel")
async def cancel(req: CancelRequest | None = None, core: Samwise = Depends(get_core)) -> dict:
    """Cancel one in-flight request, or all of them when no id is given."""
    request_id = req.request_id if req is not None else None
    return {"status": "ok", "cancelled": core.cancel(request_id)}


@router.get("/cli")
async def check_cli(core: Samwise = Depends(get_core)) -> dict:
    """Report whether the Claude CLI is available."""
    return {"available": core.check_claude_cli()}
