"""FastAPI server exposing the application core to the Samwise UI."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from samwise.constants import API_DEFAULT_HOST, API_DEFAULT_PORT, VERSION
from samwise.web.api.config_routes import router as config_router
from samwise.web.api.events_routes import router as events_router
from samwise.web.api.hotkey_routes import router as hotkey_router
from samwise.web.api.llm_routes import router as llm_router
from samwise.web.api.models_routes import router as models_router
from samwise.web.api.prompts_routes import router as prompts_router
from samwise.web.api.status_routes import router as status_router
from samwise.web.api.window_routes import router as window_router

if TYPE_CHECKING:
    import uvicorn

    from samwise.app import Samwise

logger = logging.getLogger(__name__)


def create_app(core: Samwise) -> FastAPI:
    """Build the API application bound to ``core``."""
    app = FastAPI(
        title="Samwise",
        version=VERSION,
        docs_url="/api/docs",
        redoc_url=None,
    )
    app.state.core = core

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in (
        status_router,
        prompts_router,
        models_router,
        config_router,
        llm_router,
        hotkey_router,
        window_router,
        events_router,
    ):
        app.include_router(router, prefix="/api")

    return app


def create_server(
    core: Samwise, host: str = API_DEFAULT_HOST, port: int = API_DEFAULT_PORT
) -> uvicorn.Server:
    """Create a uvicorn server to be awaited on the caller's event loop."""
    import uvicorn

    config = uvicorn.Config(create_app(core), host=host, port=port, log_level="info")
    logger.info("Samwise API on http://%s:%d", host, port)
    return uvicorn.Server(config)
