"""Application entrypoint for the PropDesk API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from propdesk.api.v1._authz import map_domain_error
from propdesk.api.v1.router import get_api_router
from propdesk.core.config import get_config
from propdesk.core.exceptions import PropDeskError
from propdesk.core.startup import bootstrap

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    bootstrap()
    yield


def create_app() -> FastAPI:
    cfg = get_config()
    app = FastAPI(title=cfg.APP_NAME, version=cfg.APP_VERSION, lifespan=lifespan)
    app.include_router(get_api_router())

    @app.exception_handler(PropDeskError)
    async def handle_domain_error(request: Request, exc: PropDeskError) -> JSONResponse:
        code, detail = map_domain_error(exc)
        if code >= 500:
            logger.error(
                "api.request.failed",
                extra={"event": "api.request.failed", "path": request.url.path, "error_type": type(exc).__name__},
            )
        return JSONResponse(status_code=code, content={"detail": detail})

    @app.exception_handler(PydanticValidationError)
    async def handle_invalid_input(request: Request, exc: PydanticValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.errors(include_url=False, include_context=False)})

    @app.get("/")
    def root() -> dict:
        return {"service": cfg.APP_NAME, "version": cfg.APP_VERSION, "api_prefix": cfg.API_PREFIX}

    return app


# ASGI app for `uvicorn propdesk.main:app`.
app = create_app()
