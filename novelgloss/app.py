"""FastAPI application factory."""
from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .database import init_db
from .exceptions import NovelGlossError
from .routers import glossary, translation

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)

log = logging.getLogger(__name__)


async def handle_error(request: Request, exc: NovelGlossError) -> JSONResponse:
    """Halt the request and answer with diagnostic detail instead of output."""
    log.exception("Request %s %s failed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "name": type(exc).__name__,
            "message": str(exc),
            "code": exc.code,
            "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        },
    )


def create_app() -> FastAPI:
    init_db()

    app = FastAPI(title=settings.app_title, version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(NovelGlossError, handle_error)

    app.include_router(translation.router)
    app.include_router(glossary.router)

    return app


app = create_app()
