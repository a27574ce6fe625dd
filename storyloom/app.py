"""FastAPI application: routers, startup table creation, error mapping."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storyloom.config import get_settings
from storyloom.errors import StoryloomError
from storyloom.routers import context
from storyloom.utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Ensure tables exist
    from storyloom.database import init_db
    init_db()
    yield


app = FastAPI(title=get_settings().app_name, version="0.1.0", lifespan=lifespan)


@app.exception_handler(StoryloomError)
async def storyloom_error_handler(request: Request, exc: StoryloomError):
    if exc.status_code >= 500:
        logger.error("Unhandled %s: %s", exc.code, exc.message, extra={"metadata": exc.context})
    else:
        logger.info("%s: %s", exc.code, exc.message, extra={"metadata": exc.context})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(context.router)
