#!/usr/bin/env python3
"""Competition Manager - REST API for competitions, team registration and certificates"""

import time
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from competition_manager.config import config
from competition_manager.errors import (
    CompetitionError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from competition_manager.logging_config import get_logger, setup_logging
from competition_manager.routers.admin import router as admin_router
from competition_manager.routers.competitions import router as competitions_router
from competition_manager.routers.health import health

# Configure logging (INFO -> stdout, WARNING/ERROR -> stderr)
setup_logging()
logger = get_logger(__name__)


app = FastAPI(
    title="Competition Management API",
    description="Create competitions and regional events, register teams, and issue certificates and event passes",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
    )
    return response


def _status_for(error: CompetitionError) -> int:
    if isinstance(error, NotFoundError):
        return 404
    # Duplicate team names are reported as a bad request, not 409
    if isinstance(error, (ValidationError, ConflictError)):
        return 400
    return 500


@app.exception_handler(CompetitionError)
async def competition_error_handler(request: Request, exc: CompetitionError):
    status_code = _status_for(exc)
    content = {"message": exc.message}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        content = {"message": "Server error", "error": exc.message}
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "msg": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400, content={"message": "Validation failed", "errors": errors}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = exc.detail if isinstance(exc.detail, dict) else {"message": exc.detail}
    return JSONResponse(
        status_code=exc.status_code, content=content, headers=exc.headers
    )


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    logger.error(f"Internal server error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500, content={"message": "Server error", "error": str(exc)}
    )


# Include routers
app.include_router(health)
app.include_router(competitions_router)
app.include_router(admin_router)

# Serve generated passes and other public artifacts
public_dir = Path(config["artifact_dir"])
public_dir.mkdir(parents=True, exist_ok=True)
app.mount("/public", StaticFiles(directory=str(public_dir)), name="public")


if __name__ == "__main__":
    port = config.get("port")
    logger.info(f"Starting Competition Manager on 0.0.0.0:{port}")
    logger.info(f"API documentation available at {config['app_base_url']}/docs")

    try:
        uvicorn.run(
            app, host="0.0.0.0", port=port, log_level=config["log_level"].lower()
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise
