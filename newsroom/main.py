"""Newsroom workflow FastAPI application."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from newsroom.database import close_db, init_db
from newsroom.errors import ForbiddenError, GuardFailedError, WorkflowError
from newsroom.logging_config import configure_logging, get_logger
from newsroom.middleware.request_context import RequestContextMiddleware
from newsroom.redis import close_redis, init_redis

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: init DB + Redis on startup, cleanup on shutdown."""
    configure_logging()

    logger.info("starting_database_init")
    await init_db()

    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    await init_redis(redis_url)
    logger.info("redis_connected", url=redis_url)

    logger.info("application_started")
    yield

    logger.info("shutting_down")
    await close_redis()
    await close_db()
    logger.info("shutdown_complete")


app = FastAPI(
    title="Newsroom Workflow",
    description="Editorial workflow, translation cascade and station distribution",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "http://localhost:3000").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)


# --- Error mapping ---


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    log = logger.warning if exc.status_code < 500 else logger.error
    fields = {"path": request.url.path, "error_type": type(exc).__name__, "error": exc.message}
    if isinstance(exc, ForbiddenError):
        fields["reason"] = exc.reason
    if isinstance(exc, GuardFailedError):
        fields["missing"] = [m.code for m in exc.missing]
    log("workflow_error", **fields)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": f"{location}: {message}" if location else message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


# --- Routers ---
from newsroom.routes.items import router as items_router  # noqa: E402
from newsroom.routes.stations import router as stations_router  # noqa: E402
from newsroom.routes.workflow import router as workflow_router  # noqa: E402

app.include_router(items_router)
app.include_router(stations_router)
app.include_router(workflow_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "newsroom"}
