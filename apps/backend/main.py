"""
Video search backend.

Fans a query out to the configured XML search providers and returns one
merged, source-tagged list.
"""
from datetime import datetime, timezone
from pathlib import Path
import os

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env", override=False)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel

from exceptions import VideoSearchError
from observability.health import run_health_checks
from observability.logging import get_logger
from observability.metrics import metrics_registry
from observability.middleware import ObservabilityMiddleware
from observability.sentry_config import capture_exception, init_sentry
from routes.search import build_search_service, router as search_router

__version__ = "0.1.0"

logger = get_logger(__name__)

app = FastAPI(
    title="Video Search Backend",
    description="Concurrent search across XML video providers",
    version=__version__,
)

app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(search_router)


class HealthResponse(BaseModel):
    status: str
    version: str


@app.get("/health", response_model=HealthResponse)
async def health_check():
    return {
        "status": "healthy",
        "version": __version__,
    }


@app.get("/health/ready")
async def readiness_check(request: Request):
    """Ready once the provider registry holds at least one provider."""
    service = getattr(request.app.state, "search_service", None)
    registry = service.registry if service else None
    report = run_health_checks(registry)
    return JSONResponse(
        status_code=200 if report["ready"] else 503,
        content=report,
    )


@app.get("/metrics")
async def metrics():
    return Response(content=generate_latest(metrics_registry), media_type=CONTENT_TYPE_LATEST)


@app.exception_handler(VideoSearchError)
async def video_search_error_handler(request: Request, exc: VideoSearchError):
    logger.info(
        "Request rejected",
        extra={"path": request.url.path, "status_code": exc.status_code, "error_message": exc.message},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for unhandled errors.

    - Logs full traceback
    - Reports to Sentry when enabled
    - Returns safe error message to client
    """
    error_id = f"ERR-{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S')}-{id(exc)}"
    logger.error(
        f"[ERROR {error_id}] Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path, "method": request.method},
        exc_info=exc,
    )
    capture_exception(exc, tags={"error_id": error_id})
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "error_id": error_id,
        }
    )


@app.on_event("startup")
async def startup_event():
    """Load configuration once; the registry is immutable afterwards."""
    logger.info(f"Video search backend starting (environment={os.getenv('ENVIRONMENT', 'development')})")
    init_sentry()
    if getattr(app.state, "search_service", None) is None:
        app.state.search_service = build_search_service()


@app.on_event("shutdown")
async def shutdown_event():
    service = getattr(app.state, "search_service", None)
    if service is not None:
        await service.aclose()
    logger.info("Video search backend shutting down")
