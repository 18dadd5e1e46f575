"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from prometheus_fastapi_instrumentator import Instrumentator

from resale_estimator.api.routes import client_log, estimate
from resale_estimator.config import settings
from resale_estimator.logging_config import setup_logging
from resale_estimator.service import build_estimator, build_http_client

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting resale estimator...")

    http_client = build_http_client(settings)
    app.state.http_client = http_client
    app.state.estimator = build_estimator(settings, http_client)
    logger.info(f"Configured sources: {app.state.estimator.configured_sources()}")

    yield

    logger.info("Shutting down...")

    close = getattr(app.state.estimator, "close", None)
    if close is not None:
        try:
            await close()
        except Exception:
            logger.exception("Error closing response cache")
    await http_client.aclose()

    logger.info("Shutdown complete")


app = FastAPI(
    title="Resale Estimator",
    description="Estimate collectible resale value from marketplace listings and sold comps",
    version="0.1.0",
    lifespan=lifespan,
)

instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_respect_env_var=False,
    excluded_handlers=["/metrics", "/health", "/favicon.ico"],
)
instrumentator.instrument(app).expose(app, include_in_schema=True, tags=["monitoring"])

app.include_router(estimate.router)
app.include_router(client_log.router)


@app.get("/health")
async def health(request: Request):
    """Health check endpoint with per-source configuration flags."""
    estimator = getattr(request.app.state, "estimator", None)
    sources = estimator.configured_sources() if estimator is not None else {}
    return {"status": "healthy", "sources": sources}


@app.get("/favicon.ico")
async def favicon():
    """Return empty favicon response to avoid 404 noise."""
    return Response(status_code=204)


if __name__ == "__main__":
    uvicorn.run(
        "resale_estimator.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
