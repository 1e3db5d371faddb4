#!/usr/bin/env python3

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from .core.auth import verify_token
from .core.config import graph_config
from .core.logging import setup_logging
from .models.models import GraphBuildRequest

logger = logging.getLogger(__name__)

# Application start time for uptime calculation
_app_start_time = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    setup_logging(graph_config.LOG_LEVEL)
    logger.info("Starting order graph API service")

    from .services.domain.json_to_graph import load_graph_rules
    load_graph_rules(graph_config.RULES_PATH)

    yield

    # Shutdown
    logger.info("Shutting down order graph API service")


app = FastAPI(
    title="Order Graph API",
    description="API for converting order JSON documents into typed node/edge graphs",
    version=os.getenv("APP_VERSION", "unknown"),
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=graph_config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Add version header middleware
@app.middleware("http")
async def add_version_header(request, call_next):
    """Add version information to response headers"""
    response = await call_next(request)
    response.headers["X-API-Version"] = os.getenv("APP_VERSION", "unknown")
    return response


@app.get("/healthz")
async def health_check():
    """Liveness probe - checks if application is alive and can serve requests"""
    current_time = time.time()
    return {
        "status": "healthy",
        "timestamp": current_time,
        "uptime": current_time - _app_start_time,
        "api_version": os.getenv("APP_VERSION", "unknown"),
        "git_commit": os.getenv("GIT_COMMIT", "unknown"),
        "build_date": os.getenv("BUILD_DATE", "unknown"),
    }


@app.get("/readyz")
async def readiness_check():
    """Readiness probe - the configured rule table must load"""
    from .core.config import GraphConfig
    from .services.domain.json_to_graph import RuleTableError, load_graph_rules

    try:
        load_graph_rules(GraphConfig().RULES_PATH)
        return {"status": "ready"}
    except RuleTableError as e:
        logger.warning(f"Readiness check failed: {e}")
        raise HTTPException(status_code=503, detail={"status": "not_ready"}) from e


# Graph Routes

@app.post("/api/graph/build")
def build_graph_from_text(
    request: GraphBuildRequest,
    token: str = Depends(verify_token)
):
    """Convert order JSON text into graph nodes and edges.

    Args:
        request: JSON text and optional traversal strategy
        token: Authentication token

    Returns:
        Graph data (nodes, edges) with a per-type summary
    """
    from .handlers.graph import handle_build_graph
    return handle_build_graph(request.json_text, request.strategy)


@app.post("/api/graph/upload")
async def build_graph_from_file(
    file: UploadFile = File(...),
    strategy: str = Form(None),
    token: str = Depends(verify_token)
):
    """Convert an uploaded order JSON file into graph nodes and edges."""
    from .handlers.graph import handle_graph_upload
    return await handle_graph_upload(file, strategy)


if __name__ == "__main__":
    import uvicorn
    host = os.getenv("API_HOST", "0.0.0.0")  # nosec B104
    port = int(os.getenv("API_PORT", "8000"))
    uvicorn.run(app, host=host, port=port)
