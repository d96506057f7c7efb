"""
FastAPI application entry point.

Assembles the FastAPI app with the pipeline router.
"""

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from research_pipeline.graph.config import get_config
from research_pipeline.graph.orchestrator_api import router as workflow_router
from research_pipeline.shared.logging import setup_logging


# ============================================================================
# Logging configuration (single source of truth for the service)
# ============================================================================
LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)-40s | %(message)s"
)

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True,  # Override any prior basicConfig calls
)

# Step transitions are emitted as JSON records; RESEARCH_TRANSITION_LOG_LEVEL=INFO enables them
setup_logging(
    level=get_config().transition_log_level,
    logger_name="research_pipeline.transitions",
)


app = FastAPI(
    title="Research Pipeline",
    description="Fault-tolerant research pipeline: search, transform, report, validate",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(workflow_router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Research Pipeline",
        "version": "0.1.0",
        "steps": ["parsing", "searching", "transforming", "generating", "validating"],
        "endpoints": {
            "start": "/api/workflow/start",
            "status": "/api/workflow/{run_id}/status",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
