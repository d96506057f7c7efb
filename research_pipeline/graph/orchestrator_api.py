"""
FastAPI endpoints for the research pipeline.

Provides the API to start a run and poll its live status or final
outcome.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from research_pipeline.graph.config import get_config
from research_pipeline.graph.registry import RunRegistry
from research_pipeline.shared.contracts.pipeline import Outcome, Step, StepResult, TaskRequest


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workflow", tags=["workflow"])

# In-memory run registry (replace with a durable store in production).
# Finished runs are kept until the finished-run cap evicts the oldest.
_registry: Optional[RunRegistry] = None


def get_registry() -> RunRegistry:
    """Get or create the shared registry, configured from the environment."""
    global _registry
    if _registry is None:
        _registry = RunRegistry(config=get_config())
    return _registry


# ============================================================================
# Request/Response Models
# ============================================================================


class StartRunResponse(BaseModel):
    """Response after starting a run."""

    run_id: str = Field(description="Run identifier to poll")


class RunStatusResponse(BaseModel):
    """Live status of a run, with the outcome once it has one."""

    run_id: str
    current_step: Step
    history: List[StepResult] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    last_error: Optional[str] = None
    result: Optional[Outcome] = Field(
        default=None, description="Outcome once the run completed"
    )
    error: Optional[str] = Field(
        default=None, description="Terminal error if the run failed"
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/start", response_model=StartRunResponse)
async def start_run(request: TaskRequest) -> StartRunResponse:
    """
    Start a research run in the background.

    The request body is validated on intake: a blank query or an
    out-of-range bound is rejected before any run is created.
    """
    try:
        run_id = get_registry().start(request)
    except Exception as e:
        logger.exception(f"[graph=pipeline] [api=start] Failed to start run: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to start run: {str(e)}",
        )

    logger.info(f"[run={run_id}] [graph=pipeline] [api=start] Run accepted")
    return StartRunResponse(run_id=run_id)


@router.get("/{run_id}/status", response_model=RunStatusResponse)
async def get_run_status(run_id: str) -> RunStatusResponse:
    """Return live progress, plus the outcome or error once finished."""
    try:
        record = get_registry().get(run_id)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No run with ID {run_id}",
        )

    run_status = record.status
    return RunStatusResponse(
        run_id=run_id,
        current_step=run_status.current_step,
        history=list(run_status.history),
        started_at=run_status.started_at,
        completed_at=run_status.completed_at,
        last_error=run_status.last_error,
        result=record.outcome,
        error=record.error,
    )
