"""
Shared infrastructure for the pipeline.

Modules:
- contracts: Step input/output contracts for handoffs
- errors: Failure taxonomy shared by steps and the orchestrator
- logging: Structured JSON logging
- retry: Per-step retry policies backed by tenacity
"""

from research_pipeline.shared.logging.config import setup_logging, log_step_transition
from research_pipeline.shared.retry.policy import (
    DEFAULT_RETRY_POLICIES,
    RetryPolicy,
    execute_with_policy,
)

__all__ = [
    "setup_logging",
    "log_step_transition",
    "DEFAULT_RETRY_POLICIES",
    "RetryPolicy",
    "execute_with_policy",
]
