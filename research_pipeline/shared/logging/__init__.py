"""Logging configuration and utilities."""

from research_pipeline.shared.logging.config import (
    StructuredFormatter,
    log_step_transition,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "log_step_transition",
    "StructuredFormatter",
]
