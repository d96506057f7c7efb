"""Retry policies for pipeline steps."""

from research_pipeline.shared.retry.policy import (
    DEFAULT_RETRY_POLICIES,
    RetryPolicy,
    execute_with_policy,
)

__all__ = ["DEFAULT_RETRY_POLICIES", "RetryPolicy", "execute_with_policy"]
