"""
Per-step retry policies.

Each step gets its own timeout and backoff profile because the steps
have different latency and failure characteristics. Policies are applied
with tenacity's AsyncRetrying.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_none,
)

from research_pipeline.shared.contracts.pipeline import Step
from research_pipeline.shared.errors import (
    RetryExhaustedError,
    StepError,
    StepTimeoutError,
    UnclassifiedError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Timeout and backoff profile for one step.

    max_attempts is the TOTAL number of tries, so max_attempts=3 means
    try, retry, retry. The wait before attempt n+1 is
    min(initial_backoff * backoff_multiplier ** (n - 1), max_backoff).

    Attributes:
        timeout: Per-attempt timeout in seconds
        max_attempts: Total attempts before giving up
        initial_backoff: Wait before the first retry, in seconds
        backoff_multiplier: Growth factor between consecutive waits
        max_backoff: Upper bound on any single wait (None for unbounded)
        absorbable: Whether a transient failure degrades the run instead
            of failing it
    """

    timeout: float
    max_attempts: int = 1
    initial_backoff: float = 0.0
    backoff_multiplier: float = 1.0
    max_backoff: Optional[float] = None
    absorbable: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    def backoff(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        delay = self.initial_backoff * self.backoff_multiplier ** (attempt - 1)
        if self.max_backoff is not None:
            delay = min(delay, self.max_backoff)
        return delay

    def wait_strategy(self):
        """Tenacity wait strategy matching backoff()."""
        if self.max_attempts == 1 or self.initial_backoff <= 0:
            return wait_none()
        kwargs = {
            "multiplier": self.initial_backoff,
            "exp_base": self.backoff_multiplier,
        }
        if self.max_backoff is not None:
            kwargs["max"] = self.max_backoff
        return wait_exponential(**kwargs)

    def scaled(self, timeout_multiplier: float) -> "RetryPolicy":
        """Copy of this policy with the per-attempt timeout scaled."""
        if timeout_multiplier == 1.0:
            return self
        return replace(self, timeout=self.timeout * timeout_multiplier)


DEFAULT_RETRY_POLICIES: Dict[Step, RetryPolicy] = {
    Step.searching: RetryPolicy(
        timeout=30.0,
        max_attempts=3,
        initial_backoff=1.0,
        backoff_multiplier=2.0,
        max_backoff=10.0,
    ),
    Step.transforming: RetryPolicy(
        timeout=60.0,
        max_attempts=2,
        initial_backoff=0.5,
        backoff_multiplier=1.5,
    ),
    Step.generating: RetryPolicy(
        timeout=120.0,
        max_attempts=3,
        initial_backoff=2.0,
        backoff_multiplier=2.0,
        max_backoff=30.0,
    ),
    # Validation augments the report, so a transient failure is absorbed
    Step.validating: RetryPolicy(timeout=10.0, max_attempts=1, absorbable=True),
}


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, StepError) and exc.retryable


def _log_before_sleep(step: Step, run_id: str) -> Callable[[RetryCallState], None]:
    _log = f"[run={run_id}] [retry={step.value}] "

    def _before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"{_log}Attempt {retry_state.attempt_number} failed: {exc} | "
            f"retrying in {wait:.2f}s"
        )

    return _before_sleep


async def _attempt(
    step: Step,
    policy: RetryPolicy,
    operation: Callable[[], Awaitable[T]],
) -> T:
    try:
        return await asyncio.wait_for(operation(), timeout=policy.timeout)
    except asyncio.TimeoutError as exc:
        raise StepTimeoutError(
            f"{step.value} timed out after {policy.timeout:g}s", step
        ) from exc
    except StepError as exc:
        if exc.step is None:
            exc.step = step
        raise
    except Exception as exc:
        raise UnclassifiedError(step, exc) from exc


async def execute_with_policy(
    step: Step,
    policy: RetryPolicy,
    operation: Callable[[], Awaitable[T]],
    *,
    sleep: SleepFn = asyncio.sleep,
    run_id: str = "unknown",
) -> T:
    """
    Run a step operation under its retry policy.

    Args:
        step: Step being executed (used for classification and logging)
        policy: Timeout and backoff profile for the step
        operation: Zero-argument coroutine factory, called once per attempt
        sleep: Coroutine used to wait between attempts
        run_id: Run identifier for log lines

    Returns:
        Result of the first successful attempt

    Raises:
        RetryExhaustedError: If every attempt failed with a retryable error
        StepError: If a non-retryable classified error occurs (not retried)
        UnclassifiedError: If the operation raised anything outside the
            taxonomy (not retried)
    """
    attempt = 0
    try:
        async for attempt_state in AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=policy.wait_strategy(),
            retry=retry_if_exception(_is_retryable),
            before_sleep=_log_before_sleep(step, run_id),
            sleep=sleep,
            reraise=False,
        ):
            with attempt_state:
                attempt = attempt_state.retry_state.attempt_number
                return await _attempt(step, policy, operation)
    except RetryError as e:
        last_error = e.last_attempt.exception()
        logger.warning(
            f"[run={run_id}] [retry={step.value}] Giving up after {attempt} "
            f"attempt(s): {last_error}"
        )
        raise RetryExhaustedError(step, attempt, last_error) from last_error

    raise RuntimeError("Unexpected state in retry loop")  # pragma: no cover
