"""
Failure taxonomy for pipeline steps.

Every failure raised by a step carries capability flags that the retry
layer and the orchestrator inspect instead of branching on concrete
exception classes:

- retryable: the retry policy may try the step again
- transient: the failure came from a briefly unavailable dependency
  (directly or after the policy gave up), so an absorbable step may
  degrade instead of failing the run
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from research_pipeline.graph.progress import RunStatus
    from research_pipeline.shared.contracts.pipeline import Step


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class StepError(PipelineError):
    """A classified failure raised while executing a single step."""

    retryable: bool = False
    transient: bool = False

    def __init__(self, message: str, step: Optional["Step"] = None):
        super().__init__(message)
        self.message = message
        self.step = step


class ValidationError(StepError):
    """Step input violates a precondition. Never retried."""


class ServiceUnavailableError(StepError):
    """A dependency of the step is briefly unavailable."""

    retryable = True
    transient = True


class StepTimeoutError(ServiceUnavailableError):
    """A single attempt exceeded the step's timeout."""


class RetryExhaustedError(StepError):
    """The retry policy gave up after its maximum number of attempts."""

    transient = True

    def __init__(self, step: "Step", attempts: int, last_error: BaseException):
        super().__init__(str(last_error), step)
        self.attempts = attempts
        self.last_error = last_error


class UnclassifiedError(PipelineError):
    """A step raised something outside the taxonomy. Always fatal."""

    def __init__(self, step: "Step", cause: BaseException):
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.step = step
        self.cause = cause


class PipelineFailedError(PipelineError):
    """Raised by a run that terminated in the failed state."""

    def __init__(self, step: "Step", message: str, status: "RunStatus"):
        super().__init__(message)
        self.step = step
        self.status = status
