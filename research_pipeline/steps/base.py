"""
Step contract shared by every pipeline step.

A step is an async unit with a typed input and output. It signals
failures with the classified errors in research_pipeline.shared.errors:
ValidationError for precondition violations (raised before any work)
and ServiceUnavailableError for transient dependency outages.
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple, TypeVar, runtime_checkable, TYPE_CHECKING

from research_pipeline.shared.contracts.pipeline import Step

if TYPE_CHECKING:
    from research_pipeline.graph.config import PipelineConfig


InputT = TypeVar("InputT", contravariant=True)
OutputT = TypeVar("OutputT", covariant=True)


@runtime_checkable
class PipelineStep(Protocol[InputT, OutputT]):
    """
    Protocol for pipeline steps.

    Example:
        class MyStep:
            name = Step.searching

            async def execute(self, step_input: SearchInput) -> SearchOutput:
                ...
    """

    name: Step

    async def execute(self, step_input: InputT) -> OutputT:
        ...


class MockStep:
    """Helpers shared by the mock step bodies."""

    name: Step

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    async def _simulate_latency(self, delay: Tuple[float, float]) -> None:
        low, high = delay
        seconds = low + self._rng.random() * (high - low)
        if seconds > 0:
            await asyncio.sleep(seconds)

    def _roll_failure(self, rate: float) -> bool:
        return rate > 0 and self._rng.random() < rate


@dataclass
class PipelineSteps:
    """The four step implementations a run is wired with."""

    search: PipelineStep
    transform: PipelineStep
    report: PipelineStep
    validate: PipelineStep

    @classmethod
    def mock(
        cls,
        config: Optional["PipelineConfig"] = None,
        rng: Optional[random.Random] = None,
    ) -> "PipelineSteps":
        """Wire the mock step bodies using the given configuration."""
        from research_pipeline.graph.config import DEFAULT_CONFIG
        from research_pipeline.steps.report import MockReportStep
        from research_pipeline.steps.search import MockSearchStep
        from research_pipeline.steps.transform import MockTransformStep
        from research_pipeline.steps.validation import MockValidationStep

        config = config or DEFAULT_CONFIG
        return cls(
            search=MockSearchStep(
                failure_rate=config.search_failure_rate,
                delay=config.search_delay,
                rng=rng,
            ),
            transform=MockTransformStep(delay=config.transform_delay, rng=rng),
            report=MockReportStep(
                failure_rate=config.report_failure_rate,
                delay=config.report_delay,
                rng=rng,
            ),
            validate=MockValidationStep(delay=config.validation_delay, rng=rng),
        )
