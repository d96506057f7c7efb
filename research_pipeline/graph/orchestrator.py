"""
Research pipeline orchestrator.

One ResearchOrchestrator drives exactly one run through the pipeline
graph, invoking each step under its retry policy and publishing every
transition to the run's ProgressReporter.

Failure policy:
- searching, transforming, generating: any unresolved failure is fatal,
  because the next step consumes its output
- validating: a transient failure (including retry exhaustion) is
  absorbed and the run completes with a partial outcome; a validation
  (bad input) failure is fatal like the others
- anything unclassified marks the run failed and is re-raised
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, TypeVar

from research_pipeline.graph.build import create_pipeline_graph
from research_pipeline.graph.config import PipelineConfig, DEFAULT_CONFIG
from research_pipeline.graph.plan import build_plan
from research_pipeline.graph.progress import ProgressReporter, RunStatus
from research_pipeline.graph.state import PipelineGraphState
from research_pipeline.shared.contracts.pipeline import Outcome, Step, TaskRequest
from research_pipeline.shared.contracts.report_output import ReportInput
from research_pipeline.shared.contracts.search_output import SearchInput
from research_pipeline.shared.contracts.transform_output import TransformInput
from research_pipeline.shared.contracts.validation_output import (
    ValidationInput,
    ValidationOutput,
)
from research_pipeline.shared.errors import PipelineFailedError, StepError
from research_pipeline.shared.logging.config import log_step_transition
from research_pipeline.shared.retry.policy import (
    DEFAULT_RETRY_POLICIES,
    RetryPolicy,
    SleepFn,
    execute_with_policy,
)
from research_pipeline.steps.base import PipelineSteps


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Prefix for last_error, per step
_FAILURE_PREFIXES = {
    Step.searching: "Search failed",
    Step.transforming: "Data transformation failed",
    Step.generating: "Report generation failed",
    Step.validating: "Validation failed",
}


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class ResearchOrchestrator:
    """
    Drives a single research run.

    Example:
        orchestrator = ResearchOrchestrator()
        outcome = await orchestrator.run(TaskRequest(query="quantum computing"))

    get_status() may be called from any thread or task while run() is in
    flight.
    """

    def __init__(
        self,
        steps: Optional[PipelineSteps] = None,
        policies: Optional[Mapping[Step, RetryPolicy]] = None,
        config: Optional[PipelineConfig] = None,
        run_id: Optional[str] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.config = config or DEFAULT_CONFIG
        self.run_id = run_id or str(uuid.uuid4())
        self.progress = ProgressReporter()

        self._steps = steps or PipelineSteps.mock(self.config)
        self._policies: Dict[Step, RetryPolicy] = dict(policies or DEFAULT_RETRY_POLICIES)
        missing = [step.value for step in _FAILURE_PREFIXES if step not in self._policies]
        if missing:
            raise ValueError(f"No retry policy for steps: {missing}")
        self._run_policies: Dict[Step, RetryPolicy] = dict(self._policies)
        self._sleep = sleep
        self._graph = create_pipeline_graph(
            {
                Step.parsing: self._parse_node,
                Step.searching: self._search_node,
                Step.transforming: self._transform_node,
                Step.generating: self._generate_node,
                Step.validating: self._validate_node,
            }
        )

    def get_status(self) -> RunStatus:
        return self.progress.get_status()

    async def run(self, request: TaskRequest) -> Outcome:
        """
        Execute the pipeline for a task.

        Args:
            request: Validated task request

        Returns:
            Outcome with the report; partial=True if validation was absorbed

        Raises:
            PipelineFailedError: A step failed fatally
            UnclassifiedError: A step raised an error outside the taxonomy
            RuntimeError: The orchestrator was already used for a run
        """
        _log = f"[run={self.run_id}] [graph=pipeline] [api=run] "

        status = self.progress.start()
        log_step_transition("run_started", status, {"run_id": self.run_id})
        logger.info(
            f"{_log}Pipeline starting | query={request.query!r}, "
            f"max_results={request.options.max_search_results}, "
            f"timeout_multiplier={request.options.timeout_multiplier}"
        )

        multiplier = request.options.timeout_multiplier
        self._run_policies = {
            step: policy.scaled(multiplier) for step, policy in self._policies.items()
        }

        initial_state: PipelineGraphState = {
            "request": request,
            "run_id": self.run_id,
            "plan": None,
            "search_output": None,
            "transform_output": None,
            "report": None,
            "validation": None,
            "partial": False,
            "failure": None,
        }

        try:
            final_state = await self._graph.ainvoke(
                initial_state, {"recursion_limit": self.config.recursion_limit}
            )
        except asyncio.CancelledError:
            status = self.progress.abort("Run cancelled")
            log_step_transition("run_aborted", status, {"run_id": self.run_id})
            raise
        except Exception as e:
            status = self.progress.abort(str(e))
            log_step_transition("run_aborted", status, {"run_id": self.run_id})
            logger.exception(f"{_log}Pipeline aborted by unexpected error: {e}")
            raise

        status = self.progress.get_status()
        failure = final_state.get("failure")
        if failure is not None:
            logger.error(
                f"{_log}Pipeline failed | step={failure.step.value}, "
                f"error={status.last_error}"
            )
            raise PipelineFailedError(failure.step, status.last_error, status)

        partial = final_state.get("partial", False)
        logger.info(
            f"{_log}Pipeline finished | status={status.current_step.value}, "
            f"partial={partial}, steps={len(status.history)}"
        )

        return Outcome(
            report=final_state["report"],
            validation=final_state["validation"],
            history=list(status.history),
            partial=partial,
        )

    # ------------------------------------------------------------------
    # Step execution helpers
    # ------------------------------------------------------------------

    def _log_prefix(self, step: Step) -> str:
        return f"[run={self.run_id}] [graph=pipeline] [node={step.value}] "

    def _enter(self, step: Step) -> None:
        status = self.progress.enter(step)
        log_step_transition("step_entered", status, {"step": step.value})
        logger.info(f"{self._log_prefix(step)}Entering node")

    def _succeed(
        self, step: Step, result: Dict[str, Any], duration_ms: int, complete: bool = False
    ) -> None:
        status = self.progress.record_success(step, result, duration_ms, complete=complete)
        log_step_transition("step_completed", status, {"step": step.value, **result})
        logger.info(f"{self._log_prefix(step)}Step complete in {duration_ms}ms | {result}")

    def _fail(self, step: Step, error: StepError, duration_ms: int) -> Dict[str, Any]:
        last_error = f"{_FAILURE_PREFIXES[step]}: {error.message}"
        status = self.progress.record_failure(step, error.message, duration_ms, last_error)
        log_step_transition("step_failed", status, {"step": step.value})
        logger.error(
            f"{self._log_prefix(step)}Step failed ({type(error).__name__}) -> run failed | "
            f"{last_error}"
        )
        return {"failure": error}

    async def _execute(
        self, step: Step, operation: Callable[[], Awaitable[T]]
    ) -> Tuple[Optional[T], Optional[StepError], int]:
        started = time.perf_counter()
        try:
            output = await execute_with_policy(
                step,
                self._run_policies[step],
                operation,
                sleep=self._sleep,
                run_id=self.run_id,
            )
        except StepError as exc:
            return None, exc, _elapsed_ms(started)
        return output, None, _elapsed_ms(started)

    # ------------------------------------------------------------------
    # Graph nodes
    # ------------------------------------------------------------------

    async def _parse_node(self, state: PipelineGraphState) -> Dict[str, Any]:
        self._enter(Step.parsing)
        started = time.perf_counter()
        plan = build_plan(state["request"])
        self._succeed(Step.parsing, {"plan": plan.model_dump(mode="json")}, _elapsed_ms(started))
        return {"plan": plan}

    async def _search_node(self, state: PipelineGraphState) -> Dict[str, Any]:
        plan = state["plan"]
        self._enter(Step.searching)

        output, error, duration_ms = await self._execute(
            Step.searching,
            lambda: self._steps.search.execute(
                SearchInput(query=plan.search_query, max_results=plan.max_results)
            ),
        )
        if error is not None:
            return self._fail(Step.searching, error, duration_ms)

        self._succeed(Step.searching, {"result_count": len(output.results)}, duration_ms)
        return {"search_output": output}

    async def _transform_node(self, state: PipelineGraphState) -> Dict[str, Any]:
        plan = state["plan"]
        search_output = state["search_output"]
        self._enter(Step.transforming)

        output, error, duration_ms = await self._execute(
            Step.transforming,
            lambda: self._steps.transform.execute(
                TransformInput(
                    results=search_output.results,
                    transformation_type=plan.transformation_type,
                )
            ),
        )
        if error is not None:
            return self._fail(Step.transforming, error, duration_ms)

        self._succeed(
            Step.transforming, {"insight_count": len(output.data.insights)}, duration_ms
        )
        return {"transform_output": output}

    async def _generate_node(self, state: PipelineGraphState) -> Dict[str, Any]:
        plan = state["plan"]
        transformed = state["transform_output"].data
        self._enter(Step.generating)

        output, error, duration_ms = await self._execute(
            Step.generating,
            lambda: self._steps.report.execute(
                ReportInput(
                    transformed_data=transformed,
                    query=plan.search_query,
                    include_detailed_analysis=plan.include_detailed_analysis,
                )
            ),
        )
        if error is not None:
            return self._fail(Step.generating, error, duration_ms)

        self._succeed(Step.generating, {"section_count": len(output.sections)}, duration_ms)
        return {"report": output}

    async def _validate_node(self, state: PipelineGraphState) -> Dict[str, Any]:
        transformed = state["transform_output"].data
        report = state["report"]
        self._enter(Step.validating)

        output, error, duration_ms = await self._execute(
            Step.validating,
            lambda: self._steps.validate.execute(
                ValidationInput(transformed_data=transformed, report=report)
            ),
        )

        if error is None:
            self._succeed(
                Step.validating,
                {"score": output.score, "is_valid": output.is_valid},
                duration_ms,
                complete=True,
            )
            return {"validation": output, "partial": False}

        if not (self._run_policies[Step.validating].absorbable and error.transient):
            return self._fail(Step.validating, error, duration_ms)

        # Absorbed: the report is still the deliverable
        last_error = f"{_FAILURE_PREFIXES[Step.validating]}: {error.message}"
        status = self.progress.record_failure(
            Step.validating, error.message, duration_ms, last_error, terminal=Step.complete
        )
        log_step_transition("step_absorbed", status, {"step": Step.validating.value})
        logger.warning(
            f"{self._log_prefix(Step.validating)}Step failed ({type(error).__name__}), "
            f"returning partial result | {last_error}"
        )
        return {
            "validation": ValidationOutput.failed("Validation step failed"),
            "partial": True,
        }
