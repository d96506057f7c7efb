"""
Pipeline graph state schema.

Defines the state that flows through the pipeline graph, carrying the
task, the plan and each step's handoff output.
"""

from typing import TypedDict, Optional

from research_pipeline.shared.contracts.pipeline import ExecutionPlan, TaskRequest
from research_pipeline.shared.contracts.report_output import Report
from research_pipeline.shared.contracts.search_output import SearchOutput
from research_pipeline.shared.contracts.transform_output import TransformOutput
from research_pipeline.shared.contracts.validation_output import ValidationOutput
from research_pipeline.shared.errors import StepError


class PipelineGraphState(TypedDict):
    """
    State schema for the pipeline graph.

    Handoff slots are populated as steps complete; the router reads them
    to decide which step runs next. Progress (current step, history,
    timing) is NOT kept here: it lives in the run's ProgressReporter so
    it can be read while the graph is mid-flight.
    """

    # Task context
    request: TaskRequest
    run_id: Optional[str]

    # Step handoff slots (populated as steps complete)
    plan: Optional[ExecutionPlan]
    search_output: Optional[SearchOutput]
    transform_output: Optional[TransformOutput]
    report: Optional[Report]
    validation: Optional[ValidationOutput]

    # Terminal tracking
    partial: bool
    failure: Optional[StepError]
