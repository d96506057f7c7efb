"""Step contracts for handoffs between pipeline steps."""

from research_pipeline.shared.contracts.pipeline import (
    ExecutionPlan,
    Outcome,
    PIPELINE_ORDER,
    Step,
    StepResult,
    TaskOptions,
    TaskRequest,
)
from research_pipeline.shared.contracts.search_output import SearchInput, SearchOutput, SearchResult
from research_pipeline.shared.contracts.transform_output import (
    TransformationType,
    TransformedData,
    TransformInput,
    TransformOutput,
)
from research_pipeline.shared.contracts.report_output import Report, ReportInput, ReportSection
from research_pipeline.shared.contracts.validation_output import (
    Severity,
    ValidationInput,
    ValidationIssue,
    ValidationOutput,
)

__all__ = [
    "ExecutionPlan",
    "Outcome",
    "PIPELINE_ORDER",
    "Step",
    "StepResult",
    "TaskOptions",
    "TaskRequest",
    "SearchInput",
    "SearchOutput",
    "SearchResult",
    "TransformationType",
    "TransformedData",
    "TransformInput",
    "TransformOutput",
    "Report",
    "ReportInput",
    "ReportSection",
    "Severity",
    "ValidationInput",
    "ValidationIssue",
    "ValidationOutput",
]
