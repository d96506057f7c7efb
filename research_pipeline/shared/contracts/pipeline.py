"""
Pipeline-level contracts.

Defines the task request accepted at intake, the execution plan derived
from it, the step enumeration, per-step history entries, and the
terminal outcome of a run.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from research_pipeline.shared.contracts.report_output import Report
from research_pipeline.shared.contracts.transform_output import TransformationType
from research_pipeline.shared.contracts.validation_output import ValidationOutput


class Step(str, Enum):
    """Pipeline steps plus the pending and terminal markers."""

    pending = "pending"
    parsing = "parsing"
    searching = "searching"
    transforming = "transforming"
    generating = "generating"
    validating = "validating"
    complete = "complete"
    failed = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (Step.complete, Step.failed)


# Strict execution order of the working steps
PIPELINE_ORDER: List[Step] = [
    Step.parsing,
    Step.searching,
    Step.transforming,
    Step.generating,
    Step.validating,
]


class TaskOptions(BaseModel):
    """Optional tuning supplied with a task."""

    model_config = ConfigDict(frozen=True)

    max_search_results: int = Field(
        default=5, ge=1, le=100, description="Number of search results to fetch"
    )
    include_detailed_analysis: bool = Field(
        default=True, description="Add analysis and methodology report sections"
    )
    timeout_multiplier: float = Field(
        default=1.0, gt=0, description="Scales every step's per-attempt timeout"
    )


class TaskRequest(BaseModel):
    """A research task as accepted at intake."""

    model_config = ConfigDict(frozen=True)

    query: str = Field(description="Research query")
    options: TaskOptions = Field(default_factory=TaskOptions)

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("query is required and must be a non-empty string")
        return value


class ExecutionPlan(BaseModel):
    """Normalized plan the orchestrator executes."""

    model_config = ConfigDict(frozen=True)

    search_query: str
    max_results: int = 5
    transformation_type: TransformationType = TransformationType.categorize
    include_detailed_analysis: bool = True


class StepResult(BaseModel):
    """History entry appended when a step concludes."""

    model_config = ConfigDict(frozen=True)

    step: Step
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    duration_ms: Optional[int] = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> "StepResult":
        if (self.result is None) == (self.error is None):
            raise ValueError("StepResult carries exactly one of result or error")
        return self


class Outcome(BaseModel):
    """Terminal value of a run that produced a report."""

    report: Report
    validation: ValidationOutput
    history: List[StepResult] = Field(default_factory=list)
    partial: bool = False
