"""
Execution plan builder.

Turns an accepted TaskRequest into the normalized plan the orchestrator
executes. Pure: no side effects and no failure modes, since every
optional field has a default.
"""

from research_pipeline.shared.contracts.pipeline import ExecutionPlan, TaskRequest
from research_pipeline.shared.contracts.transform_output import TransformationType


def build_plan(request: TaskRequest) -> ExecutionPlan:
    """
    Build the execution plan for a task.

    The transformation type is always categorize; it is not yet
    driven by caller input.

    Args:
        request: Task accepted at intake (query already validated non-blank)

    Returns:
        Immutable ExecutionPlan
    """
    options = request.options
    return ExecutionPlan(
        search_query=request.query.strip(),
        max_results=options.max_search_results,
        transformation_type=TransformationType.categorize,
        include_detailed_analysis=options.include_detailed_analysis,
    )
