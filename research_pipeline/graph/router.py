"""
Routing logic for the pipeline graph.

Determines which step to run next based on what data has been populated.
"""

import logging
from typing import Literal

from research_pipeline.graph.state import PipelineGraphState


logger = logging.getLogger(__name__)

NextStep = Literal["parsing", "searching", "transforming", "generating", "validating", "end"]


def route_next_step(state: PipelineGraphState) -> NextStep:
    """
    Determine the next step to execute based on populated state.

    Routing logic:
    1. If a fatal failure was recorded -> end
    2. The first missing handoff slot names the next step, in order:
       plan, search_output, transform_output, report, validation
    3. Otherwise -> end

    Args:
        state: Current pipeline graph state

    Returns:
        Name of the next node to execute
    """
    run_id = state.get("run_id") or "unknown"
    _log = f"[run={run_id}] [graph=pipeline] [router=route_next_step] "

    failure = state.get("failure")
    if failure is not None:
        step = failure.step.value if failure.step else "unknown"
        logger.info(f"{_log}Routing to 'end' | fatal failure at {step}")
        return "end"

    slots = [
        ("plan", "parsing"),
        ("search_output", "searching"),
        ("transform_output", "transforming"),
        ("report", "generating"),
        ("validation", "validating"),
    ]
    for slot, node in slots:
        if state.get(slot) is None:
            logger.info(f"{_log}Routing to '{node}' | {slot} missing")
            return node

    logger.info(f"{_log}Routing to 'end' | all steps concluded")
    return "end"
