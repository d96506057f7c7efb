"""
Research pipeline graph.

Sequences the pipeline steps:
    parsing -> searching -> transforming -> generating -> validating -> done

One ResearchOrchestrator drives one run; its ProgressReporter answers
status queries while the run is in flight.
"""

from research_pipeline.graph.build import create_pipeline_graph
from research_pipeline.graph.orchestrator import ResearchOrchestrator
from research_pipeline.graph.plan import build_plan
from research_pipeline.graph.progress import ProgressReporter, RunStatus
from research_pipeline.graph.registry import RunRegistry, RunRecord

__all__ = [
    "create_pipeline_graph",
    "ResearchOrchestrator",
    "build_plan",
    "ProgressReporter",
    "RunStatus",
    "RunRegistry",
    "RunRecord",
]
