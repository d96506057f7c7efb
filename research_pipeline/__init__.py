"""
Research pipeline package.

This package contains:
- shared/: Common infrastructure (contracts, errors, logging, retry policies)
- steps/: Step bodies (search, transform, report, validation)
- graph/: Pipeline graph, orchestrator, progress reporting and run registry
"""

from research_pipeline.graph.build import create_pipeline_graph
from research_pipeline.graph.orchestrator import ResearchOrchestrator

__all__ = ["create_pipeline_graph", "ResearchOrchestrator"]
