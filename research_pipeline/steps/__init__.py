"""
Pipeline step bodies.

Each step satisfies the PipelineStep contract. The bundled
implementations fabricate content; swap them for real providers by
passing a different PipelineSteps to the orchestrator.
"""

from research_pipeline.steps.base import MockStep, PipelineStep, PipelineSteps
from research_pipeline.steps.report import MockReportStep
from research_pipeline.steps.search import MockSearchStep
from research_pipeline.steps.transform import MockTransformStep
from research_pipeline.steps.validation import MockValidationStep

__all__ = [
    "MockStep",
    "PipelineStep",
    "PipelineSteps",
    "MockSearchStep",
    "MockTransformStep",
    "MockReportStep",
    "MockValidationStep",
]
