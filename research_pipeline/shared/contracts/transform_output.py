"""
Transform step contract.

The transformed data is the handoff between the transform step and both
the report and validation steps.
"""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field

from research_pipeline.shared.contracts.search_output import SearchResult


class TransformationType(str, Enum):
    """How search results are condensed."""

    summarize = "summarize"
    extract_facts = "extract_facts"
    categorize = "categorize"


class TransformInput(BaseModel):
    """Input to the transform step."""

    results: List[SearchResult] = Field(default_factory=list)
    transformation_type: TransformationType = TransformationType.categorize


class TransformedData(BaseModel):
    """Insights, categories and sources extracted from search results."""

    insights: List[str] = Field(default_factory=list, description="Ordered insights")
    categories: Dict[str, List[str]] = Field(
        default_factory=dict, description="Category name -> result titles"
    )
    summary: str = Field(default="", description="Condensed summary")
    sources: List[str] = Field(default_factory=list, description="Source URLs")


class TransformMetadata(BaseModel):
    """Bookkeeping for a transform run."""

    items_processed: int = Field(ge=0)
    transformation_type: TransformationType


class TransformOutput(BaseModel):
    """Contract for transform step output."""

    data: TransformedData
    metadata: TransformMetadata
