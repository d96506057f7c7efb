"""
Report step contract.

Defines the report that is the deliverable of a run.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from research_pipeline.shared.contracts.transform_output import TransformedData


class ReportInput(BaseModel):
    """Input to the report step."""

    transformed_data: Optional[TransformedData] = None
    query: Optional[str] = None
    include_detailed_analysis: bool = True


class ReportSection(BaseModel):
    """A headed block of report content."""

    heading: str
    content: str


class Report(BaseModel):
    """Contract for report step output."""

    title: str = Field(description="Report title")
    executive_summary: str = Field(description="Opening summary paragraph")
    sections: List[ReportSection] = Field(
        default_factory=list, description="Ordered report sections"
    )
    conclusion: str = Field(description="Closing paragraph")
    generated_at: str = Field(description="ISO timestamp of generation")

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "title": "Research Report: quantum computing",
                "executive_summary": "This report provides a comprehensive analysis...",
                "sections": [
                    {"heading": "Key Insights", "content": "1. Insight 1: ..."},
                    {"heading": "Sources", "content": "1. https://arxiv.org/..."},
                ],
                "conclusion": "In conclusion, ...",
                "generated_at": "2025-01-01T00:00:00+00:00",
            }
        }
