"""
Search step contract.

Defines the input the orchestrator hands to the search step and the
structured results it gets back for the transform step.
"""

from typing import List

from pydantic import BaseModel, Field


class SearchInput(BaseModel):
    """Input to the search step."""

    query: str = Field(description="Search query")
    max_results: int = Field(description="Maximum number of results to return")


class SearchResult(BaseModel):
    """A single search hit."""

    title: str = Field(description="Result title")
    snippet: str = Field(description="Short excerpt from the source")
    url: str = Field(description="Source URL")
    relevance_score: float = Field(
        ge=0, le=1, description="Relevance of the hit to the query"
    )


class SearchMetadata(BaseModel):
    """Provenance of a search response."""

    source: str = Field(description="Search backend identifier")
    timestamp: str = Field(description="ISO timestamp of the search")
    total_results: int = Field(ge=0, description="Number of results returned")


class SearchOutput(BaseModel):
    """Contract for search step output."""

    results: List[SearchResult] = Field(
        default_factory=list, description="Ordered search results"
    )
    metadata: SearchMetadata = Field(description="Response metadata")
