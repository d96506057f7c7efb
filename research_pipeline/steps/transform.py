"""
Transform step.

Condenses search results into insights, relevance categories, a summary
and a source list. Stands in for NLP/LLM-based extraction.
"""

import random
from typing import Dict, List, Optional

from research_pipeline.shared.contracts.pipeline import Step
from research_pipeline.shared.contracts.search_output import SearchResult
from research_pipeline.shared.contracts.transform_output import (
    TransformationType,
    TransformedData,
    TransformInput,
    TransformMetadata,
    TransformOutput,
)
from research_pipeline.shared.errors import ValidationError
from research_pipeline.steps.base import MockStep


HIGH_RELEVANCE = "High Relevance"
MEDIUM_RELEVANCE = "Medium Relevance"
SUPPORTING = "Supporting Information"


def extract_insights(results: List[SearchResult]) -> List[str]:
    """First sentence of each of the top five snippets."""
    return [
        f"Insight {i + 1}: {result.snippet.split('.')[0]}."
        for i, result in enumerate(results[:5])
    ]


def categorize_results(results: List[SearchResult]) -> Dict[str, List[str]]:
    """Bucket result titles by relevance score."""
    categories: Dict[str, List[str]] = {
        HIGH_RELEVANCE: [],
        MEDIUM_RELEVANCE: [],
        SUPPORTING: [],
    }
    for result in results:
        if result.relevance_score >= 0.8:
            categories[HIGH_RELEVANCE].append(result.title)
        elif result.relevance_score >= 0.5:
            categories[MEDIUM_RELEVANCE].append(result.title)
        else:
            categories[SUPPORTING].append(result.title)
    return categories


def generate_summary(results: List[SearchResult]) -> str:
    if not results:
        return "No results available for summarization."
    snippets = " ".join(r.snippet for r in results[:3])
    return f"Based on {len(results)} sources: {snippets}"


class MockTransformStep(MockStep):
    """Transform step using simple text heuristics."""

    name = Step.transforming

    def __init__(self, delay: float = 0.3, rng: Optional[random.Random] = None):
        super().__init__(rng)
        self.delay = delay

    async def execute(self, step_input: TransformInput) -> TransformOutput:
        results = step_input.results
        if not results:
            raise ValidationError("results must be a non-empty list", self.name)

        await self._simulate_latency((self.delay, self.delay))

        sources = [r.url for r in results]
        summary = generate_summary(results)
        mode = step_input.transformation_type

        if mode == TransformationType.summarize:
            data = TransformedData(insights=[summary], summary=summary, sources=sources)
        elif mode == TransformationType.extract_facts:
            data = TransformedData(
                insights=extract_insights(results), summary=summary, sources=sources
            )
        else:
            data = TransformedData(
                insights=extract_insights(results),
                categories=categorize_results(results),
                summary=summary,
                sources=sources,
            )

        return TransformOutput(
            data=data,
            metadata=TransformMetadata(
                items_processed=len(results), transformation_type=mode
            ),
        )
