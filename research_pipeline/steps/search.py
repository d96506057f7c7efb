"""
Search step.

Simulates an external search API. Generates contextually aware but
fabricated results so the pipeline can run without a real backend.
"""

import logging
import random
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from research_pipeline.shared.contracts.pipeline import Step
from research_pipeline.shared.contracts.search_output import (
    SearchInput,
    SearchMetadata,
    SearchOutput,
    SearchResult,
)
from research_pipeline.shared.errors import ServiceUnavailableError, ValidationError
from research_pipeline.steps.base import MockStep


logger = logging.getLogger(__name__)

MAX_RESULTS_LIMIT = 100

_TOPICS = [
    "latest developments",
    "comprehensive guide",
    "expert analysis",
    "industry trends",
    "research findings",
    "case studies",
    "best practices",
    "future outlook",
]

_SOURCES = [
    "techcrunch.com",
    "wired.com",
    "nature.com",
    "arxiv.org",
    "medium.com",
    "github.com",
    "stackoverflow.com",
    "wikipedia.org",
]


def generate_mock_results(query: str, max_results: int) -> List[SearchResult]:
    """
    Build deterministic search results for a query.

    At most len(_TOPICS) results are produced, with relevance decreasing
    by 0.08 per rank from 0.95.
    """
    count = min(max_results, len(_TOPICS))
    slug = "-".join(query.lower().split())
    results = []
    for i in range(count):
        topic = _TOPICS[i]
        results.append(
            SearchResult(
                title=f"{query}: {topic[0].upper()}{topic[1:]}",
                snippet=(
                    f"Discover the {topic} in {query}. This comprehensive resource "
                    f"covers key aspects and provides actionable insights for "
                    f"practitioners and researchers alike."
                ),
                url=f"https://{_SOURCES[i % len(_SOURCES)]}/article/{slug}-{i + 1}",
                relevance_score=round(0.95 - i * 0.08, 2),
            )
        )
    return results


class MockSearchStep(MockStep):
    """Search step backed by fabricated results."""

    name = Step.searching

    def __init__(
        self,
        failure_rate: float = 0.1,
        delay: Tuple[float, float] = (0.2, 0.8),
        rng: Optional[random.Random] = None,
    ):
        super().__init__(rng)
        self.failure_rate = failure_rate
        self.delay = delay

    async def execute(self, step_input: SearchInput) -> SearchOutput:
        query = (step_input.query or "").strip()
        if not query:
            raise ValidationError("Search query cannot be empty", self.name)
        if not 1 <= step_input.max_results <= MAX_RESULTS_LIMIT:
            raise ValidationError(
                f"max_results must be between 1 and {MAX_RESULTS_LIMIT}", self.name
            )

        await self._simulate_latency(self.delay)

        if self._roll_failure(self.failure_rate):
            raise ServiceUnavailableError(
                "Search service temporarily unavailable", self.name
            )

        results = generate_mock_results(query, step_input.max_results)
        logger.debug(f"[step=searching] Generated {len(results)} results for '{query}'")

        return SearchOutput(
            results=results,
            metadata=SearchMetadata(
                source="mock-search-api",
                timestamp=datetime.now(timezone.utc).isoformat(),
                total_results=len(results),
            ),
        )
