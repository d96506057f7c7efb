"""
Report step.

Builds a structured research report from transformed data. Stands in for
an LLM-backed report writer.
"""

import random
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from research_pipeline.shared.contracts.pipeline import Step
from research_pipeline.shared.contracts.report_output import (
    Report,
    ReportInput,
    ReportSection,
)
from research_pipeline.shared.contracts.transform_output import TransformedData
from research_pipeline.shared.errors import ServiceUnavailableError, ValidationError
from research_pipeline.steps.base import MockStep


_DETAILED_ANALYSIS = (
    "A deeper examination of the data reveals several important patterns. "
    "The sources span multiple domains, providing a well-rounded perspective "
    "on the topic. Cross-referencing the insights shows strong consensus on "
    "core findings, with some areas of ongoing debate that merit further "
    "investigation."
)


def generate_executive_summary(data: TransformedData, query: str) -> str:
    return (
        f'This report provides a comprehensive analysis of "{query}" based on '
        f"{len(data.sources)} authoritative sources. Key findings include "
        f"{len(data.insights)} distinct insights that highlight current trends, "
        f"challenges, and opportunities in this domain. {data.summary}"
    )


def generate_sections(
    data: TransformedData, include_detailed_analysis: bool
) -> List[ReportSection]:
    """
    Assemble report sections in display order.

    Key Insights and Sources are always candidates; Categorized Findings
    appears only when some category is non-empty, and the analysis and
    methodology sections only for detailed reports.
    """
    sections: List[ReportSection] = []

    if data.insights:
        sections.append(
            ReportSection(
                heading="Key Insights",
                content="\n".join(
                    f"{i + 1}. {insight}" for i, insight in enumerate(data.insights)
                ),
            )
        )

    category_blocks = [
        f"### {category}\n" + "\n".join(f"- {item}" for item in items)
        for category, items in data.categories.items()
        if items
    ]
    if category_blocks:
        sections.append(
            ReportSection(
                heading="Categorized Findings", content="\n\n".join(category_blocks)
            )
        )

    if include_detailed_analysis:
        sections.append(
            ReportSection(heading="Detailed Analysis", content=_DETAILED_ANALYSIS)
        )
        sections.append(
            ReportSection(
                heading="Methodology",
                content=(
                    "This analysis was conducted using the following methodology:\n"
                    f"1. Aggregated data from {len(data.sources)} sources\n"
                    "2. Extracted key insights using semantic analysis\n"
                    "3. Categorized findings by relevance and topic\n"
                    "4. Synthesized conclusions based on cross-referenced data"
                ),
            )
        )

    sections.append(
        ReportSection(
            heading="Sources",
            content="\n".join(
                f"{i + 1}. {source}" for i, source in enumerate(data.sources)
            ),
        )
    )

    return sections


def generate_conclusion(data: TransformedData, query: str) -> str:
    return (
        f'In conclusion, the research on "{query}" reveals a dynamic and evolving '
        f"landscape. The {len(data.insights)} key insights identified provide "
        f"actionable guidance for stakeholders. Further monitoring of developments "
        f"in this space is recommended to stay current with emerging trends."
    )


class MockReportStep(MockStep):
    """Report step producing templated prose."""

    name = Step.generating

    def __init__(
        self,
        failure_rate: float = 0.05,
        delay: Tuple[float, float] = (0.5, 1.5),
        rng: Optional[random.Random] = None,
    ):
        super().__init__(rng)
        self.failure_rate = failure_rate
        self.delay = delay

    async def execute(self, step_input: ReportInput) -> Report:
        data = step_input.transformed_data
        if data is None:
            raise ValidationError("transformed_data is required", self.name)
        query = (step_input.query or "").strip()
        if not query:
            raise ValidationError("query is required for report generation", self.name)

        await self._simulate_latency(self.delay)

        if self._roll_failure(self.failure_rate):
            raise ServiceUnavailableError(
                "Report generation service temporarily unavailable", self.name
            )

        return Report(
            title=f"Research Report: {query}",
            executive_summary=generate_executive_summary(data, query),
            sections=generate_sections(data, step_input.include_detailed_analysis),
            conclusion=generate_conclusion(data, query),
            generated_at=datetime.now(timezone.utc).isoformat(),
        )
