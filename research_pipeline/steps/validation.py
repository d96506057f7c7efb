"""
Validation step.

Checks the transformed data and report for completeness and assigns a
quality score: 100 minus a weighted penalty per issue severity.
"""

import random
from datetime import datetime, timezone
from typing import Dict, List, Optional

from research_pipeline.shared.contracts.pipeline import Step
from research_pipeline.shared.contracts.report_output import Report
from research_pipeline.shared.contracts.transform_output import TransformedData
from research_pipeline.shared.contracts.validation_output import (
    Severity,
    ValidationInput,
    ValidationIssue,
    ValidationOutput,
)
from research_pipeline.shared.errors import ValidationError
from research_pipeline.steps.base import MockStep


MIN_INSIGHTS = 1
MIN_SOURCES = 1
MIN_SECTIONS = 2
MIN_SUMMARY_LENGTH = 50
MIN_VALID_SCORE = 50

SEVERITY_PENALTIES: Dict[Severity, int] = {
    Severity.error: 20,
    Severity.warning: 10,
    Severity.info: 2,
}


def validate_transformed_data(data: TransformedData) -> List[ValidationIssue]:
    issues = []

    if len(data.insights) < MIN_INSIGHTS:
        issues.append(
            ValidationIssue(
                severity=Severity.warning,
                message=(
                    f"Only {len(data.insights)} insights extracted, "
                    f"expected at least {MIN_INSIGHTS}"
                ),
                location="transformed_data.insights",
            )
        )

    if len(data.sources) < MIN_SOURCES:
        issues.append(
            ValidationIssue(
                severity=Severity.error,
                message="No sources provided for the analysis",
                location="transformed_data.sources",
            )
        )

    if len(data.summary) < MIN_SUMMARY_LENGTH:
        issues.append(
            ValidationIssue(
                severity=Severity.warning,
                message=f"Summary is too short ({len(data.summary)} chars), may lack detail",
                location="transformed_data.summary",
            )
        )

    empty_insights = sum(1 for insight in data.insights if not insight.strip())
    if empty_insights:
        issues.append(
            ValidationIssue(
                severity=Severity.warning,
                message=f"{empty_insights} empty insights detected",
                location="transformed_data.insights",
            )
        )

    return issues


def validate_report(report: Report) -> List[ValidationIssue]:
    issues = []

    if not report.title.strip():
        issues.append(
            ValidationIssue(
                severity=Severity.error,
                message="Report title is missing",
                location="report.title",
            )
        )

    if len(report.executive_summary) < MIN_SUMMARY_LENGTH:
        issues.append(
            ValidationIssue(
                severity=Severity.warning,
                message="Executive summary is missing or too short",
                location="report.executive_summary",
            )
        )

    if len(report.sections) < MIN_SECTIONS:
        issues.append(
            ValidationIssue(
                severity=Severity.warning,
                message=(
                    f"Report has only {len(report.sections)} sections, "
                    f"expected at least {MIN_SECTIONS}"
                ),
                location="report.sections",
            )
        )

    for i, section in enumerate(report.sections):
        if not section.heading.strip():
            issues.append(
                ValidationIssue(
                    severity=Severity.warning,
                    message=f"Section {i + 1} has no heading",
                    location=f"report.sections[{i}].heading",
                )
            )
        if not section.content.strip():
            issues.append(
                ValidationIssue(
                    severity=Severity.warning,
                    message=f'Section "{section.heading}" has no content',
                    location=f"report.sections[{i}].content",
                )
            )

    if not report.conclusion.strip():
        issues.append(
            ValidationIssue(
                severity=Severity.info,
                message="Report has no conclusion",
                location="report.conclusion",
            )
        )

    if not report.generated_at:
        issues.append(
            ValidationIssue(
                severity=Severity.info,
                message="Report generation timestamp is missing",
                location="report.generated_at",
            )
        )

    return issues


def calculate_score(issues: List[ValidationIssue]) -> int:
    penalty = sum(SEVERITY_PENALTIES[issue.severity] for issue in issues)
    return max(0, 100 - penalty)


class MockValidationStep(MockStep):
    """Rule-based report validation."""

    name = Step.validating

    def __init__(self, delay: float = 0.1, rng: Optional[random.Random] = None):
        super().__init__(rng)
        self.delay = delay

    async def execute(self, step_input: ValidationInput) -> ValidationOutput:
        if step_input.transformed_data is None:
            raise ValidationError("transformed_data is required for validation", self.name)
        if step_input.report is None:
            raise ValidationError("report is required for validation", self.name)

        await self._simulate_latency((self.delay, self.delay))

        issues = validate_transformed_data(step_input.transformed_data) + validate_report(
            step_input.report
        )
        score = calculate_score(issues)
        has_errors = any(issue.severity == Severity.error for issue in issues)

        return ValidationOutput(
            is_valid=not has_errors and score >= MIN_VALID_SCORE,
            score=score,
            issues=issues,
            checked_at=datetime.now(timezone.utc).isoformat(),
        )
