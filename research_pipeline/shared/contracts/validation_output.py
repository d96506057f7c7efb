"""
Validation step contract.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from research_pipeline.shared.contracts.report_output import Report
from research_pipeline.shared.contracts.transform_output import TransformedData


class Severity(str, Enum):
    """Severity of a validation issue."""

    error = "error"
    warning = "warning"
    info = "info"


class ValidationInput(BaseModel):
    """Input to the validation step."""

    transformed_data: Optional[TransformedData] = None
    report: Optional[Report] = None


class ValidationIssue(BaseModel):
    """A single problem found in the transformed data or report."""

    severity: Severity
    message: str
    location: Optional[str] = None


class ValidationOutput(BaseModel):
    """Contract for validation step output."""

    is_valid: bool
    score: int = Field(ge=0, le=100, description="Quality score out of 100")
    issues: List[ValidationIssue] = Field(default_factory=list)
    checked_at: str = Field(description="ISO timestamp of the check")

    @classmethod
    def failed(cls, message: str) -> "ValidationOutput":
        """Degraded payload used when the validation step itself failed."""
        return cls(
            is_valid=False,
            score=0,
            issues=[ValidationIssue(severity=Severity.error, message=message)],
            checked_at=datetime.now(timezone.utc).isoformat(),
        )
