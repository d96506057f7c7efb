"""
Configuration for the research pipeline.

Centralizes tunables for the pipeline graph and the mock step bodies,
making it easy to change behavior without modifying the graph wiring.
Values can be overridden through RESEARCH_* environment variables
(a .env file is loaded if present).
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline graph and mock steps.

    Attributes:
        recursion_limit: Maximum number of graph steps (prevents runaway loops)
        run_id_prefix: Prefix for run identifiers issued by the registry
        search_failure_rate: Probability a mock search attempt is unavailable
        report_failure_rate: Probability a mock report attempt is unavailable
        search_delay: (min, max) simulated search latency in seconds
        transform_delay: Simulated transform latency in seconds
        report_delay: (min, max) simulated report latency in seconds
        validation_delay: Simulated validation latency in seconds
        max_finished_runs: Finished runs the registry keeps before evicting
            the oldest (None keeps every run)
        transition_log_level: Level of the JSON step-transition log records
    """

    recursion_limit: int = 25
    run_id_prefix: str = "agent-"

    # Mock step behavior
    search_failure_rate: float = 0.1
    report_failure_rate: float = 0.05
    search_delay: Tuple[float, float] = field(default=(0.2, 0.8))
    transform_delay: float = 0.3
    report_delay: Tuple[float, float] = field(default=(0.5, 1.5))
    validation_delay: float = 0.1

    # Service
    max_finished_runs: Optional[int] = 1000
    transition_log_level: str = "WARNING"


# Default configuration instance
DEFAULT_CONFIG = PipelineConfig()


def _env_float(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    return int(raw)


def get_config(
    recursion_limit: Optional[int] = None,
    search_failure_rate: Optional[float] = None,
    report_failure_rate: Optional[float] = None,
) -> PipelineConfig:
    """
    Create a configuration with optional overrides.

    Explicit arguments win over RESEARCH_* environment variables, which
    win over DEFAULT_CONFIG.

    Args:
        recursion_limit: Override for graph recursion limit
        search_failure_rate: Override for mock search failure rate
        report_failure_rate: Override for mock report failure rate

    Returns:
        PipelineConfig with overrides applied
    """
    env_search_rate = _env_float("RESEARCH_SEARCH_FAILURE_RATE")
    env_report_rate = _env_float("RESEARCH_REPORT_FAILURE_RATE")
    env_max_finished = _env_int("RESEARCH_MAX_FINISHED_RUNS")

    return PipelineConfig(
        recursion_limit=recursion_limit or DEFAULT_CONFIG.recursion_limit,
        run_id_prefix=os.environ.get("RESEARCH_RUN_ID_PREFIX", DEFAULT_CONFIG.run_id_prefix),
        search_failure_rate=search_failure_rate
        if search_failure_rate is not None
        else env_search_rate
        if env_search_rate is not None
        else DEFAULT_CONFIG.search_failure_rate,
        report_failure_rate=report_failure_rate
        if report_failure_rate is not None
        else env_report_rate
        if env_report_rate is not None
        else DEFAULT_CONFIG.report_failure_rate,
        max_finished_runs=env_max_finished
        if env_max_finished is not None
        else DEFAULT_CONFIG.max_finished_runs,
        transition_log_level=os.environ.get(
            "RESEARCH_TRANSITION_LOG_LEVEL", DEFAULT_CONFIG.transition_log_level
        ).upper(),
    )
