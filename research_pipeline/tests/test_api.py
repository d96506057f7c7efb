"""
Tests for the run registry and the workflow HTTP endpoints.
"""

import time

import pytest
from fastapi.testclient import TestClient

from research_pipeline.graph import orchestrator_api
from research_pipeline.graph.config import PipelineConfig, get_config
from research_pipeline.graph.orchestrator import ResearchOrchestrator
from research_pipeline.graph.registry import RunRegistry
from research_pipeline.main import app
from research_pipeline.shared.contracts.pipeline import Step, TaskOptions, TaskRequest
from research_pipeline.steps.base import PipelineSteps
from research_pipeline.steps.report import MockReportStep
from research_pipeline.steps.search import MockSearchStep
from research_pipeline.steps.transform import MockTransformStep
from research_pipeline.steps.validation import MockValidationStep


# ============================================================================
# Test Fixtures
# ============================================================================


async def _no_sleep(seconds: float) -> None:
    return None


def _steps(search_failure_rate: float = 0.0) -> PipelineSteps:
    return PipelineSteps(
        search=MockSearchStep(failure_rate=search_failure_rate, delay=(0.0, 0.0)),
        transform=MockTransformStep(delay=0.0),
        report=MockReportStep(failure_rate=0.0, delay=(0.0, 0.0)),
        validate=MockValidationStep(delay=0.0),
    )


def _registry(search_failure_rate: float = 0.0, prefix: str = "agent-") -> RunRegistry:
    return RunRegistry(
        config=PipelineConfig(run_id_prefix=prefix),
        orchestrator_factory=lambda run_id: ResearchOrchestrator(
            steps=_steps(search_failure_rate), run_id=run_id, sleep=_no_sleep
        ),
    )


@pytest.fixture
def client(monkeypatch):
    """TestClient backed by a registry of fast, reliable runs."""
    monkeypatch.setattr(orchestrator_api, "_registry", _registry())
    with TestClient(app) as test_client:
        yield test_client


def _poll_until_finished(client, run_id, timeout=5.0):
    deadline = time.monotonic() + timeout
    while True:
        response = client.get(f"/api/workflow/{run_id}/status")
        body = response.json()
        if Step(body["current_step"]).is_terminal and (body["result"] or body["error"]):
            return body
        if time.monotonic() > deadline:
            raise AssertionError(f"Run {run_id} did not finish: {body}")
        time.sleep(0.01)


# ============================================================================
# TestRunRegistry
# ============================================================================


class TestRunRegistry:
    """Tests for RunRegistry."""

    @pytest.mark.asyncio
    async def test_run_completes(self):
        registry = _registry(prefix="test-")
        run_id = registry.start(
            TaskRequest(query="quantum computing", options=TaskOptions(max_search_results=3))
        )

        assert run_id.startswith("test-")
        assert run_id in registry

        record = await registry.wait(run_id)

        assert record.finished
        assert record.error is None
        assert record.status.current_step == Step.complete
        assert record.outcome.report.title == "Research Report: quantum computing"
        assert len(record.outcome.history) == 5

    @pytest.mark.asyncio
    async def test_failed_run_reports_error(self):
        registry = _registry(search_failure_rate=1.0)
        run_id = registry.start(TaskRequest(query="ai"))

        record = await registry.wait(run_id)

        assert record.status.current_step == Step.failed
        assert record.outcome is None
        assert record.error == "Search failed: Search service temporarily unavailable"

    @pytest.mark.asyncio
    async def test_runs_get_distinct_ids(self):
        registry = _registry()
        first = registry.start(TaskRequest(query="one"))
        second = registry.start(TaskRequest(query="two"))

        assert first != second
        assert len(registry) == 2

        one = await registry.wait(first)
        two = await registry.wait(second)
        assert one.outcome.report.title == "Research Report: one"
        assert two.outcome.report.title == "Research Report: two"

    @pytest.mark.asyncio
    async def test_oldest_finished_runs_evicted(self):
        registry = RunRegistry(
            config=PipelineConfig(max_finished_runs=1),
            orchestrator_factory=lambda run_id: ResearchOrchestrator(
                steps=_steps(), run_id=run_id, sleep=_no_sleep
            ),
        )
        first = registry.start(TaskRequest(query="one"))
        await registry.wait(first)
        second = registry.start(TaskRequest(query="two"))
        await registry.wait(second)

        third = registry.start(TaskRequest(query="three"))

        assert first not in registry
        assert second in registry
        assert third in registry
        with pytest.raises(KeyError):
            registry.get(first)
        assert (await registry.wait(third)).outcome.report.title == "Research Report: three"

    @pytest.mark.asyncio
    async def test_in_flight_runs_are_kept(self):
        registry = RunRegistry(
            config=PipelineConfig(max_finished_runs=0),
            orchestrator_factory=lambda run_id: ResearchOrchestrator(
                steps=_steps(), run_id=run_id, sleep=_no_sleep
            ),
        )
        first = registry.start(TaskRequest(query="one"))
        second = registry.start(TaskRequest(query="two"))

        assert len(registry) == 2
        await registry.wait(first)
        await registry.wait(second)

    def test_unknown_run(self):
        with pytest.raises(KeyError):
            _registry().get("agent-missing")


# ============================================================================
# TestServiceRegistry
# ============================================================================


class TestServiceRegistry:
    """The service registry is configured from RESEARCH_* variables."""

    def test_registry_reads_environment(self, monkeypatch):
        monkeypatch.setattr(orchestrator_api, "_registry", None)
        monkeypatch.setenv("RESEARCH_SEARCH_FAILURE_RATE", "1.0")
        monkeypatch.setenv("RESEARCH_RUN_ID_PREFIX", "env-")
        monkeypatch.setenv("RESEARCH_MAX_FINISHED_RUNS", "7")

        registry = orchestrator_api.get_registry()

        assert registry.config.search_failure_rate == 1.0
        assert registry.config.run_id_prefix == "env-"
        assert registry.config.max_finished_runs == 7
        assert orchestrator_api.get_registry() is registry

    def test_defaults_without_environment(self, monkeypatch):
        monkeypatch.setattr(orchestrator_api, "_registry", None)
        for name in (
            "RESEARCH_SEARCH_FAILURE_RATE",
            "RESEARCH_REPORT_FAILURE_RATE",
            "RESEARCH_RUN_ID_PREFIX",
            "RESEARCH_MAX_FINISHED_RUNS",
            "RESEARCH_TRANSITION_LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)

        config = orchestrator_api.get_registry().config

        assert config == PipelineConfig()

    def test_transition_log_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("RESEARCH_TRANSITION_LOG_LEVEL", "info")
        assert get_config().transition_log_level == "INFO"


# ============================================================================
# TestWorkflowEndpoints
# ============================================================================


class TestWorkflowEndpoints:
    """Tests for the HTTP API."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["steps"][0] == "parsing"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_blank_query_rejected(self, client):
        response = client.post("/api/workflow/start", json={"query": "   "})
        assert response.status_code == 422

    def test_out_of_range_results_rejected(self, client):
        response = client.post(
            "/api/workflow/start",
            json={"query": "ai", "options": {"max_search_results": 0}},
        )
        assert response.status_code == 422

    def test_unknown_run_is_404(self, client):
        response = client.get("/api/workflow/agent-missing/status")
        assert response.status_code == 404

    def test_start_and_poll(self, client):
        response = client.post(
            "/api/workflow/start",
            json={"query": "quantum computing", "options": {"max_search_results": 3}},
        )
        assert response.status_code == 200
        run_id = response.json()["run_id"]
        assert run_id.startswith("agent-")

        body = _poll_until_finished(client, run_id)

        assert body["current_step"] == "complete"
        assert body["error"] is None
        assert [entry["step"] for entry in body["history"]] == [
            "parsing",
            "searching",
            "transforming",
            "generating",
            "validating",
        ]
        assert body["result"]["partial"] is False
        assert body["result"]["report"]["title"] == "Research Report: quantum computing"
        assert body["completed_at"] is not None

    def test_failed_run_status(self, monkeypatch, client):
        monkeypatch.setattr(orchestrator_api, "_registry", _registry(search_failure_rate=1.0))

        run_id = client.post("/api/workflow/start", json={"query": "ai"}).json()["run_id"]
        body = _poll_until_finished(client, run_id)

        assert body["current_step"] == "failed"
        assert body["result"] is None
        assert body["last_error"].startswith("Search failed")
        assert body["history"][-1]["step"] == "searching"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
