"""
In-memory run registry.

Starts runs as background asyncio tasks and answers status lookups by
run identifier. Entries live in memory only: once more than
config.max_finished_runs runs have finished, the oldest finished runs
are evicted when the next run starts. Runs still in flight are never
evicted.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from research_pipeline.graph.config import PipelineConfig, DEFAULT_CONFIG
from research_pipeline.graph.orchestrator import ResearchOrchestrator
from research_pipeline.graph.progress import RunStatus
from research_pipeline.shared.contracts.pipeline import Outcome, TaskRequest


logger = logging.getLogger(__name__)

OrchestratorFactory = Callable[[str], ResearchOrchestrator]


@dataclass
class RunRecord:
    """Live status of a run plus its terminal value once finished."""

    run_id: str
    status: RunStatus
    outcome: Optional[Outcome] = None
    error: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.status.current_step.is_terminal


class RunRegistry:
    """Tracks runs started in this process."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        orchestrator_factory: Optional[OrchestratorFactory] = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self._factory = orchestrator_factory or (
            lambda run_id: ResearchOrchestrator(config=self.config, run_id=run_id)
        )
        self._orchestrators: Dict[str, ResearchOrchestrator] = {}
        self._tasks: Dict[str, "asyncio.Task[Outcome]"] = {}

    def start(self, request: TaskRequest) -> str:
        """
        Start a run in the background.

        Must be called from a running event loop.

        Returns:
            The new run identifier
        """
        run_id = f"{self.config.run_id_prefix}{uuid.uuid4()}"
        orchestrator = self._factory(run_id)
        self._orchestrators[run_id] = orchestrator
        task = asyncio.get_running_loop().create_task(orchestrator.run(request), name=run_id)
        task.add_done_callback(self._on_done)
        self._tasks[run_id] = task
        self._evict_finished()
        logger.info(f"[run={run_id}] [registry] Started run | query={request.query!r}")
        return run_id

    def _evict_finished(self) -> None:
        limit = self.config.max_finished_runs
        if limit is None:
            return
        finished = [run_id for run_id, task in self._tasks.items() if task.done()]
        for run_id in finished[: max(0, len(finished) - limit)]:
            del self._tasks[run_id]
            del self._orchestrators[run_id]
            logger.info(f"[run={run_id}] [registry] Evicted finished run")

    @staticmethod
    def _on_done(task: "asyncio.Task[Outcome]") -> None:
        if task.cancelled():
            logger.warning(f"[run={task.get_name()}] [registry] Run cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.info(f"[run={task.get_name()}] [registry] Run ended with error: {exc}")
        else:
            logger.info(f"[run={task.get_name()}] [registry] Run finished")

    def get(self, run_id: str) -> RunRecord:
        """
        Fetch live status, and the outcome or error once finished.

        Raises:
            KeyError: Unknown run identifier
        """
        orchestrator = self._orchestrators[run_id]
        task = self._tasks[run_id]
        record = RunRecord(run_id=run_id, status=orchestrator.get_status())

        if task.done():
            if task.cancelled():
                record.error = "Run cancelled"
            elif task.exception() is not None:
                record.error = str(task.exception())
            else:
                record.outcome = task.result()
        return record

    async def wait(self, run_id: str) -> RunRecord:
        """Wait for a run to finish and return its record."""
        task = self._tasks[run_id]
        await asyncio.wait({task})
        return self.get(run_id)

    def __contains__(self, run_id: str) -> bool:
        return run_id in self._orchestrators

    def __len__(self) -> int:
        return len(self._orchestrators)
