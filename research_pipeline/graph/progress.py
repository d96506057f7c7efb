"""
Live progress for a single run.

The orchestrator is the only writer. Readers (status endpoints, other
threads) call get_status() and receive an immutable snapshot. Every
write rebuilds the snapshot under the lock, so a step transition and its
history append are observed together or not at all.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from research_pipeline.shared.contracts.pipeline import PIPELINE_ORDER, Step, StepResult


class RunStatus(BaseModel):
    """Point-in-time view of a run."""

    model_config = ConfigDict(frozen=True)

    current_step: Step
    history: Tuple[StepResult, ...] = ()
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    last_error: Optional[str] = None


class ProgressReporter:
    """Thread-safe, queryable run state owned by one orchestrator."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current_step = Step.pending
        self._history: List[StepResult] = []
        self._started_at: Optional[datetime] = None
        self._completed_at: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._snapshot = RunStatus(current_step=Step.pending)

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def get_status(self) -> RunStatus:
        with self._lock:
            return self._snapshot

    # ------------------------------------------------------------------
    # Write path (orchestrator only)
    # ------------------------------------------------------------------

    def start(self) -> RunStatus:
        with self._lock:
            if self._started_at is not None:
                raise RuntimeError("Run already started")
            self._started_at = datetime.now(timezone.utc)
            self._current_step = Step.parsing
            return self._publish()

    def enter(self, step: Step) -> RunStatus:
        """Mark a working step as in flight."""
        with self._lock:
            self._check_mutable()
            if step not in PIPELINE_ORDER:
                raise ValueError(f"Cannot enter non-working step {step.value}")
            if self._current_step not in PIPELINE_ORDER:
                raise RuntimeError("Run has not been started")
            # Forward by exactly one step; re-entering the current step is a no-op
            if step != self._current_step and (
                PIPELINE_ORDER.index(step) != PIPELINE_ORDER.index(self._current_step) + 1
            ):
                raise RuntimeError(
                    f"Illegal transition {self._current_step.value} -> {step.value}"
                )
            if step != self._current_step and not self._concluded(self._current_step):
                raise RuntimeError(f"{self._current_step.value} has not concluded")
            self._current_step = step
            return self._publish()

    def record_success(
        self,
        step: Step,
        result: Dict[str, Any],
        duration_ms: Optional[int],
        complete: bool = False,
    ) -> RunStatus:
        """Append a successful StepResult, optionally finishing the run."""
        with self._lock:
            self._append(StepResult(step=step, result=result, duration_ms=duration_ms))
            if complete:
                self._finish(Step.complete)
            return self._publish()

    def record_failure(
        self,
        step: Step,
        error: str,
        duration_ms: Optional[int],
        last_error: str,
        terminal: Step = Step.failed,
    ) -> RunStatus:
        """
        Append a failed StepResult and move to a terminal state.

        terminal is Step.complete when the failure was absorbed.
        """
        with self._lock:
            self._append(StepResult(step=step, error=error, duration_ms=duration_ms))
            self._last_error = last_error
            self._finish(terminal)
            return self._publish()

    def abort(self, error: str) -> RunStatus:
        """
        Fail the run after an unexpected error.

        Records the error against the in-flight step unless that step
        already concluded. A no-op once the run is terminal.
        """
        with self._lock:
            if self._current_step.is_terminal:
                return self._snapshot
            step = self._current_step
            if step in PIPELINE_ORDER and not self._concluded(step):
                self._history.append(StepResult(step=step, error=error))
            self._last_error = error
            self._finish(Step.failed)
            return self._publish()

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _concluded(self, step: Step) -> bool:
        return any(entry.step == step for entry in self._history)

    def _check_mutable(self) -> None:
        if self._current_step.is_terminal:
            raise RuntimeError(
                f"Run is {self._current_step.value}; its state can no longer change"
            )

    def _append(self, entry: StepResult) -> None:
        self._check_mutable()
        if entry.step != self._current_step:
            raise RuntimeError(
                f"Cannot record {entry.step.value} while {self._current_step.value} is in flight"
            )
        if self._concluded(entry.step):
            raise RuntimeError(f"Step {entry.step.value} already recorded")
        self._history.append(entry)

    def _finish(self, terminal: Step) -> None:
        self._current_step = terminal
        self._completed_at = datetime.now(timezone.utc)

    def _publish(self) -> RunStatus:
        self._snapshot = RunStatus(
            current_step=self._current_step,
            history=tuple(self._history),
            started_at=self._started_at,
            completed_at=self._completed_at,
            last_error=self._last_error,
        )
        return self._snapshot
