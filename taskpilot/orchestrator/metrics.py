"""Loop metrics collector for Taskpilot.

Records one entry per retry-executor invocation:
  {work_name, started_at, completed_at, duration_seconds, attempts, outcome, error}

Enables: CLI run summary, retry counts, per-item timing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional

logger = logging.getLogger("taskpilot.orchestrator.metrics")


@dataclass
class WorkRecord:
    """Execution record for a single work item."""
    work_name: str
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: Optional[datetime] = None
    duration_seconds: float = 0.0
    attempts: int = 0
    outcome: str = "in_progress"
    error: Optional[str] = None

    @property
    def retries(self) -> int:
        return max(0, self.attempts - 1)


class LoopMetrics:
    """Collects and aggregates work item execution metrics."""

    def __init__(self) -> None:
        self._records: list[WorkRecord] = []

    def start_work(self, work_name: str) -> WorkRecord:
        record = WorkRecord(work_name=work_name)
        self._records.append(record)
        return record

    def record_attempt(self, record: WorkRecord) -> None:
        record.attempts += 1

    def complete_work(
        self,
        record: WorkRecord,
        outcome: str,
        error: Optional[str] = None,
    ) -> None:
        record.completed_at = datetime.now(UTC)
        record.outcome = outcome
        if error is not None:
            record.error = error
        record.duration_seconds = (record.completed_at - record.started_at).total_seconds()
        logger.info(
            "Work '%s': outcome=%s, attempts=%d, duration=%.2fs",
            record.work_name, outcome, record.attempts, record.duration_seconds,
        )

    def get_records(self, work_name: Optional[str] = None) -> list[WorkRecord]:
        if work_name:
            return [r for r in self._records if r.work_name == work_name]
        return list(self._records)

    def get_summary(self) -> dict:
        """Get an aggregate summary of all recorded work."""
        if not self._records:
            return {"total_work": 0}

        outcomes: dict[str, int] = {}
        for r in self._records:
            outcomes[r.outcome] = outcomes.get(r.outcome, 0) + 1

        return {
            "total_work": len(self._records),
            "total_attempts": sum(r.attempts for r in self._records),
            "total_retries": sum(r.retries for r in self._records),
            "total_duration_seconds": round(sum(r.duration_seconds for r in self._records), 2),
            "outcomes": outcomes,
        }
