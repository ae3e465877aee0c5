"""Tests for taskpilot/orchestrator/metrics.py: LoopMetrics."""

from __future__ import annotations

from taskpilot.orchestrator.metrics import LoopMetrics, WorkRecord


def test_empty_summary():
    assert LoopMetrics().get_summary() == {"total_work": 0}


def test_record_lifecycle():
    metrics = LoopMetrics()
    record = metrics.start_work("AnalyzeTaskWork")
    metrics.record_attempt(record)
    metrics.record_attempt(record)
    metrics.complete_work(record, "succeeded")

    assert record.attempts == 2
    assert record.retries == 1
    assert record.completed_at is not None
    assert record.duration_seconds >= 0


def test_summary_aggregates():
    metrics = LoopMetrics()
    for name, attempts, outcome in [
        ("StartGoalWork", 1, "succeeded"),
        ("AnalyzeTaskWork", 3, "succeeded"),
        ("ExecuteTaskWork", 1, "fatal"),
    ]:
        record = metrics.start_work(name)
        for _ in range(attempts):
            metrics.record_attempt(record)
        metrics.complete_work(record, outcome, error="boom" if outcome == "fatal" else None)

    summary = metrics.get_summary()
    assert summary["total_work"] == 3
    assert summary["total_attempts"] == 5
    assert summary["total_retries"] == 2
    assert summary["outcomes"] == {"succeeded": 2, "fatal": 1}
    assert metrics.get_records("ExecuteTaskWork")[0].error == "boom"
    assert len(metrics.get_records()) == 3


def test_retries_never_negative():
    assert WorkRecord(work_name="x").retries == 0
