"""Retry executor for Taskpilot work items.

Wraps exactly one work item's run() with error classification and a flat
retry delay. Retrying is unbounded: only a fatal classification or the
item's own on_error hook ends a failing item. While waiting to retry the
shared "thinking" flag is held; the hold is released once the item settles,
and the flag clears when no other executor is still waiting.
"""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from taskpilot.core.exceptions import is_retryable_error
from taskpilot.core.models import Lifecycle
from taskpilot.orchestrator.metrics import LoopMetrics
from taskpilot.orchestrator.run_model import AgentRunModel
from taskpilot.orchestrator.run_state import AgentRunState

if TYPE_CHECKING:
    from taskpilot.agents.base_work import AgentWork

logger = logging.getLogger("taskpilot.orchestrator.retry")

DEFAULT_RETRY_DELAY_SECONDS = 2.0

Action = Callable[[], Awaitable[None]]
ErrorHandler = Callable[[Exception], Awaitable[bool]]


class WorkOutcome(str, enum.Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"      # should_stop() was true before an attempt
    ABANDONED = "abandoned"  # item refused to retry a non-fatal error
    FATAL = "fatal"          # error classified fatal; agent stopped


async def with_retries(action: Action, on_error: ErrorHandler) -> None:
    """Run action until it succeeds or on_error returns False."""
    while True:
        try:
            await action()
            return
        except Exception as e:
            if not await on_error(e):
                return


def _never() -> bool:
    return False


class RetryExecutor:
    """Runs a single work item with retry/backoff policy.

    Injected dependencies:
        run_model: Lifecycle owner; set to STOPPED on fatal errors.
        run_state: Observable state carrying the thinking flag.
        retry_delay_seconds: Flat wait before each retry.
        classifier: Predicate splitting retryable from fatal errors.
        metrics: Optional collector for attempts and outcomes.
        sleep: Awaitable delay function.
    """

    def __init__(
        self,
        run_model: AgentRunModel,
        run_state: AgentRunState,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        classifier: Callable[[BaseException], bool] = is_retryable_error,
        metrics: Optional[LoopMetrics] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.run_model = run_model
        self.run_state = run_state
        self.retry_delay_seconds = retry_delay_seconds
        self.classifier = classifier
        self.metrics = metrics
        self._sleep = sleep

    async def run_work(
        self,
        work: AgentWork,
        should_stop: Callable[[], bool] = _never,
    ) -> WorkOutcome:
        """Execute work.run() under the retry policy and report how it ended."""
        record = self.metrics.start_work(work.name) if self.metrics else None
        outcome = WorkOutcome.SUCCEEDED
        last_error: Optional[str] = None
        holding_thinking = False

        async def _attempt() -> None:
            nonlocal outcome
            if should_stop():
                logger.info("Skipping %s: agent stopped", work.name)
                outcome = WorkOutcome.SKIPPED
                return
            if record is not None:
                self.metrics.record_attempt(record)
            await work.run()
            outcome = WorkOutcome.SUCCEEDED

        async def _handle_error(error: Exception) -> bool:
            nonlocal outcome, last_error, holding_thinking
            last_error = f"{type(error).__name__}: {error}"
            should_retry = await self._item_wants_retry(work, error)

            if not self.classifier(error):
                logger.error("Fatal error in %s, stopping agent: %s", work.name, last_error)
                self.run_model.set_lifecycle(Lifecycle.STOPPED)
                outcome = WorkOutcome.FATAL
                return False

            if not should_retry:
                logger.warning("%s gave up after error: %s", work.name, last_error)
                outcome = WorkOutcome.ABANDONED
                return False

            logger.warning(
                "%s failed (%s). Retrying in %.1fs",
                work.name, last_error, self.retry_delay_seconds,
            )
            if not holding_thinking:
                self.run_state.hold_thinking()
                holding_thinking = True
            await self._sleep(self.retry_delay_seconds)
            return True

        try:
            await with_retries(_attempt, _handle_error)
        finally:
            if holding_thinking:
                self.run_state.release_thinking()

        if record is not None:
            error_text = last_error if outcome != WorkOutcome.SUCCEEDED else None
            self.metrics.complete_work(record, outcome.value, error=error_text)
        return outcome

    @staticmethod
    async def _item_wants_retry(work: AgentWork, error: Exception) -> bool:
        hook = getattr(work, "on_error", None)
        if hook is None:
            return True
        result = hook(error)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)
