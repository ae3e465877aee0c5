"""Main autonomous loop for Taskpilot.

Pulls work items from the head of the Work Log and runs each one through
the RetryExecutor:

  StartGoalWork → AnalyzeTaskWork → ExecuteTaskWork → CreateTaskWork → ...

Pause and stop requests are honored at item boundaries. A work item that
finished while the lifecycle left RUNNING has its conclusion deferred to
the start of the next run(). This is the core orchestration loop that
ties everything together.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from taskpilot.agents.analyze_task import AnalyzeTaskWork
from taskpilot.agents.base_work import AgentWork
from taskpilot.agents.chat import ChatWork
from taskpilot.agents.start_goal import StartGoalWork
from taskpilot.agents.summarize import SummarizeWork
from taskpilot.core.config import AppConfig
from taskpilot.core.models import Lifecycle, Message, ModelSettings
from taskpilot.orchestrator.messages import MessageService
from taskpilot.orchestrator.metrics import LoopMetrics
from taskpilot.orchestrator.retry import RetryExecutor, WorkOutcome
from taskpilot.orchestrator.run_model import AgentRunModel
from taskpilot.orchestrator.run_state import AgentRunState
from taskpilot.orchestrator.work_log import ConclusionSlot, WorkLog

logger = logging.getLogger("taskpilot.orchestrator.loop")


class AutonomousAgent:
    """Loop controller: seed → pop head → execute → conclude/defer → chain.

    Injected dependencies:
        model: Run-model owning the lifecycle and the task list.
        message_service: Emits goal/task/analysis/completion messages.
        api: Agent API client used by the work items.
        config: Application configuration (timings, max loops).
        run_state: Observable state carrying the thinking flag.
        metrics: Work execution metrics collector.
        sleep: Awaitable delay used for retry waits and task pacing.
    """

    def __init__(
        self,
        model: AgentRunModel,
        message_service: MessageService,
        api: Any,
        config: Optional[AppConfig] = None,
        run_state: Optional[AgentRunState] = None,
        metrics: Optional[LoopMetrics] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.model = model
        self.message_service = message_service
        self.api = api
        self.config = config or AppConfig()
        self.run_state = run_state or AgentRunState()
        self.metrics = metrics or LoopMetrics()
        self.executor = RetryExecutor(
            run_model=model,
            run_state=self.run_state,
            retry_delay_seconds=self.config.agent.retry_delay_seconds,
            metrics=self.metrics,
            sleep=sleep,
        )
        self.sleep = sleep
        self.work_log = WorkLog([StartGoalWork(self)])
        self.pending_conclusion = ConclusionSlot()
        self._completed_tasks = 0

    @property
    def model_settings(self) -> ModelSettings:
        return self.config.model_settings

    @property
    def completed_tasks(self) -> int:
        return self._completed_tasks

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Run queued work until the log drains or the lifecycle leaves RUNNING."""
        self.model.set_lifecycle(Lifecycle.RUNNING)
        logger.info(
            "Agent run started (queued=%d, completed=%d, max_loops=%d)",
            len(self.work_log), self._completed_tasks, self.model_settings.custom_max_loops,
        )

        try:
            await self.pending_conclusion.replay()
            self.add_tasks_if_worklog_empty()

            while self.work_log:
                if self._leave_if_not_running():
                    return

                work = self.work_log.head()
                await self.run_work(work, should_stop=self._is_stopped)
                self.work_log.pop_head()

                if self.model.get_lifecycle() != Lifecycle.RUNNING:
                    self.pending_conclusion.defer(work)
                else:
                    await work.conclude()

                self._count_completed(work)

                next_work = work.next()
                if next_work is not None:
                    self.work_log.append(next_work)

                self.add_tasks_if_worklog_empty()
        except Exception:
            logger.exception("Agent loop crashed; stopping agent")
            self.stop_agent()
            raise

        if self._leave_if_not_running():
            return

        # Done with everything in the log and all queued tasks
        self.message_service.send_completed_message()
        self.stop_agent()

    async def run_work(
        self,
        work: AgentWork,
        should_stop: Callable[[], bool] = lambda: False,
    ) -> WorkOutcome:
        """Run one work item with error handling and retries."""
        return await self.executor.run_work(work, should_stop=should_stop)

    def add_tasks_if_worklog_empty(self) -> None:
        if self.work_log:
            return

        current_task = self.model.get_current_task()
        if current_task is not None:
            self.work_log.append(AnalyzeTaskWork(self, current_task))

    def _count_completed(self, work: AgentWork) -> None:
        task = work.task
        if task is not None and task.is_complete:
            self._completed_tasks += 1
            logger.debug("Completed task count → %d", self._completed_tasks)

        ceiling = self.config.max_completed_tasks
        if self._completed_tasks >= ceiling:
            logger.info(
                "Completed-task ceiling reached (%d >= %d); stopping agent",
                self._completed_tasks, ceiling,
            )
            self.model.set_lifecycle(Lifecycle.STOPPED)

    def _leave_if_not_running(self) -> bool:
        """Resolve PAUSING to PAUSED; True when the loop must not continue."""
        if self.model.get_lifecycle() == Lifecycle.PAUSING:
            self.model.set_lifecycle(Lifecycle.PAUSED)
        return self.model.get_lifecycle() != Lifecycle.RUNNING

    def _is_stopped(self) -> bool:
        return self.model.get_lifecycle() == Lifecycle.STOPPED

    # ------------------------------------------------------------------
    # Lifecycle commands
    # ------------------------------------------------------------------

    def pause_agent(self) -> None:
        self.model.set_lifecycle(Lifecycle.PAUSING)

    def stop_agent(self) -> None:
        self.model.set_lifecycle(Lifecycle.STOPPED)

    # ------------------------------------------------------------------
    # One-shot operations
    # ------------------------------------------------------------------

    async def summarize(self) -> None:
        """Summarize the completed tasks outside the Work Log."""
        self.model.set_lifecycle(Lifecycle.RUNNING)
        summarize_work = SummarizeWork(self)
        try:
            await self.run_work(summarize_work)
            await summarize_work.conclude()
        finally:
            self.model.set_lifecycle(Lifecycle.STOPPED)

    async def chat(self, message: str) -> None:
        """Answer a user message; pauses a running loop first."""
        if self.model.get_lifecycle() == Lifecycle.RUNNING:
            self.pause_agent()

        was_stopped = False
        if self.model.get_lifecycle() in (Lifecycle.STOPPED, Lifecycle.IDLE):
            was_stopped = True
            self.model.set_lifecycle(Lifecycle.PAUSING)

        chat_work = ChatWork(self, message)
        try:
            await self.run_work(chat_work)
            await chat_work.conclude()
        finally:
            if was_stopped:
                self.model.set_lifecycle(Lifecycle.STOPPED)

    async def create_task_messages(self, tasks: list[str]) -> list[Message]:
        """Add each task to the run-model, announcing it, with a short gap between."""
        delay = self.config.agent.task_creation_delay_seconds
        messages: list[Message] = []

        for value in tasks:
            messages.append(self.message_service.start_task(value))
            self.model.add_task(value)
            await self.sleep(delay)

        return messages
