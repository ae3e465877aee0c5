"""Work item that decides how a queued task should be handled."""

from __future__ import annotations

from typing import Optional

from taskpilot.agents.base_work import AgentWork
from taskpilot.agents.execute_task import ExecuteTaskWork
from taskpilot.core.models import Analysis, Task, TaskStatus


class AnalyzeTaskWork(AgentWork):
    """Marks the task as executing and asks the agent API for an analysis.

    Chains into ExecuteTaskWork when an analysis came back; otherwise the
    task is reported as skipped and nothing follows.
    """

    def __init__(self, parent, task: Task):
        super().__init__(parent, task)
        self.analysis: Optional[Analysis] = None

    async def run(self) -> None:
        self.parent.model.update_task_status(self.task, TaskStatus.EXECUTING)
        self.analysis = await self.parent.api.analyze_task(self.task.value)

    async def conclude(self) -> None:
        if self.analysis is not None:
            self.parent.message_service.send_analysis_message(self.task, self.analysis)
        else:
            self.parent.message_service.skip_task_message(self.task)

    def next(self) -> Optional[AgentWork]:
        if self.analysis is None:
            return None
        return ExecuteTaskWork(self.parent, self.task, self.analysis)
