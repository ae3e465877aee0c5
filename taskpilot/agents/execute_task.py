"""Work item that carries out an analyzed task."""

from __future__ import annotations

from typing import Optional

from taskpilot.agents.base_work import AgentWork
from taskpilot.agents.create_task import CreateTaskWork
from taskpilot.core.models import Analysis, Task, TaskStatus


class ExecuteTaskWork(AgentWork):
    def __init__(self, parent, task: Task, analysis: Analysis):
        super().__init__(parent, task)
        self.analysis = analysis
        self.result = ""

    async def run(self) -> None:
        self.result = await self.parent.api.execute_task(self.task.value, self.analysis)
        self.parent.model.update_task_result(self.task, self.result)
        self.parent.model.update_task_status(self.task, TaskStatus.COMPLETED)

    async def conclude(self) -> None:
        self.parent.message_service.send_action_message(self.task, self.result)

    def next(self) -> Optional[AgentWork]:
        if not self.result:
            return None
        return CreateTaskWork(self.parent, self.task)
