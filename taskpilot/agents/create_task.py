"""Work item that extends the task list from a finished task's result."""

from __future__ import annotations

from taskpilot.agents.base_work import AgentWork
from taskpilot.core.models import Task


class CreateTaskWork(AgentWork):
    def __init__(self, parent, task: Task):
        super().__init__(parent, task)
        self.task_values: list[str] = []

    async def run(self) -> None:
        model = self.parent.model
        self.task_values = await self.parent.api.get_additional_tasks(
            current=self.task.value,
            remaining=[t.value for t in model.get_remaining_tasks()],
            completed=[t.value for t in model.get_completed_tasks()],
            result=self.task.result,
        )
        self.logger.info("Task '%s' produced %d follow-up tasks", self.task.value, len(self.task_values))

    async def conclude(self) -> None:
        await self.parent.create_task_messages(self.task_values)
        await self.parent.sleep(self.parent.config.agent.task_conclusion_delay_seconds)
