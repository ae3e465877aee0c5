"""Bootstrap work item: announce the goal and fetch the first task batch."""

from __future__ import annotations

from taskpilot.agents.base_work import AgentWork


class StartGoalWork(AgentWork):
    """Asks the agent API for the initial tasks of the goal.

    The tasks are materialized in conclude(), so a pause that lands right
    after run() defers task creation to the next run instead of losing it.
    """

    def __init__(self, parent):
        super().__init__(parent)
        self.task_values: list[str] = []
        self._goal_announced = False

    async def run(self) -> None:
        if not self._goal_announced:
            self.parent.message_service.send_goal_message(self.parent.model.get_goal())
            self._goal_announced = True
        self.task_values = await self.parent.api.get_initial_tasks()
        self.logger.info("Received %d initial tasks", len(self.task_values))

    async def conclude(self) -> None:
        await self.parent.create_task_messages(self.task_values)
