"""Run-model for Taskpilot: lifecycle state and the task list of one run.

The loop controller never caches the lifecycle. It reads and writes it
through this model so that pause/stop requests coming from outside the
loop (a signal handler, a UI button) are observed at the next boundary.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Protocol

from taskpilot.core.models import Lifecycle, Task, TaskStatus

logger = logging.getLogger("taskpilot.orchestrator.run_model")


class AgentRunModel(Protocol):
    """Contract the controller and work items rely on."""

    def get_goal(self) -> str: ...

    def get_lifecycle(self) -> Lifecycle: ...

    def set_lifecycle(self, lifecycle: Lifecycle) -> None: ...

    def get_current_task(self) -> Optional[Task]: ...

    def add_task(self, description: str) -> Task: ...

    def update_task_status(self, task: Task, status: TaskStatus) -> Task: ...

    def update_task_result(self, task: Task, result: str) -> Task: ...

    def get_remaining_tasks(self) -> list[Task]: ...

    def get_completed_tasks(self) -> list[Task]: ...

    def get_tasks(self) -> list[Task]: ...


class DefaultAgentRunModel:
    """In-memory run-model.

    The current task is the oldest task still in the STARTED state.
    Task objects are mutated in place so every work item holding a
    reference sees status and result updates.
    """

    def __init__(self, goal: str, run_id: Optional[uuid.UUID] = None):
        self.goal = goal
        self.run_id = run_id or uuid.uuid4()
        self._lifecycle = Lifecycle.IDLE
        self._tasks: list[Task] = []

    def get_goal(self) -> str:
        return self.goal

    def get_lifecycle(self) -> Lifecycle:
        return self._lifecycle

    def set_lifecycle(self, lifecycle: Lifecycle) -> None:
        if lifecycle != self._lifecycle:
            logger.info("Run %s: %s → %s", self.run_id, self._lifecycle.value, lifecycle.value)
        self._lifecycle = lifecycle

    def get_current_task(self) -> Optional[Task]:
        remaining = self.get_remaining_tasks()
        return remaining[0] if remaining else None

    def add_task(self, description: str) -> Task:
        task = Task(value=description)
        self._tasks.append(task)
        logger.debug("Task added: '%s'", description)
        return task

    def update_task_status(self, task: Task, status: TaskStatus) -> Task:
        logger.debug("Task '%s': %s → %s", task.value, task.status.value, status.value)
        task.status = status
        return task

    def update_task_result(self, task: Task, result: str) -> Task:
        task.result = result
        return task

    def get_remaining_tasks(self) -> list[Task]:
        return [t for t in self._tasks if t.status == TaskStatus.STARTED]

    def get_completed_tasks(self) -> list[Task]:
        return [t for t in self._tasks if t.status == TaskStatus.COMPLETED]

    def get_tasks(self) -> list[Task]:
        return list(self._tasks)
