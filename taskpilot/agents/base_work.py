"""Abstract base work item for Taskpilot.

A work item is one schedulable unit of agent behavior. The loop controller
only knows this contract:

1. run():      perform the effect (usually a call to the agent API)
2. conclude(): finalize once; may be deferred across a pause
3. next():     optional follow-up item appended to the Work Log tail
4. on_error(): whether a failed run() should be retried

Subclasses receive the controller as a back-reference for reading the
run-model, the message service and the API client. They hold no other
shared state.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from taskpilot.core.models import Task

if TYPE_CHECKING:
    from taskpilot.orchestrator.loop import AutonomousAgent


class AgentWork(ABC):
    """Base class for all work items."""

    def __init__(self, parent: AutonomousAgent, task: Optional[Task] = None):
        self.parent = parent
        self.task = task
        self.logger = logging.getLogger(f"taskpilot.agents.{self.name.lower()}")

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def run(self) -> None:
        """Perform the unit's effect. May raise; the retry executor decides what follows."""

    @abstractmethod
    async def conclude(self) -> None:
        """Finalize the unit. Called exactly once per item."""

    def next(self) -> Optional[AgentWork]:
        """Return the follow-up item, if any."""
        return None

    def on_error(self, error: Exception) -> bool:
        """Report the error and ask for a retry."""
        self.parent.message_service.send_error_message(error)
        return True

    def __repr__(self) -> str:
        if self.task is not None:
            return f"{self.name}(task='{self.task.value}')"
        return f"{self.name}()"
