"""Work Log and deferred conclusion slot for the loop controller.

The Work Log is a head-only FIFO: only the head is inspected or executed,
new items go to the tail, nothing is removed from the middle.

The conclusion slot keeps the finalize step of an item whose run finished
while the lifecycle left RUNNING. It is replayed exactly once, at the start
of the next run, before any new work is considered.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Iterator, Optional

from taskpilot.core.exceptions import AgentError

if TYPE_CHECKING:
    from taskpilot.agents.base_work import AgentWork

logger = logging.getLogger("taskpilot.orchestrator.work_log")


class WorkLog:
    """Ordered queue of pending work items."""

    def __init__(self, items: Optional[list[AgentWork]] = None):
        self._items: deque[AgentWork] = deque(items or [])

    def head(self) -> Optional[AgentWork]:
        return self._items[0] if self._items else None

    def pop_head(self) -> AgentWork:
        if not self._items:
            raise AgentError("Cannot pop from an empty work log")
        return self._items.popleft()

    def append(self, work: AgentWork) -> None:
        self._items.append(work)
        logger.debug("Queued %s (log size=%d)", work.name, len(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[AgentWork]:
        return iter(list(self._items))


class ConclusionSlot:
    """Holds at most one work item whose conclude() is still owed."""

    def __init__(self) -> None:
        self._work: Optional[AgentWork] = None

    @property
    def pending(self) -> Optional[AgentWork]:
        return self._work

    def defer(self, work: AgentWork) -> None:
        if self._work is not None:
            raise AgentError(
                f"Conclusion for {self._work.name} is still pending; cannot defer {work.name}"
            )
        logger.info("Deferring conclusion of %s until the next run", work.name)
        self._work = work

    async def replay(self) -> bool:
        """Run the pending conclusion once. Returns True if one was pending."""
        work = self._work
        if work is None:
            return False
        self._work = None
        logger.info("Replaying deferred conclusion of %s", work.name)
        await work.conclude()
        return True
