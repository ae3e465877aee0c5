"""Observable run state shared between the controller and its observers."""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger("taskpilot.orchestrator.run_state")

ThinkingListener = Callable[[bool], None]


class AgentRunState:
    """Holds the is_agent_thinking flag and notifies listeners on change.

    One instance is created per agent and passed to the controller at
    construction; status indicators subscribe to it.
    """

    def __init__(self) -> None:
        self._is_agent_thinking = False
        self._listeners: list[ThinkingListener] = []
        self._holds = 0

    @property
    def is_agent_thinking(self) -> bool:
        return self._is_agent_thinking

    def set_is_agent_thinking(self, thinking: bool) -> None:
        if thinking == self._is_agent_thinking:
            return
        self._is_agent_thinking = thinking
        logger.debug("Agent thinking → %s", thinking)
        for listener in list(self._listeners):
            listener(thinking)

    def hold_thinking(self) -> None:
        """Mark one more executor as waiting to retry; raises the flag."""
        self._holds += 1
        self.set_is_agent_thinking(True)

    def release_thinking(self) -> None:
        """Drop one hold; the flag clears once no executor is waiting."""
        if self._holds > 0:
            self._holds -= 1
        if self._holds == 0:
            self.set_is_agent_thinking(False)

    def subscribe(self, listener: ThinkingListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
