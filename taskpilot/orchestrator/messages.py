"""Message service for Taskpilot.

Builds the user-facing messages emitted during a run, keeps them in an
in-memory history and hands each one to a renderer. Formatting and
delivery belong to the renderer (the CLI echoes, tests inspect history).
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from taskpilot.core.models import Analysis, Message, MessageType, Task

logger = logging.getLogger("taskpilot.orchestrator.messages")

Renderer = Callable[[Message], None]


def _log_renderer(message: Message) -> None:
    logger.info("[%s] %s", message.type.value, message.value)


class MessageService:
    """Creates, records and renders run messages."""

    def __init__(self, renderer: Optional[Renderer] = None):
        self._renderer = renderer or _log_renderer
        self.history: list[Message] = []

    def send_message(self, message: Message) -> Message:
        self.history.append(message)
        self._renderer(message)
        return message

    def send_goal_message(self, goal: str) -> Message:
        return self.send_message(Message(type=MessageType.GOAL, value=goal))

    def start_task(self, description: str) -> Message:
        return self.send_message(Message(type=MessageType.TASK, value=description))

    def send_analysis_message(self, task: Task, analysis: Analysis) -> Message:
        value = f"{analysis.action}: {analysis.arg}" if analysis.arg else analysis.action
        return self.send_message(
            Message(
                type=MessageType.ANALYSIS,
                value=value,
                info=analysis.reasoning,
                task_id=task.id,
            )
        )

    def skip_task_message(self, task: Task) -> Message:
        return self.send_message(
            Message(
                type=MessageType.SYSTEM,
                value=f"Skipping task: {task.value}",
                task_id=task.id,
            )
        )

    def send_action_message(self, task: Task, result: str) -> Message:
        return self.send_message(
            Message(
                type=MessageType.ACTION,
                value=task.value,
                info=result,
                task_id=task.id,
            )
        )

    def send_user_message(self, text: str) -> Message:
        return self.send_message(Message(type=MessageType.USER, value=text))

    def send_reply_message(self, text: str) -> Message:
        return self.send_message(Message(type=MessageType.ACTION, value=text))

    def send_summary_message(self, text: str) -> Message:
        return self.send_message(Message(type=MessageType.SUMMARY, value=text))

    def send_error_message(self, error: BaseException) -> Message:
        return self.send_message(
            Message(
                type=MessageType.ERROR,
                value=str(error) or type(error).__name__,
                info=type(error).__name__,
            )
        )

    def send_completed_message(self) -> Message:
        return self.send_message(
            Message(type=MessageType.SYSTEM, value="All tasks completed. Shutting down.")
        )

    def get_messages(self, message_type: Optional[MessageType] = None) -> list[Message]:
        if message_type is None:
            return list(self.history)
        return [m for m in self.history if m.type == message_type]
