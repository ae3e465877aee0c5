"""All Pydantic data models for Taskpilot.

Defines the data contracts shared by the loop controller, the run-model,
the message service and the work items.
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from typing import Optional

from pydantic import BaseModel, Field


def _new_uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Lifecycle(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSING = "pausing"
    PAUSED = "paused"
    STOPPED = "stopped"


class TaskStatus(str, enum.Enum):
    STARTED = "started"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FINAL = "final"


class MessageType(str, enum.Enum):
    GOAL = "goal"
    TASK = "task"
    ANALYSIS = "analysis"
    ACTION = "action"
    SYSTEM = "system"
    ERROR = "error"
    USER = "user"
    SUMMARY = "summary"


# ---------------------------------------------------------------------------
# Run models
# ---------------------------------------------------------------------------

class Task(BaseModel):
    id: uuid.UUID = Field(default_factory=_new_uuid)
    value: str
    status: TaskStatus = TaskStatus.STARTED
    result: str = ""
    created_at: datetime = Field(default_factory=_now)

    @property
    def is_complete(self) -> bool:
        """True once the task finished with a non-empty result."""
        return self.status == TaskStatus.COMPLETED and self.result != ""


class Message(BaseModel):
    id: uuid.UUID = Field(default_factory=_new_uuid)
    type: MessageType
    value: str
    info: Optional[str] = None
    task_id: Optional[uuid.UUID] = None
    created_at: datetime = Field(default_factory=_now)


class Analysis(BaseModel):
    """Output of the analyze step: what to do for a task."""
    action: str = "reason"
    arg: str = ""
    reasoning: Optional[str] = None


class ModelSettings(BaseModel):
    model: str = "gpt-3.5-turbo"
    temperature: float = 0.8
    max_tokens: int = 500
    language: str = "English"
    custom_max_loops: int = Field(default=25, ge=0)
