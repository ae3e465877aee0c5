"""Shared fixtures for Taskpilot tests.

Collaborators are small hand-written fakes: a scripted agent API, a
scripted work item, and the real in-memory run-model/message service.
Nothing touches the network.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from taskpilot.agents.base_work import AgentWork
from taskpilot.core.config import AgentConfig, AppConfig, load_config
from taskpilot.core.models import Analysis, Task
from taskpilot.orchestrator.loop import AutonomousAgent
from taskpilot.orchestrator.messages import MessageService
from taskpilot.orchestrator.run_model import DefaultAgentRunModel
from taskpilot.orchestrator.run_state import AgentRunState


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeAgentApi:
    """Scripted stand-in for AgentApiClient.

    initial_tasks: returned by get_initial_tasks().
    follow_ups: maps a task value to the tasks get_additional_tasks() returns.
    """

    def __init__(
        self,
        initial_tasks: Optional[list[str]] = None,
        follow_ups: Optional[dict[str, list[str]]] = None,
    ):
        self.initial_tasks = list(initial_tasks or [])
        self.follow_ups = dict(follow_ups or {})
        self.calls: list[tuple[str, Any]] = []

    async def get_initial_tasks(self) -> list[str]:
        self.calls.append(("start", None))
        return list(self.initial_tasks)

    async def analyze_task(self, task: str) -> Analysis:
        self.calls.append(("analyze", task))
        return Analysis(action="reason", arg=task, reasoning="fake analysis")

    async def execute_task(self, task: str, analysis: Analysis) -> str:
        self.calls.append(("execute", task))
        return f"result of {task}"

    async def get_additional_tasks(
        self,
        current: str,
        remaining: list[str],
        completed: list[str],
        result: str,
    ) -> list[str]:
        self.calls.append(("create", current))
        return list(self.follow_ups.get(current, []))

    async def summarize(self, results: list[str]) -> str:
        self.calls.append(("summarize", results))
        return f"summary of {len(results)} results"

    async def chat(self, message: str, results: list[str]) -> str:
        self.calls.append(("chat", message))
        return f"reply to {message}"

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


class ScriptedWork(AgentWork):
    """Work item whose run() replays a script of exceptions before succeeding.

    events: shared list receiving ("run"|"conclude", label) tuples.
    failures: exceptions raised by successive run() calls.
    on_run: optional hook invoked at the start of every run() call.
    retry: value returned by on_error().
    """

    def __init__(
        self,
        parent: Any,
        label: str,
        events: list[tuple[str, str]],
        failures: Optional[list[Exception]] = None,
        follow_up: Optional[AgentWork] = None,
        task: Optional[Task] = None,
        on_run: Optional[Callable[[], None]] = None,
        retry: bool = True,
    ):
        super().__init__(parent, task)
        self.label = label
        self.events = events
        self.failures = list(failures or [])
        self.follow_up = follow_up
        self.on_run = on_run
        self.retry = retry
        self.attempts = 0
        self.conclusions = 0
        self.errors: list[Exception] = []

    async def run(self) -> None:
        self.attempts += 1
        self.events.append(("run", self.label))
        if self.on_run is not None:
            self.on_run()
        if self.failures:
            raise self.failures.pop(0)

    async def conclude(self) -> None:
        self.conclusions += 1
        self.events.append(("conclude", self.label))

    def next(self) -> Optional[AgentWork]:
        return self.follow_up

    def on_error(self, error: Exception) -> bool:
        self.errors.append(error)
        return self.retry


class RecordingSleep:
    """Stands in for asyncio.sleep; records each delay and the task count at that moment."""

    def __init__(self, run_model: Any = None):
        self.run_model = run_model
        self.waits: list[float] = []
        self.task_counts: list[int] = []

    async def __call__(self, delay: float) -> None:
        self.waits.append(delay)
        if self.run_model is not None:
            self.task_counts.append(len(self.run_model.get_tasks()))


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config_dir() -> Path:
    return Path(__file__).parent.parent / "config"


@pytest.fixture
def app_config() -> AppConfig:
    """Config with every delay set to zero."""
    return AppConfig(
        agent=AgentConfig(
            retry_delay_seconds=0.0,
            task_creation_delay_seconds=0.0,
            task_conclusion_delay_seconds=0.0,
        )
    )


@pytest.fixture
def loaded_config(config_dir: Path) -> AppConfig:
    return load_config(config_dir=config_dir)


# ---------------------------------------------------------------------------
# Agent fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def run_model() -> DefaultAgentRunModel:
    return DefaultAgentRunModel(goal="Plan a weekend in Lisbon")


@pytest.fixture
def run_state() -> AgentRunState:
    return AgentRunState()


@pytest.fixture
def message_service() -> MessageService:
    return MessageService(renderer=lambda _message: None)


@pytest.fixture
def fake_api() -> FakeAgentApi:
    return FakeAgentApi(initial_tasks=["Book flights", "Find a hotel"])


@pytest.fixture
def agent(run_model, message_service, fake_api, app_config, run_state) -> AutonomousAgent:
    return AutonomousAgent(
        model=run_model,
        message_service=message_service,
        api=fake_api,
        config=app_config,
        run_state=run_state,
    )


@pytest.fixture
def bare_agent(agent: AutonomousAgent) -> AutonomousAgent:
    """Agent whose Work Log starts empty so tests can queue scripted items."""
    while agent.work_log:
        agent.work_log.pop_head()
    return agent


@pytest.fixture
def paced_agent(run_model, message_service, fake_api, run_state) -> AutonomousAgent:
    """Agent running on the default timings with a recording sleep."""
    return AutonomousAgent(
        model=run_model,
        message_service=message_service,
        api=fake_api,
        config=AppConfig(),
        run_state=run_state,
        sleep=RecordingSleep(run_model),
    )
