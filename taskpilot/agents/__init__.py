"""Concrete work items driven by the autonomous loop."""

from taskpilot.agents.analyze_task import AnalyzeTaskWork
from taskpilot.agents.base_work import AgentWork
from taskpilot.agents.chat import ChatWork
from taskpilot.agents.create_task import CreateTaskWork
from taskpilot.agents.execute_task import ExecuteTaskWork
from taskpilot.agents.start_goal import StartGoalWork
from taskpilot.agents.summarize import SummarizeWork

__all__ = [
    "AgentWork",
    "AnalyzeTaskWork",
    "ChatWork",
    "CreateTaskWork",
    "ExecuteTaskWork",
    "StartGoalWork",
    "SummarizeWork",
]
