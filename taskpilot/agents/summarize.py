"""One-shot work item that summarizes the completed tasks of a run."""

from __future__ import annotations

from taskpilot.agents.base_work import AgentWork


class SummarizeWork(AgentWork):
    def __init__(self, parent):
        super().__init__(parent)
        self.summary = ""

    async def run(self) -> None:
        results = [t.result for t in self.parent.model.get_completed_tasks()]
        self.summary = await self.parent.api.summarize(results)

    async def conclude(self) -> None:
        if self.summary:
            self.parent.message_service.send_summary_message(self.summary)
