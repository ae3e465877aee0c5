"""One-shot work item that answers a user message using the run's results."""

from __future__ import annotations

from taskpilot.agents.base_work import AgentWork


class ChatWork(AgentWork):
    def __init__(self, parent, message: str):
        super().__init__(parent)
        self.message = message
        self.reply = ""
        self._message_sent = False

    async def run(self) -> None:
        if not self._message_sent:
            self.parent.message_service.send_user_message(self.message)
            self._message_sent = True
        results = [t.result for t in self.parent.model.get_completed_tasks()]
        self.reply = await self.parent.api.chat(self.message, results)

    async def conclude(self) -> None:
        if self.reply:
            self.parent.message_service.send_reply_message(self.reply)
