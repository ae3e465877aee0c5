"""Agent API client for Taskpilot.

Talks to the agent backend over HTTP (httpx, JSON bodies). The backend owns
prompt construction and model invocation; this client only ships the goal,
model settings and task context, and maps failures onto the Taskpilot
exception taxonomy. It never retries: retry policy belongs to the loop's
RetryExecutor.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from taskpilot.core.config import AgentApiConfig
from taskpilot.core.exceptions import (
    AgentApiError,
    AuthenticationError,
    ModelNotFoundError,
    PlatformError,
    RateLimitError,
    ResponseParseError,
)
from taskpilot.core.models import Analysis, ModelSettings

logger = logging.getLogger("taskpilot.llm.client")


class AgentApiClient:
    """Async HTTP client for the agent backend endpoints.

    The run_id returned by /agent/start is attached to every later call so
    the backend can correlate one run's requests.
    """

    def __init__(
        self,
        goal: str,
        config: Optional[AgentApiConfig] = None,
        model_settings: Optional[ModelSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.goal = goal
        self.config = config or AgentApiConfig()
        self.model_settings = model_settings or ModelSettings()
        self.base_url = self.config.base_url.rstrip("/")
        self.run_id: Optional[str] = None
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_seconds),
                transport=self._transport,
            )
        return self._client

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def get_initial_tasks(self) -> list[str]:
        data = await self._post("agent/start", {})
        run_id = data.get("run_id")
        if run_id:
            self.run_id = str(run_id)
        return _string_list(data, "new_tasks")

    async def analyze_task(self, task: str) -> Analysis:
        data = await self._post("agent/analyze", {"task": task})
        try:
            return Analysis(**data)
        except (TypeError, ValueError) as e:
            raise ResponseParseError(f"Malformed analysis: {e}") from e

    async def execute_task(self, task: str, analysis: Analysis) -> str:
        data = await self._post(
            "agent/execute",
            {"task": task, "analysis": analysis.model_dump()},
        )
        return _string_field(data, "result")

    async def get_additional_tasks(
        self,
        current: str,
        remaining: list[str],
        completed: list[str],
        result: str,
    ) -> list[str]:
        data = await self._post(
            "agent/create",
            {
                "last_task": current,
                "tasks": remaining,
                "completed_tasks": completed,
                "result": result,
            },
        )
        return _string_list(data, "new_tasks")

    async def summarize(self, results: list[str]) -> str:
        data = await self._post("agent/summarize", {"results": results})
        return _string_field(data, "result")

    async def chat(self, message: str, results: list[str]) -> str:
        data = await self._post("agent/chat", {"message": message, "results": results})
        return _string_field(data, "result")

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "goal": self.goal,
            "model_settings": self.model_settings.model_dump(),
            **body,
        }
        if self.run_id:
            payload["run_id"] = self.run_id

        url = f"{self.base_url}/{path}"
        resp = await self.client.post(url, json=payload)
        _raise_for_status(resp, path)

        try:
            data = resp.json()
        except ValueError as e:
            raise ResponseParseError(
                f"Non-JSON response from {path}: {resp.text[:200]}",
                status_code=resp.status_code,
            ) from e
        if not isinstance(data, dict):
            raise ResponseParseError(f"Expected JSON object from {path}", status_code=resp.status_code)

        logger.debug("POST %s -> %d", path, resp.status_code)
        return data


def _raise_for_status(resp: httpx.Response, path: str) -> None:
    status = resp.status_code
    if status < 400:
        return
    if status in (401, 403):
        raise AuthenticationError(f"Unauthorized call to {path}", status_code=status)
    if status == 404:
        raise ModelNotFoundError(f"Endpoint or model not found: {path}", status_code=status)
    if status == 409:
        body = _safe_json(resp)
        raise PlatformError(
            str(body.get("error") or f"Platform error from {path}"),
            detail=str(body.get("detail") or ""),
            status_code=status,
            should_retry=bool(body.get("should_retry", False)),
        )
    if status == 429:
        raise RateLimitError(f"Rate limited on {path}", status_code=status)
    if status >= 500:
        raise AgentApiError(f"Server error {status} on {path}", status_code=status, should_retry=True)
    raise AgentApiError(f"Request to {path} rejected ({status})", status_code=status, should_retry=False)


def _safe_json(resp: httpx.Response) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _string_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ResponseParseError(f"Response missing string field '{key}'")
    return value


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ResponseParseError(f"Response field '{key}' must be a list of strings")
    return [v.strip() for v in value if v.strip()]
