"""Component factory for Taskpilot.

Creates and wires the run-model, observable run state, message service,
agent API client and loop controller so the CLI (or an embedding
application) receives one fully-initialized agent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx
from pydantic import ValidationError

from taskpilot.core.config import AppConfig, load_config
from taskpilot.core.exceptions import ConfigError
from taskpilot.llm.client import AgentApiClient
from taskpilot.orchestrator.loop import AutonomousAgent
from taskpilot.orchestrator.messages import MessageService, Renderer
from taskpilot.orchestrator.metrics import LoopMetrics
from taskpilot.orchestrator.run_model import DefaultAgentRunModel
from taskpilot.orchestrator.run_state import AgentRunState

logger = logging.getLogger("taskpilot.core.factory")


@dataclass
class ComponentBundle:
    """Container for all initialized components of one agent run."""

    config: AppConfig
    run_model: DefaultAgentRunModel
    run_state: AgentRunState
    message_service: MessageService
    metrics: LoopMetrics
    api: AgentApiClient
    agent: AutonomousAgent


class ComponentFactory:
    """Factory for creating and wiring an agent.

    Usage:
        bundle = ComponentFactory.create(goal="Plan a trip to Lisbon")
        await bundle.agent.run()
        await ComponentFactory.close(bundle)
    """

    @staticmethod
    def create(
        goal: str,
        config_dir: Optional[Path] = None,
        env: Optional[str] = None,
        config: Optional[AppConfig] = None,
        max_loops: Optional[int] = None,
        api_url: Optional[str] = None,
        renderer: Optional[Renderer] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> ComponentBundle:
        """Create and wire all components.

        Args:
            goal: The goal the agent works towards.
            config_dir: Path to config/ directory. Default: project root/config.
            env: Environment name for config overlay (e.g., "test").
            config: Pre-built config; skips loading from disk when given.
            max_loops: Override for model_settings.custom_max_loops.
            api_url: Override for api.base_url.
            renderer: Callable receiving every emitted message.
            transport: Optional httpx transport (tests, proxies).

        Returns:
            ComponentBundle with the agent ready to run.

        Raises:
            ConfigError: If the config or an override fails validation.
        """
        if config is None:
            config = load_config(config_dir=config_dir, env=env)
        config = _with_overrides(config, max_loops=max_loops, api_url=api_url)

        run_model = DefaultAgentRunModel(goal=goal)
        run_state = AgentRunState()
        message_service = MessageService(renderer=renderer)
        metrics = LoopMetrics()
        api = AgentApiClient(
            goal=goal,
            config=config.api,
            model_settings=config.model_settings,
            transport=transport,
        )
        agent = AutonomousAgent(
            model=run_model,
            message_service=message_service,
            api=api,
            config=config,
            run_state=run_state,
            metrics=metrics,
        )
        logger.info(
            "Agent wired (run_id=%s, api=%s, max_loops=%d)",
            run_model.run_id, config.api.base_url, config.model_settings.custom_max_loops,
        )

        return ComponentBundle(
            config=config,
            run_model=run_model,
            run_state=run_state,
            message_service=message_service,
            metrics=metrics,
            api=api,
            agent=agent,
        )

    @staticmethod
    async def close(bundle: ComponentBundle) -> None:
        """Release network resources."""
        await bundle.api.aclose()
        logger.info("Components shut down")


def _with_overrides(
    config: AppConfig,
    max_loops: Optional[int] = None,
    api_url: Optional[str] = None,
) -> AppConfig:
    """Return a validated copy of config with the CLI-style overrides applied."""
    data = config.model_dump()
    if max_loops is not None:
        data["model_settings"]["custom_max_loops"] = max_loops
    if api_url:
        data["api"]["base_url"] = api_url
    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration override: {e}") from e
