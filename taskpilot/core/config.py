"""Configuration loader for Taskpilot.

Loads config from a YAML cascade: config/default.yaml is always loaded,
then environment-specific overrides, then environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from taskpilot.core.exceptions import ConfigError
from taskpilot.core.models import ModelSettings


# ---------------------------------------------------------------------------
# Config schema
# ---------------------------------------------------------------------------

class AgentConfig(BaseModel):
    retry_delay_seconds: float = Field(default=2.0, ge=0)
    task_creation_delay_seconds: float = Field(default=0.15, ge=0)
    task_conclusion_delay_seconds: float = Field(default=1.0, ge=0)
    max_loops_scale_factor: int = Field(default=2, ge=1)


class AgentApiConfig(BaseModel):
    base_url: str = "http://localhost:8000/api"
    timeout_seconds: int = 120


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseModel):
    agent: AgentConfig = Field(default_factory=AgentConfig)
    model_settings: ModelSettings = Field(default_factory=ModelSettings)
    api: AgentApiConfig = Field(default_factory=AgentApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def max_completed_tasks(self) -> int:
        """Completed-task ceiling that forces the loop to stop."""
        return self.model_settings.custom_max_loops * self.agent.max_loops_scale_factor


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    return data if isinstance(data, dict) else {}


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    api_url = os.getenv("TASKPILOT_API_URL")
    if api_url:
        overrides.setdefault("api", {})["base_url"] = api_url

    max_loops = os.getenv("TASKPILOT_MAX_LOOPS")
    if max_loops:
        try:
            overrides.setdefault("model_settings", {})["custom_max_loops"] = int(max_loops)
        except ValueError as e:
            raise ConfigError(f"TASKPILOT_MAX_LOOPS must be an integer, got '{max_loops}'") from e

    return overrides


def default_config_dir() -> Path:
    return Path(__file__).parent.parent.parent / "config"


def load_config(
    config_dir: Optional[Path] = None,
    env: Optional[str] = None,
) -> AppConfig:
    """Load application config from YAML cascade.

    Order: default.yaml -> {env}.yaml -> env vars (TASKPILOT_API_URL, TASKPILOT_MAX_LOOPS)
    """
    if config_dir is None:
        config_dir = default_config_dir()

    merged = _load_yaml(config_dir / "default.yaml")

    if env:
        overlay = _load_yaml(config_dir / f"{env}.yaml")
        merged = _deep_merge(merged, overlay)

    merged = _deep_merge(merged, _env_overrides())

    try:
        return AppConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
