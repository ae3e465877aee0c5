"""Custom exception hierarchy for Taskpilot.

All exceptions inherit from TaskpilotError so callers can catch broadly
or narrowly as needed. The retry executor relies on is_retryable_error()
to split failures into transient and fatal.
"""

from __future__ import annotations

from typing import Optional


class TaskpilotError(Exception):
    """Base exception for all Taskpilot errors."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigError(TaskpilotError):
    """Invalid or missing configuration."""


# ---------------------------------------------------------------------------
# Agent / controller
# ---------------------------------------------------------------------------

class AgentError(TaskpilotError):
    """Controller or work item processing failure."""


# ---------------------------------------------------------------------------
# Agent API
# ---------------------------------------------------------------------------

class AgentApiError(TaskpilotError):
    """Failed call to the remote agent API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        should_retry: bool = True,
    ):
        self.status_code = status_code
        self.should_retry = should_retry
        super().__init__(message)


class AuthenticationError(AgentApiError):
    """Invalid credentials or unauthorized."""

    def __init__(self, message: str = "Unauthorized", status_code: Optional[int] = 401):
        super().__init__(message, status_code=status_code, should_retry=False)


class ModelNotFoundError(AgentApiError):
    """Requested model or endpoint not available."""

    def __init__(self, message: str = "Not found", status_code: Optional[int] = 404):
        super().__init__(message, status_code=status_code, should_retry=False)


class RateLimitError(AgentApiError):
    """Hit API rate limit."""

    def __init__(self, message: str = "Rate limited", status_code: Optional[int] = 429):
        super().__init__(message, status_code=status_code, should_retry=True)


class ResponseParseError(AgentApiError):
    """Failed to parse an agent API response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, status_code=status_code, should_retry=True)


class PlatformError(AgentApiError):
    """Server-side failure that states whether the call may be retried."""

    def __init__(
        self,
        message: str,
        detail: str = "",
        status_code: Optional[int] = 409,
        should_retry: bool = False,
    ):
        self.detail = detail
        super().__init__(message, status_code=status_code, should_retry=should_retry)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

_FATAL_TYPES: tuple[type[BaseException], ...] = (
    AuthenticationError,
    ModelNotFoundError,
    ConfigError,
)


def is_retryable_error(error: BaseException) -> bool:
    """Return False when the error should stop the whole agent.

    Known fatal types always stop. Errors carrying a boolean
    ``should_retry`` attribute are trusted. Anything else is transient.
    """
    if isinstance(error, _FATAL_TYPES):
        return False
    should_retry = getattr(error, "should_retry", None)
    if isinstance(should_retry, bool):
        return should_retry
    return True
