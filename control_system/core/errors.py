"""Error Hierarchy — typed, categorized exceptions for control-system failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Only ConfigurationError is fatal; everything else is handled where it occurs
    - GithubAPIError.hard is True exactly for the PROFILE and REPOS steps

Design Decisions:
    - Single hierarchy with ControlSystemError base: callers catch one type per boundary
    - ErrorContext as dataclass: rich log extras without coupling to logging setup
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from control_system.core.domain_types import FetchStep, HARD_STEPS


class ErrorSeverity(str, Enum):
    """Error severity for logging and status display."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    CONFIGURATION = "configuration"
    EXTERNAL_API = "external_api"
    CACHE = "cache"
    CHANNEL = "channel"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    username: str | None = None
    step: FetchStep | None = None
    path: str | None = None
    debug_info: dict[str, Any] | None = None


class ControlSystemError(Exception):
    """Base exception for all control-system errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def log_extra(self) -> dict:
        """Fields surfaced by JSONFormatter."""
        extra: dict[str, Any] = {
            "error_code": self.code,
            "category": self.category.value,
        }
        if self.context.step is not None:
            extra["step"] = self.context.step.value
        if self.context.path is not None:
            extra["path"] = self.context.path
        return extra


# ─── Startup ─────────────────────────────────────────────────────

class ConfigurationError(ControlSystemError):
    """Required configuration missing or invalid. Aborts startup."""
    def __init__(self, message: str, setting: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context,
        )
        self.setting = setting


# ─── External API ────────────────────────────────────────────────

_STEP_LABELS = {
    FetchStep.PROFILE: "Profile",
    FetchStep.REPOS: "Repos",
    FetchStep.EVENTS: "Events",
    FetchStep.RATE_LIMIT: "Rate limit",
}


class GithubAPIError(ControlSystemError):
    """One GitHub request failed (transport, HTTP status or payload shape)."""
    def __init__(
        self,
        step: FetchStep,
        message: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.step = step
        hard = step in HARD_STEPS
        super().__init__(
            message, "GITHUB_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR if hard else ErrorSeverity.WARNING, ctx,
        )
        self.step = step
        self.status_code = status_code
        self.hard = hard

    @property
    def reason(self) -> str:
        """Status-line text, e.g. 'Profile fetch failed: HTTP 404'."""
        return f"{_STEP_LABELS[self.step]} fetch failed: {self.message}"


# ─── Persistence ─────────────────────────────────────────────────

class CacheError(ControlSystemError):
    """Cache file could not be written or removed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cache {operation} failed: {message}",
            "CACHE_ERROR", ErrorCategory.CACHE,
            ErrorSeverity.ERROR, context,
        )
        self.operation = operation


# ─── Channels ────────────────────────────────────────────────────

class ChannelClosedError(ControlSystemError):
    """Snapshot published with no remaining subscribers."""
    def __init__(self, channel: str, context: ErrorContext | None = None):
        super().__init__(
            f"Channel '{channel}' has no subscribers",
            "CHANNEL_CLOSED", ErrorCategory.CHANNEL,
            ErrorSeverity.INFO, context,
        )
        self.channel = channel
