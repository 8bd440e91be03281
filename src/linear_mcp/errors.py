"""Error taxonomy and classification for Linear MCP tool calls.

Every failure leaving a handler is a ToolError carrying one ErrorKind and a
message that is safe to show to the invoking assistant verbatim.

Upstream failures are classified from the structured GraphQL error code when
the gateway provides one. Matching on message substrings is only a fallback;
it breaks silently if Linear rewords its errors.
"""
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Fixed set of error kinds surfaced to the invoker."""
    VALIDATION = "ValidationError"
    AUTH = "AuthError"
    NOT_FOUND = "NotFoundError"
    UPSTREAM = "UpstreamError"
    PARTIAL_FAILURE = "PartialFailureError"
    UNKNOWN_TOOL = "UnknownToolError"


class ToolError(Exception):
    """Base exception for every classified tool failure."""

    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.operation = operation
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "operation": self.operation,
            "details": self.details,
        }


class ValidationError(ToolError):
    """Malformed or incomplete tool arguments."""
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field


class AuthError(ToolError):
    """No valid Linear session."""
    kind = ErrorKind.AUTH


class NotFoundError(ToolError):
    """A referenced entity does not exist upstream."""
    kind = ErrorKind.NOT_FOUND


class UpstreamError(ToolError):
    """Any other failure reported by the Linear API."""
    kind = ErrorKind.UPSTREAM


class PartialFailureError(ToolError):
    """An earlier step of a multi-step operation succeeded and a later one failed."""
    kind = ErrorKind.PARTIAL_FAILURE

    def __init__(self, message: str, failed_step: str, completed: dict[str, Any], **kwargs):
        details = {"failed_step": failed_step, "completed": completed}
        super().__init__(message, details=details, **kwargs)
        self.failed_step = failed_step
        self.completed = completed


class UnknownToolError(ToolError):
    """The tool name itself is not registered."""
    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", details={"tool_name": tool_name})
        self.tool_name = tool_name


class GatewayError(Exception):
    """Raised by the GraphQL client for transport, HTTP and GraphQL errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


# Structured codes Linear puts in GraphQL error extensions
NOT_FOUND_CODES = frozenset({"ENTITY_NOT_FOUND", "NOT_FOUND"})
AUTH_CODES = frozenset({"AUTHENTICATION_ERROR", "UNAUTHENTICATED"})

# Fallback substrings, checked only when no structured code matched
NOT_FOUND_PATTERNS = (
    "Entity not found",
    "Could not find referenced",
)


def is_not_found_message(message: str) -> bool:
    return any(pattern in message for pattern in NOT_FOUND_PATTERNS)


def classify_error(exc: BaseException, operation: str) -> ToolError:
    """Map any raised error to a ToolError of the fixed taxonomy.

    Args:
        exc: The exception raised while running a handler
        operation: Human-readable operation name, e.g. "create issue"

    Returns:
        The classified ToolError. ToolError instances are returned unchanged.
    """
    if isinstance(exc, ToolError):
        return exc

    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__

    if isinstance(exc, GatewayError):
        if exc.code in NOT_FOUND_CODES:
            return NotFoundError(f"Failed to {operation}: {message}", cause=exc, operation=operation)
        if exc.code in AUTH_CODES or exc.status_code == 401:
            return AuthError(
                f"Failed to {operation}: Linear rejected the credentials ({message}). "
                "Run linear_auth again or update LINEAR_ACCESS_TOKEN.",
                cause=exc,
                operation=operation,
            )

    if is_not_found_message(message):
        return NotFoundError(f"Failed to {operation}: {message}", cause=exc, operation=operation)

    return UpstreamError(f"Failed to {operation}: {message}", cause=exc, operation=operation)
