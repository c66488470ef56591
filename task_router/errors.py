"""
Error kinds raised by the task router.

Each kind carries the HTTP status a transport layer should map it to.
"""

from typing import Optional


class TaskRouterError(Exception):
    """Base class for all task router errors."""

    status_code = 500


class ValidationError(TaskRouterError):
    """Malformed or missing input."""

    status_code = 400


class UninitializedError(TaskRouterError):
    """Agent used before initialize() completed."""

    status_code = 503

    def __init__(self, message: str = "Agent not initialized") -> None:
        super().__init__(message)


class NotFoundError(TaskRouterError):
    """Unknown tool name or unknown route."""

    status_code = 404


class ExecutionError(TaskRouterError):
    """A capability provider failed to produce a response."""

    status_code = 502

    def __init__(self, detail: str, tool_name: Optional[str] = None) -> None:
        self.detail = detail
        self.tool_name = tool_name
        if tool_name:
            super().__init__(f"{tool_name}: {detail}")
        else:
            super().__init__(detail)
