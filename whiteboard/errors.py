"""Exception hierarchy for the whiteboard engine.

Validation failures block a single command before any mutation. Resolution
failures are reported by lookups as ``None``; handlers raise
``ResolutionError`` when a missing reference makes a command impossible.
Every handler exception is converted to a structured failure by the
interpreter, so none of these ever escapes a command execution.
"""


class WhiteboardError(Exception):
    """Base class for all whiteboard errors."""


class CommandValidationError(WhiteboardError):
    """A command is malformed or misses a required field."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ResolutionError(WhiteboardError):
    """A reference (id or description) does not name a live element."""

    def __init__(self, message: str, reference: str | None = None) -> None:
        super().__init__(message)
        self.reference = reference


class HandlerError(WhiteboardError):
    """An action handler could not complete its command."""


class ExpressionError(WhiteboardError):
    """An equation could not be parsed by the sandboxed evaluator."""

    def __init__(self, message: str, expression: str = "") -> None:
        super().__init__(f"{message} in expression {expression!r}")
        self.expression = expression


class ToolCallError(WhiteboardError):
    """An agent tool call named an unknown tool or carried bad arguments."""
