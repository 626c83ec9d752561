"""Semantic command interpretation and dispatch."""

from whiteboard.interpreter.commands import (
    BUILTIN_ACTIONS,
    BorderOptions,
    CommandData,
    ExecutionResult,
    HandlerContext,
    Padding,
    PositionOptions,
    SemanticCommand,
    StyleOptions,
)
from whiteboard.interpreter.handlers import DEFAULT_HANDLERS, ActionHandler
from whiteboard.interpreter.interpreter import REQUIRED_FIELDS, CommandInterpreter
from whiteboard.interpreter.tools import TOOL_DECLARATIONS, ToolDispatcher

__all__ = [
    "BUILTIN_ACTIONS",
    "BorderOptions",
    "CommandData",
    "ExecutionResult",
    "HandlerContext",
    "Padding",
    "PositionOptions",
    "SemanticCommand",
    "StyleOptions",
    "DEFAULT_HANDLERS",
    "ActionHandler",
    "REQUIRED_FIELDS",
    "CommandInterpreter",
    "TOOL_DECLARATIONS",
    "ToolDispatcher",
]
