"""
Semantic whiteboard layout and dispatch engine.

Turns high-level drawing instructions from a tutoring agent into
pixel-positioned board primitives, and remembers what was drawn so later
instructions can refer back to it.
"""

from whiteboard.context.registry import ElementRegistry
from whiteboard.engine.layout_engine import LayoutEngine, LayoutMode, LayoutState, SemanticPosition
from whiteboard.engine.spatial_grid import GridPlacer
from whiteboard.engine.themes import SemanticRole, Subject
from whiteboard.errors import (
    CommandValidationError,
    ExpressionError,
    HandlerError,
    ResolutionError,
    ToolCallError,
    WhiteboardError,
)
from whiteboard.interpreter import CommandInterpreter, ExecutionResult, SemanticCommand, ToolDispatcher
from whiteboard.renderer import BoardRenderer, RecordingRenderer
from whiteboard.session import BoardSession

__version__ = "0.1.0"

__all__ = [
    "BoardSession",
    "LayoutEngine",
    "LayoutMode",
    "LayoutState",
    "SemanticPosition",
    "SemanticRole",
    "Subject",
    "GridPlacer",
    "ElementRegistry",
    "CommandInterpreter",
    "ExecutionResult",
    "SemanticCommand",
    "ToolDispatcher",
    "BoardRenderer",
    "RecordingRenderer",
    "WhiteboardError",
    "CommandValidationError",
    "ResolutionError",
    "HandlerError",
    "ExpressionError",
    "ToolCallError",
]
