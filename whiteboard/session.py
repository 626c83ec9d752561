"""
session.py — One board, one owner.

A BoardSession holds every piece of mutable state for a single board (layout
state, registry, grid occupancy, the primitive stream) and wires them into
the command interpreter and the tool dispatcher. Nothing is shared between
boards.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from whiteboard.context.audit import AuditLog
from whiteboard.context.registry import ElementRegistry
from whiteboard.engine.layout_engine import LayoutEngine, LayoutState
from whiteboard.engine.spatial_grid import GridPlacer
from whiteboard.engine.themes import Subject, get_theme
from whiteboard.engine.units import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH
from whiteboard.interpreter.commands import HandlerContext
from whiteboard.interpreter.interpreter import CommandInterpreter
from whiteboard.interpreter.tools import ToolDispatcher
from whiteboard.renderer.base import BoardRenderer, RecordingRenderer

logger = logging.getLogger(__name__)


class BoardSession:
    """
    All state and services for one whiteboard.

    Usage:
        session = BoardSession(subject="math")
        await session.interpreter.execute_command({"action": "write_text", "content": "Limits"})
        await session.tools.call("plot_functions", {"title": "f", "equations": ["x^2"]})
    """

    def __init__(
        self,
        board_id: Optional[str] = None,
        width: float = DEFAULT_CANVAS_WIDTH,
        height: float = DEFAULT_CANVAS_HEIGHT,
        subject: Subject | str = Subject.GENERAL,
        renderer: Optional[BoardRenderer] = None,
    ):
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")

        self.board_id = board_id or f"board_{uuid.uuid4().hex[:12]}"
        theme = get_theme(subject)

        self.layout = LayoutEngine(LayoutState(width=width, height=height, subject=theme.subject))
        self.audit = AuditLog()
        self.registry = ElementRegistry(self.audit)
        self.placer = GridPlacer(width, height)
        self.renderer = renderer or RecordingRenderer()

        self.context = HandlerContext(
            layout=self.layout,
            registry=self.registry,
            renderer=self.renderer,
            placer=self.placer,
        )
        self.interpreter = CommandInterpreter(self.context)
        self.tools = ToolDispatcher(self.context)

        logger.info(f"Created board {self.board_id} ({width:.0f}x{height:.0f}, {theme.subject.value})")

    @property
    def width(self) -> float:
        return self.layout.state.width

    @property
    def height(self) -> float:
        return self.layout.state.height

    def resize(self, width: float, height: float) -> None:
        """
        Adopt new canvas dimensions.

        Zone cursors are recomputed (keeping vertical progress) and the grid
        placer starts over on the new canvas; elements already placed stay
        where they are and stay registered.

        Raises:
            ValueError: If either dimension is not positive
        """
        self.layout.resize(width, height)
        placed = list(self.placer.placed.values())
        self.placer = GridPlacer(width, height)
        for element in placed:
            self.placer.reserve(element.id, element.kind, element.bbox)
        self.context.placer = self.placer
        logger.info(f"Board {self.board_id} resized to {width:.0f}x{height:.0f}")

    def describe(self) -> str:
        """Plain-text description of the board, for the agent's context."""
        return self.layout.describe()

    def summary(self) -> Dict[str, Any]:
        """Counts and settings, as reported by the HTTP service."""
        return {
            "board_id": self.board_id,
            "width": self.width,
            "height": self.height,
            "mode": self.layout.mode.value,
            "subject": self.layout.subject.value,
            "elements": len(self.registry),
            "groups": len(self.layout.groups),
            "primitives": len(self.primitives),
            "queue_length": self.interpreter.queue_length,
            "description": self.describe(),
        }

    @property
    def primitives(self) -> list:
        """Primitive stream, when the renderer records one."""
        if isinstance(self.renderer, RecordingRenderer):
            return self.renderer.commands
        return []
