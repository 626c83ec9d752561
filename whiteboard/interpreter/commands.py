"""Pydantic models for semantic commands and their results.

Commands arrive from the agent as loosely typed JSON. Every nested payload
is a closed model (``extra="forbid"``): an unrecognized style or position key
is rejected instead of being silently ignored.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from whiteboard.dsl.schema import BoardCommand, Point
from whiteboard.engine.data_models import TimelineEvent, TreeNode

if TYPE_CHECKING:
    from whiteboard.context.registry import ElementRegistry
    from whiteboard.engine.layout_engine import LayoutEngine
    from whiteboard.engine.spatial_grid import GridPlacer
    from whiteboard.renderer.base import BoardRenderer


BUILTIN_ACTIONS = (
    "write_text",
    "draw_shape",
    "draw_arrow",
    "create_diagram",
    "highlight",
    "erase",
    "modify",
    "clear_region",
)

Region = Literal[
    # Flow positions handled by the zone layout
    "auto",
    "main",
    "below",
    "indent",
    "aside",
    "sidebar",
    "new-column",
    "footer",
    # Generic positions handled by the grid placer
    "header",
    "center",
    "top_left",
    "top_right",
    "bottom_left",
    "bottom_right",
    "below_previous",
]

ErrorType = Literal["validation", "resolution", "handler"]


# ============================================================================
# Payload Models
# ============================================================================


class BorderOptions(BaseModel):
    """Border drawn around an element."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    style: Literal["solid", "dashed", "dotted"] = "solid"
    width: float = Field(default=2, gt=0)
    color: Optional[str] = None


class StyleOptions(BaseModel):
    """Presentation options for a command.

    Every field has a concrete effect:

    - ``size``: title/large/medium pick the title/heading/subheading role;
      small shrinks body text.
    - ``color``: overrides the theme color of the drawn text or outline.
    - ``emphasis``: bold weight, an underline, or a box (equation role plus
      an enclosing rectangle).
    - ``border``: an enclosing rectangle; on text it selects the example role.
    - ``background``: a filled rectangle drawn beneath the element.
    - ``font``: overrides the theme font family.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    size: Optional[Literal["small", "medium", "large", "title"]] = None
    color: Optional[str] = None
    emphasis: Optional[Literal["normal", "bold", "underline", "box"]] = None
    border: Optional[BorderOptions] = None
    background: Optional[str] = None
    font: Optional[str] = None


class Padding(BaseModel):
    """Per-side padding."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0


class PositionOptions(BaseModel):
    """Where to place the element."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    region: Optional[Region] = None
    relative_to: Optional[str] = Field(default=None, alias="relativeTo")
    align_with: Optional[str] = Field(default=None, alias="alignWith")
    padding: Union[float, Padding, None] = None

    def padding_value(self) -> float:
        """Uniform padding; per-side padding uses its largest side."""
        if self.padding is None:
            return 0
        if isinstance(self.padding, Padding):
            return max(self.padding.top, self.padding.right, self.padding.bottom, self.padding.left)
        return self.padding


class CommandData(BaseModel):
    """Structured payload for diagrams and grouped text."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Optional[Literal["tree", "timeline", "graph"]] = None
    root: Optional[TreeNode] = None
    events: Optional[list[TimelineEvent]] = None
    equations: Optional[list[str]] = None
    title: Optional[str] = None
    group: Optional[str] = Field(default=None, description="Group id or title for write_text")


# ============================================================================
# Command & Result
# ============================================================================


class SemanticCommand(BaseModel):
    """A validated semantic command."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    id: str
    action: str = Field(min_length=1)
    content: Optional[str] = None
    style: Optional[StyleOptions] = None
    position: Optional[PositionOptions] = None
    reference: Optional[str] = None
    source: Optional[str] = Field(default=None, alias="from")
    target: Optional[str] = Field(default=None, alias="to")
    label: Optional[str] = None
    data: Optional[CommandData] = None


class ExecutionResult(BaseModel):
    """Outcome of executing one command."""

    command_id: Optional[str] = None
    success: bool
    element_id: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None
    position: Optional[Point] = None
    commands: list[BoardCommand] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def failure(
        cls, error: str, error_type: ErrorType, command_id: Optional[str] = None
    ) -> "ExecutionResult":
        return cls(command_id=command_id, success=False, error=error, error_type=error_type)


@dataclass
class HandlerContext:
    """Board-scoped collaborators shared by every handler."""

    layout: "LayoutEngine"
    registry: "ElementRegistry"
    renderer: "BoardRenderer"
    placer: "GridPlacer"
