"""
tools.py — Agent tool-call surface.

The tutoring agent drives the board through function calls such as
``write_text(text, role, position)`` or ``draw_tree(root)``. This module
declares those tools (names, argument schemas and descriptions, in the form
function-calling LLM APIs expect) and dispatches calls straight to the
layout engine, registering every created entity in the registry.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from whiteboard.dsl.schema import ClearPrimitive
from whiteboard.engine.data_models import TimelineEvent, TreeNode
from whiteboard.engine.layout_engine import LayoutMode, Placement, SemanticPosition, ShapeKind
from whiteboard.engine.themes import SemanticRole, Subject
from whiteboard.errors import ToolCallError
from whiteboard.interpreter.commands import HandlerContext
from whiteboard.interpreter.handlers import register_tree, render, reserve

logger = logging.getLogger(__name__)


# =============================================================================
# ARGUMENT MODELS
# =============================================================================

class _ToolArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")


class SetSubjectArgs(_ToolArgs):
    subject: Subject


class WriteTextArgs(_ToolArgs):
    text: str = Field(min_length=1)
    role: SemanticRole = SemanticRole.BODY
    position: SemanticPosition = SemanticPosition.AUTO
    relative_to_id: Optional[str] = None
    group_id: Optional[str] = None


class DrawShapeArgs(_ToolArgs):
    shape: ShapeKind
    position: SemanticPosition = SemanticPosition.AUTO
    label: Optional[str] = None
    relative_to_id: Optional[str] = None


class DrawTreeArgs(_ToolArgs):
    root: TreeNode
    position: SemanticPosition = SemanticPosition.AUTO


class DrawTimelineArgs(_ToolArgs):
    events: List[TimelineEvent]
    position: SemanticPosition = SemanticPosition.AUTO


class PlotFunctionsArgs(_ToolArgs):
    title: str
    equations: List[str] = Field(min_length=1)
    position: SemanticPosition = SemanticPosition.AUTO
    relative_to_id: Optional[str] = None


class CreateGroupArgs(_ToolArgs):
    title: str = Field(min_length=1)
    position: SemanticPosition = SemanticPosition.AUTO


class ConnectElementsArgs(_ToolArgs):
    source_id: str
    target_id: str
    label: Optional[str] = None


class CreateNewBoardArgs(_ToolArgs):
    pass


class SetLayoutModeArgs(_ToolArgs):
    mode: LayoutMode


TOOL_DESCRIPTIONS: Dict[str, str] = {
    "set_subject": "Sets the visual theme of the board.",
    "write_text": "Writes text on the board. Returns element_id.",
    "draw_shape": "Draws a geometric shape or container. Returns element_id.",
    "draw_tree": "Draws a hierarchical tree structure. Returns tree_id.",
    "draw_timeline": "Draws a linear timeline of events. Returns timeline_id.",
    "plot_functions": "Plots multiple mathematical functions on a graph. Returns graph_id.",
    "create_group": "Creates a visual container. Returns group_id.",
    "connect_elements": "Draws an arrow connecting two elements.",
    "create_new_board": "Clears board and starts fresh.",
    "set_layout_mode": "Switches between a single column and a main + sidebar split.",
}

TOOL_ARGS: Dict[str, type] = {
    "set_subject": SetSubjectArgs,
    "write_text": WriteTextArgs,
    "draw_shape": DrawShapeArgs,
    "draw_tree": DrawTreeArgs,
    "draw_timeline": DrawTimelineArgs,
    "plot_functions": PlotFunctionsArgs,
    "create_group": CreateGroupArgs,
    "connect_elements": ConnectElementsArgs,
    "create_new_board": CreateNewBoardArgs,
    "set_layout_mode": SetLayoutModeArgs,
}


def tool_declarations() -> List[Dict[str, Any]]:
    """Function declarations for every tool, with JSON Schema parameters."""
    return [
        {
            "name": name,
            "description": TOOL_DESCRIPTIONS[name],
            "parameters": args_model.model_json_schema(),
        }
        for name, args_model in TOOL_ARGS.items()
    ]


TOOL_DECLARATIONS = tool_declarations()


# =============================================================================
# DISPATCHER
# =============================================================================

class ToolResult(BaseModel):
    """What a tool call reports back to the agent."""

    model_config = ConfigDict(frozen=True)

    tool: str
    element_id: Optional[str] = None
    member_ids: List[str] = Field(default_factory=list)
    message: str = ""
    warnings: List[str] = Field(default_factory=list)


class ToolDispatcher:
    """
    Executes agent tool calls against one board.

    Usage:
        tools = ToolDispatcher(context)
        result = await tools.call("write_text", {"text": "Cells", "role": "heading"})
    """

    def __init__(self, context: HandlerContext):
        self.context = context
        self._tools: Dict[str, Callable[[Any], Awaitable[ToolResult]]] = {
            "set_subject": self._set_subject,
            "write_text": self._write_text,
            "draw_shape": self._draw_shape,
            "draw_tree": self._draw_tree,
            "draw_timeline": self._draw_timeline,
            "plot_functions": self._plot_functions,
            "create_group": self._create_group,
            "connect_elements": self._connect_elements,
            "create_new_board": self._create_new_board,
            "set_layout_mode": self._set_layout_mode,
        }

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    async def call(self, name: str, args: Optional[Dict[str, Any]] = None) -> ToolResult:
        """
        Run one tool call.

        Raises:
            ToolCallError: For an unknown tool, bad arguments, or references
                to elements that do not exist
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolCallError(f"Unknown tool '{name}'. Available: {self.names}")
        try:
            parsed = TOOL_ARGS[name].model_validate(args or {})
        except ValidationError as e:
            raise ToolCallError(f"Invalid arguments for {name}: {e.errors()[0].get('msg')}") from e

        logger.debug(f"Tool call {name}")
        return await tool(parsed)

    # =========================================================================
    # TOOLS
    # =========================================================================

    async def _set_subject(self, args: SetSubjectArgs) -> ToolResult:
        theme = self.context.layout.set_subject(args.subject)
        return ToolResult(tool="set_subject", message=f"subject set to {theme.subject.value}")

    async def _write_text(self, args: WriteTextArgs) -> ToolResult:
        layout = self.context.layout
        if args.group_id and layout.get_group(args.group_id) is None:
            raise ToolCallError(f"Unknown group '{args.group_id}'")
        placement = layout.write_text(
            args.text,
            args.role,
            args.position,
            relative_to_id=args.relative_to_id,
            group_id=args.group_id,
        )
        self.context.registry.register_element(
            "text",
            content=args.text,
            bbox=placement.bbox,
            style={"role": args.role.value},
            description=args.text,
            element_id=placement.id,
        )
        return await self._finish("write_text", placement, "text")

    async def _draw_shape(self, args: DrawShapeArgs) -> ToolResult:
        placement = self.context.layout.draw_shape(
            args.shape, args.position, label=args.label, relative_to_id=args.relative_to_id
        )
        self.context.registry.register_element(
            args.shape.value,
            bbox=placement.bbox,
            label=args.label,
            description=args.label,
            element_id=placement.id,
        )
        return await self._finish("draw_shape", placement, args.shape.value)

    async def _draw_tree(self, args: DrawTreeArgs) -> ToolResult:
        placement = self.context.layout.draw_tree(args.root, args.position)
        register_tree(self.context, placement, args.root, args.root.label)
        return await self._finish("draw_tree", placement, "tree")

    async def _draw_timeline(self, args: DrawTimelineArgs) -> ToolResult:
        placement = self.context.layout.draw_timeline(args.events, args.position)
        self.context.registry.register_element(
            "timeline",
            content=", ".join(e.label for e in args.events),
            bbox=placement.bbox,
            element_id=placement.id,
        )
        return await self._finish("draw_timeline", placement, "timeline")

    async def _plot_functions(self, args: PlotFunctionsArgs) -> ToolResult:
        placement = self.context.layout.draw_graph(
            args.title, args.equations, args.position, relative_to_id=args.relative_to_id
        )
        self.context.registry.register_element(
            "graph",
            content=", ".join(args.equations),
            bbox=placement.bbox,
            description=args.title,
            element_id=placement.id,
        )
        return await self._finish("plot_functions", placement, "graph")

    async def _create_group(self, args: CreateGroupArgs) -> ToolResult:
        placement = self.context.layout.create_group(args.title, args.position)
        self.context.registry.register_element(
            "group",
            content=args.title,
            bbox=placement.bbox,
            description=args.title,
            element_id=placement.id,
        )
        return await self._finish("create_group", placement, "group")

    async def _connect_elements(self, args: ConnectElementsArgs) -> ToolResult:
        placement = self.context.layout.connect_elements(args.source_id, args.target_id, args.label)
        if placement is None:
            raise ToolCallError(
                f"Cannot connect {args.source_id} -> {args.target_id}: unknown element"
            )
        registry = self.context.registry
        registry.register_element(
            "arrow",
            bbox=placement.bbox,
            source=args.source_id,
            target=args.target_id,
            label=args.label,
            description=args.label,
            element_id=placement.id,
        )
        registry.add_relationship(args.source_id, args.target_id)
        await render(self.context, placement.commands)
        return ToolResult(tool="connect_elements", element_id=placement.id, warnings=placement.warnings)

    async def _create_new_board(self, args: CreateNewBoardArgs) -> ToolResult:
        ctx = self.context
        ctx.layout.reset()
        ctx.registry.clear()
        ctx.placer.reset()
        await render(ctx, [ClearPrimitive()])
        return ToolResult(tool="create_new_board", message="board cleared")

    async def _set_layout_mode(self, args: SetLayoutModeArgs) -> ToolResult:
        self.context.layout.set_layout_mode(args.mode)
        return ToolResult(tool="set_layout_mode", message=f"layout mode {args.mode.value}")

    async def _finish(self, tool: str, placement: Placement, kind: str) -> ToolResult:
        reserve(self.context, placement, kind)
        await render(self.context, placement.commands)
        return ToolResult(
            tool=tool,
            element_id=placement.id,
            member_ids=placement.member_ids,
            warnings=placement.warnings,
        )
