"""
handlers.py — Default action handlers.

Each handler translates one semantic command into layout engine calls, then:

1. Registers the resulting entity in the registry (keyed by its text or
   description) under the id minted by the layout engine
2. Reserves its box on the grid placer so generic placements avoid it
3. Forwards the emitted primitives to the renderer, in order

Registration happens before rendering; if the renderer fails, the entity
stays registered.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Optional

from whiteboard.dsl.schema import (
    BoardCommand,
    BoundingBox,
    CirclePrimitive,
    ClearPrimitive,
    EraseAreaPrimitive,
    FormulaPrimitive,
    HighlightPrimitive,
    LinePrimitive,
    Point,
    RectPrimitive,
    TextPrimitive,
)
from whiteboard.engine.data_models import TreeNode
from whiteboard.engine.layout_engine import Placement, SemanticPosition, ShapeKind, Zone
from whiteboard.engine.spatial_grid import PositionConstraints
from whiteboard.engine.themes import SemanticRole, Theme
from whiteboard.engine.units import ERASE_PADDING, HIGHLIGHT_PADDING
from whiteboard.errors import CommandValidationError, HandlerError, ResolutionError
from whiteboard.interpreter.commands import (
    ExecutionResult,
    HandlerContext,
    SemanticCommand,
    StyleOptions,
)

logger = logging.getLogger(__name__)

ActionHandler = Callable[[SemanticCommand, HandlerContext], Awaitable[ExecutionResult]]

# Command regions resolved by the zone layout, and the position each maps to
FLOW_REGIONS: Dict[str, SemanticPosition] = {
    "auto": SemanticPosition.AUTO,
    "main": SemanticPosition.AUTO,
    "below": SemanticPosition.BELOW,
    "indent": SemanticPosition.INDENT,
    "aside": SemanticPosition.ASIDE,
    "sidebar": SemanticPosition.ASIDE,
    "new-column": SemanticPosition.NEW_COLUMN,
    "footer": SemanticPosition.FOOTER,
}

# Regions that clear_region maps onto zones; "auto" clears the whole board
CLEARABLE_ZONES: Dict[str, Zone] = {
    "main": Zone.MAIN,
    "sidebar": Zone.SIDEBAR,
    "aside": Zone.SIDEBAR,
    "header": Zone.HEADER,
    "footer": Zone.FOOTER,
}

STYLE_FRAME_PADDING = 10
UNDERLINE_OFFSET = 4
SMALL_TEXT_SCALE = 0.75


# =============================================================================
# SHARED HELPERS
# =============================================================================

async def render(ctx: HandlerContext, commands: List[BoardCommand]) -> None:
    """Forward primitives to the renderer in order."""
    await ctx.renderer.draw_all(commands)


def reserve(ctx: HandlerContext, placement: Placement, kind: str) -> None:
    """Mark a placement's box as taken on the grid placer."""
    if placement.bbox is not None:
        ctx.placer.reserve(placement.id, kind, placement.bbox)


def result_for(command: SemanticCommand, placement: Placement, commands: List[BoardCommand]) -> ExecutionResult:
    position = None
    if placement.bbox is not None:
        position = Point(x=placement.bbox.x, y=placement.bbox.y)
    return ExecutionResult(
        command_id=command.id,
        success=True,
        element_id=placement.id,
        position=position,
        commands=commands,
        warnings=placement.warnings,
    )


def resolve_id(ctx: HandlerContext, reference: str) -> str:
    """
    Resolve a reference (description or id) to a live element id.

    Registry lookup runs first (description, then id); ids known only to the
    layout engine, such as groups created through tools, are accepted too.

    Raises:
        ResolutionError: If nothing on the board matches
    """
    element = ctx.registry.resolve_reference(reference)
    if element is not None:
        return element.id
    if ctx.layout.get_bbox(reference) is not None:
        return reference
    raise ResolutionError(f"Element not found: {reference}", reference=reference)


def optional_id(ctx: HandlerContext, reference: Optional[str]) -> Optional[str]:
    """Like ``resolve_id`` but returns None for missing or unknown references."""
    if not reference:
        return None
    try:
        return resolve_id(ctx, reference)
    except ResolutionError:
        logger.debug(f"Reference '{reference}' not found, using default placement")
        return None


def target_bbox(ctx: HandlerContext, element_id: str) -> BoundingBox:
    bbox = ctx.layout.get_bbox(element_id)
    if bbox is None:
        element = ctx.registry.find_element(element_id)
        bbox = element.bbox if element is not None else None
    if bbox is None:
        raise ResolutionError(f"Element {element_id} has no position on the board", reference=element_id)
    return bbox


def grid_constraints(ctx: HandlerContext, command: SemanticCommand) -> PositionConstraints:
    position = command.position
    return PositionConstraints(
        region=position.region,
        relative_to=optional_id(ctx, position.relative_to),
        align_with=optional_id(ctx, position.align_with),
        padding=position.padding_value(),
    )


def uses_grid(command: SemanticCommand) -> bool:
    """True when the command asks for a generic position rather than flow."""
    position = command.position
    if position is None:
        return False
    if position.align_with:
        return True
    return position.region is not None and position.region not in FLOW_REGIONS


def flow_position(command: SemanticCommand) -> SemanticPosition:
    region = command.position.region if command.position else None
    return FLOW_REGIONS.get(region or "auto", SemanticPosition.AUTO)


def relative_reference(command: SemanticCommand) -> Optional[str]:
    if command.position and command.position.relative_to:
        return command.position.relative_to
    return command.reference


# =============================================================================
# STYLE
# =============================================================================

def role_for_style(style: Optional[StyleOptions]) -> SemanticRole:
    """Map presentation options onto a semantic text role."""
    if style is None:
        return SemanticRole.BODY
    if style.size == "title":
        return SemanticRole.TITLE
    if style.size == "large":
        return SemanticRole.HEADING
    if style.size == "medium":
        return SemanticRole.SUBHEADING
    if style.emphasis == "box":
        return SemanticRole.EQUATION
    if style.border is not None:
        return SemanticRole.EXAMPLE
    return SemanticRole.BODY


def apply_text_style(
    commands: List[BoardCommand], bbox: BoundingBox, style: Optional[StyleOptions], theme: Theme
) -> List[BoardCommand]:
    """
    Apply style options to text primitives and add decorations.

    Returns a new list: an optional background rect first, the restyled text,
    then underline, box and border decorations.
    """
    if style is None:
        return list(commands)

    styled: List[BoardCommand] = []
    for command in commands:
        if isinstance(command, TextPrimitive):
            update = {}
            if style.color:
                update["color"] = style.color
            if style.font:
                update["font_family"] = style.font
            if style.emphasis == "bold":
                update["weight"] = "bold"
            if style.size == "small":
                update["size"] = command.size * SMALL_TEXT_SCALE
            command = command.model_copy(update=update)
        elif isinstance(command, FormulaPrimitive) and style.color:
            command = command.model_copy(update={"color": style.color})
        styled.append(command)

    frame = bbox.expanded(STYLE_FRAME_PADDING)
    if style.background:
        # Beneath the text, but after any erase that precedes it
        first_text = next(
            (i for i, c in enumerate(styled) if isinstance(c, (TextPrimitive, FormulaPrimitive))),
            0,
        )
        styled.insert(
            first_text,
            RectPrimitive(
                x=frame.x, y=frame.y, width=frame.width, height=frame.height,
                color=style.background, fill=style.background, line_width=0,
            ),
        )
    if style.emphasis == "underline":
        y = bbox.bottom + UNDERLINE_OFFSET
        styled.append(
            LinePrimitive(
                x1=bbox.x, y1=y, x2=bbox.right, y2=y,
                color=style.color or theme.accent_color,
            )
        )
    if style.emphasis == "box":
        styled.append(
            RectPrimitive(
                x=frame.x, y=frame.y, width=frame.width, height=frame.height,
                color=style.color or theme.accent_color,
            )
        )
    if style.border is not None:
        styled.append(
            RectPrimitive(
                x=frame.x, y=frame.y, width=frame.width, height=frame.height,
                color=style.border.color or theme.secondary_color,
                line_width=style.border.width,
                dash=style.border.style,
            )
        )
    return styled


def apply_shape_style(commands: List[BoardCommand], style: Optional[StyleOptions]) -> List[BoardCommand]:
    """Apply color, background and border options to a shape's outline."""
    if style is None:
        return list(commands)

    styled: List[BoardCommand] = []
    for command in commands:
        if isinstance(command, (RectPrimitive, CirclePrimitive)):
            update = {}
            if style.color:
                update["color"] = style.color
            if style.background:
                update["fill"] = style.background
            if style.border is not None:
                if style.border.color:
                    update["color"] = style.border.color
                if isinstance(command, RectPrimitive):
                    update["line_width"] = style.border.width
                    update["dash"] = style.border.style
            command = command.model_copy(update=update)
        elif isinstance(command, TextPrimitive) and style.font:
            command = command.model_copy(update={"font_family": style.font})
        elif style.color and not isinstance(command, TextPrimitive):
            command = command.model_copy(update={"color": style.color})
        styled.append(command)
    return styled


def style_payload(style: Optional[StyleOptions]) -> dict:
    return style.model_dump(exclude_none=True) if style is not None else {}


def register_tree(
    ctx: HandlerContext, placement: Placement, root: TreeNode, description: Optional[str]
) -> None:
    """Register a drawn tree, its nodes, and the tree/parent/child edges."""
    registry = ctx.registry
    registry.register_element(
        "tree",
        content=root.label,
        bbox=placement.bbox,
        description=description,
        element_id=placement.id,
    )
    for node_id in placement.member_ids:
        node = ctx.layout.get_element(node_id)
        registry.register_element("tree-node", content=node.text, bbox=node.bbox, element_id=node_id)
    if placement.member_ids:
        registry.add_relationship(placement.id, placement.member_ids[0])
    for parent_id, child_id in placement.links:
        registry.add_relationship(parent_id, child_id)


# =============================================================================
# HANDLERS
# =============================================================================

async def handle_write_text(command: SemanticCommand, ctx: HandlerContext) -> ExecutionResult:
    """Write text in flow, in a group, or at a generic grid position."""
    layout = ctx.layout
    role = role_for_style(command.style)
    text = command.content

    if uses_grid(command):
        constraints = grid_constraints(ctx, command)
        width, height = layout.measure_text(text, role)
        element_id = layout.new_id("el")
        point = ctx.placer.place_element(element_id, "text", width, height, constraints)
        placement = layout.place_text_at(text, role, point.x, point.y, element_id=element_id)
    else:
        group_id = None
        if command.data is not None and command.data.group:
            group_id = resolve_id(ctx, command.data.group)
            if layout.get_group(group_id) is None:
                raise ResolutionError(f"{command.data.group} is not a group", reference=command.data.group)
        placement = layout.write_text(
            text,
            role,
            flow_position(command),
            relative_to_id=optional_id(ctx, relative_reference(command)),
            group_id=group_id,
        )

    ctx.registry.register_element(
        "text",
        content=text,
        bbox=placement.bbox,
        style=style_payload(command.style),
        description=text,
        element_id=placement.id,
    )
    reserve(ctx, placement, "text")

    commands = apply_text_style(placement.commands, placement.bbox, command.style, layout.theme)
    await render(ctx, commands)
    return result_for(command, placement, commands)


def shape_from_content(content: Optional[str]) -> ShapeKind:
    """Pick a shape from keywords in free text; rectangles by default."""
    text = (content or "").lower()
    if "rectangle" in text or "box" in text:
        return ShapeKind.RECTANGLE
    if "circle" in text or "round" in text:
        return ShapeKind.CIRCLE
    if "arrow" in text:
        return ShapeKind.ARROW
    if "line" in text:
        return ShapeKind.LINE
    return ShapeKind.RECTANGLE


async def handle_draw_shape(command: SemanticCommand, ctx: HandlerContext) -> ExecutionResult:
    """Draw a shape named by keywords in ``content``."""
    layout = ctx.layout
    shape = shape_from_content(command.content)

    if uses_grid(command):
        constraints = grid_constraints(ctx, command)
        width, height = layout.shape_size()
        element_id = layout.new_id("shape")
        point = ctx.placer.place_element(element_id, shape.value, width, height, constraints)
        placement = layout.place_shape_at(
            shape, point.x, point.y, label=command.label, element_id=element_id
        )
    else:
        placement = layout.draw_shape(
            shape,
            flow_position(command),
            label=command.label,
            relative_to_id=optional_id(ctx, relative_reference(command)),
        )

    ctx.registry.register_element(
        shape.value,
        content=command.content,
        bbox=placement.bbox,
        style=style_payload(command.style),
        label=command.label,
        description=command.label or command.content,
        element_id=placement.id,
    )
    reserve(ctx, placement, shape.value)

    commands = apply_shape_style(placement.commands, command.style)
    await render(ctx, commands)
    return result_for(command, placement, commands)


async def handle_draw_arrow(command: SemanticCommand, ctx: HandlerContext) -> ExecutionResult:
    """Connect two elements referenced by description or id."""
    source, target = ctx.registry.resolve_references(command.source, command.target)
    source_id = source.id if source is not None else optional_id(ctx, command.source)
    target_id = target.id if target is not None else optional_id(ctx, command.target)
    if source_id is None or target_id is None:
        missing = command.source if source_id is None else command.target
        raise ResolutionError(
            f"Cannot resolve arrow references: from={command.source}, to={command.target}",
            reference=missing,
        )

    placement = ctx.layout.connect_elements(source_id, target_id, command.label)
    if placement is None:
        raise ResolutionError(
            f"Cannot connect {source_id} to {target_id}: not placed on the board",
            reference=source_id,
        )

    ctx.registry.register_element(
        "arrow",
        bbox=placement.bbox,
        style=style_payload(command.style),
        source=source_id,
        target=target_id,
        label=command.label,
        description=f"arrow from {command.source} to {command.target}",
        element_id=placement.id,
    )
    ctx.registry.add_relationship(source_id, target_id)

    commands = apply_shape_style(placement.commands, command.style)
    await render(ctx, commands)
    return result_for(command, placement, commands)


def diagram_kind(command: SemanticCommand) -> str:
    data = command.data
    if data is not None and data.kind:
        return data.kind
    text = (command.content or "").lower()
    for kind in ("tree", "timeline", "graph"):
        if kind in text:
            return kind
    if data is not None:
        if data.root is not None:
            return "tree"
        if data.events:
            return "timeline"
        if data.equations:
            return "graph"
    raise HandlerError(f"Unsupported diagram type: {command.content!r}")


async def handle_create_diagram(command: SemanticCommand, ctx: HandlerContext) -> ExecutionResult:
    """Draw a tree, timeline or graph from ``data``."""
    layout = ctx.layout
    registry = ctx.registry
    data = command.data
    kind = diagram_kind(command)
    position = flow_position(command)

    if kind == "tree":
        root = data.root if data is not None else None
        if root is None:
            root = TreeNode(label=command.label or command.content or "Root")
        placement = layout.draw_tree(root, position)
        register_tree(ctx, placement, root, command.label or root.label)

    elif kind == "timeline":
        if data is None or not data.events:
            raise CommandValidationError("create_diagram timeline requires data.events", field="data.events")
        placement = layout.draw_timeline(data.events, position)
        registry.register_element(
            "timeline",
            content=", ".join(e.label for e in data.events),
            bbox=placement.bbox,
            description=command.label,
            element_id=placement.id,
        )

    else:
        if data is None or not data.equations:
            raise CommandValidationError("create_diagram graph requires data.equations", field="data.equations")
        title = data.title or command.label or "Graph"
        placement = layout.draw_graph(
            title,
            data.equations,
            position,
            relative_to_id=optional_id(ctx, relative_reference(command)),
        )
        registry.register_element(
            "graph",
            content=", ".join(data.equations),
            bbox=placement.bbox,
            description=title,
            element_id=placement.id,
        )

    reserve(ctx, placement, kind)
    await render(ctx, placement.commands)
    return result_for(command, placement, placement.commands)


async def handle_highlight(command: SemanticCommand, ctx: HandlerContext) -> ExecutionResult:
    """Draw a highlight band over a referenced element."""
    element_id = resolve_id(ctx, command.reference)
    area = target_bbox(ctx, element_id).expanded(HIGHLIGHT_PADDING)
    color = command.style.color if command.style and command.style.color else ctx.layout.theme.accent_color
    commands: List[BoardCommand] = [
        HighlightPrimitive(x=area.x, y=area.y, width=area.width, height=area.height, color=color)
    ]
    await render(ctx, commands)
    return ExecutionResult(
        command_id=command.id,
        success=True,
        element_id=element_id,
        position=Point(x=area.x, y=area.y),
        commands=commands,
    )


def forget(ctx: HandlerContext, element_id: str) -> None:
    """Remove an element (and any tree nodes it owns) from layout, registry and grid."""
    for member_id in ctx.layout.members_of(element_id):
        ctx.layout.remove_element(member_id)
        ctx.registry.remove_element(member_id)
        ctx.placer.forget(member_id)
    ctx.layout.remove_element(element_id)
    ctx.registry.remove_element(element_id)
    ctx.placer.forget(element_id)


async def handle_erase(command: SemanticCommand, ctx: HandlerContext) -> ExecutionResult:
    """Erase a referenced element and forget it."""
    element_id = resolve_id(ctx, command.reference)
    area = target_bbox(ctx, element_id).expanded(ERASE_PADDING)
    forget(ctx, element_id)

    commands: List[BoardCommand] = [
        EraseAreaPrimitive(x=area.x, y=area.y, width=area.width, height=area.height)
    ]
    await render(ctx, commands)
    return ExecutionResult(
        command_id=command.id,
        success=True,
        element_id=element_id,
        position=Point(x=area.x, y=area.y),
        commands=commands,
    )


async def handle_modify(command: SemanticCommand, ctx: HandlerContext) -> ExecutionResult:
    """Rewrite and/or restyle a referenced text element in place."""
    if command.content is None and command.style is None:
        raise CommandValidationError("modify requires content or style", field="content")

    element_id = resolve_id(ctx, command.reference)
    element = ctx.layout.get_element(element_id)
    if element is None or element.text is None:
        raise HandlerError(f"Element {element_id} is not a text element")

    previous_text = element.text
    text = command.content if command.content is not None else previous_text
    placement = ctx.layout.rewrite_text(element_id, text)
    if placement is None:
        raise HandlerError(f"Element {element_id} cannot be modified")

    changes = {"content": text, "bbox": placement.bbox}
    registered = ctx.registry.find_element(element_id)
    if registered is not None:
        if registered.description == previous_text:
            changes["description"] = text
        if command.style is not None:
            changes["style"] = {**registered.style, **style_payload(command.style)}
        ctx.registry.update_element(element_id, **changes)

    commands = apply_text_style(placement.commands, placement.bbox, command.style, ctx.layout.theme)
    await render(ctx, commands)
    return result_for(command, placement, commands)


async def handle_clear_region(command: SemanticCommand, ctx: HandlerContext) -> ExecutionResult:
    """Clear a zone, or the whole board for region ``auto``."""
    region = command.position.region

    if region == "auto":
        ctx.layout.reset()
        ctx.registry.clear()
        ctx.placer.reset()
        commands: List[BoardCommand] = [ClearPrimitive()]
        await render(ctx, commands)
        return ExecutionResult(command_id=command.id, success=True, commands=commands)

    zone = CLEARABLE_ZONES.get(region)
    if zone is None:
        raise HandlerError(f"Cannot clear region '{region}'")

    area = ctx.layout.zone_area(zone)
    removed = ctx.layout.elements_within(area)
    for element_id in removed:
        forget(ctx, element_id)

    commands = [EraseAreaPrimitive(x=area.x, y=area.y, width=area.width, height=area.height)]
    await render(ctx, commands)
    logger.debug(f"Cleared {len(removed)} element(s) from {zone.value}")
    return ExecutionResult(
        command_id=command.id,
        success=True,
        position=Point(x=area.x, y=area.y),
        commands=commands,
    )


DEFAULT_HANDLERS: Dict[str, ActionHandler] = {
    "write_text": handle_write_text,
    "draw_shape": handle_draw_shape,
    "draw_arrow": handle_draw_arrow,
    "create_diagram": handle_create_diagram,
    "highlight": handle_highlight,
    "erase": handle_erase,
    "modify": handle_modify,
    "clear_region": handle_clear_region,
}
