"""
layout_engine.py — Zone & cursor layout engine.

The LayoutEngine turns semantic placement requests ("write this heading",
"draw a tree aside", "connect these two") into pixel-positioned primitives:

1. Picks a zone from the element's role and requested position
2. Looks up typography for the role in the active theme
3. Places the element at the zone cursor, inside a group, or relative to an
   earlier element
4. Advances the zone cursor and records the element in the layout state

The board is divided into five zones. Header, main, sidebar and footer each
keep a vertical cursor that only moves down for sequential placements; the
floating zone holds notes and labels anchored to other elements and never
advances. Layout is greedy and local: nothing already placed is ever moved.

All mutable state lives in ``LayoutState`` so that each board session owns
exactly one copy; the engine itself is a thin set of operations over it.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from whiteboard.dsl.schema import (
    ArrowPrimitive,
    BoardCommand,
    BoundingBox,
    CirclePrimitive,
    EraseAreaPrimitive,
    FormulaPrimitive,
    LinePrimitive,
    RectPrimitive,
    TextPrimitive,
)
from whiteboard.engine.data_models import GraphSpec, TimelineEvent, TreeNode
from whiteboard.engine.layout_strategies import (
    ContentBounds,
    GraphStrategy,
    TimelineStrategy,
    TreeStrategy,
)
from whiteboard.engine.themes import (
    GROUP_COLORS,
    SemanticRole,
    Subject,
    Theme,
    get_theme,
    get_typography,
)
from whiteboard.engine.units import (
    BOARD_PADDING,
    BULLET_INDENT,
    CHAR_WIDTH_RATIO,
    CONNECTOR_LABEL_OFFSET,
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    ERASE_PADDING,
    EXPLICIT_INDENT,
    FLOATING_ANCHOR_GAP,
    FOOTER_HEIGHT,
    GRAPH_HEIGHT,
    GRAPH_WIDTH,
    GROUP_CHILD_GAP,
    GROUP_CONTENT_OFFSET,
    GROUP_HEADER_HEIGHT,
    GROUP_MARGIN,
    GROUP_PADDING,
    HEADER_TOP,
    LINE_HEIGHT_RATIO,
    MAIN_TOP,
    RELATIVE_GAP,
    SHAPE_HEIGHT,
    SHAPE_MARGIN,
    SHAPE_WIDTH,
    SIBLING_GAP,
    SPLIT_MAIN_RATIO,
    SPLIT_SIDEBAR_RATIO,
    SUBHEADING_INDENT,
    TIMELINE_HEIGHT,
    TREE_RESERVED_HEIGHT,
    ZONE_GAP,
    estimate_line_count,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class Zone(str, Enum):
    """Board regions, each with its own cursor."""
    HEADER = "header"
    MAIN = "main"
    SIDEBAR = "sidebar"
    FOOTER = "footer"
    FLOATING = "floating"


class LayoutMode(str, Enum):
    """Column arrangement of the main and sidebar zones."""
    STANDARD = "standard"
    SPLIT_VIEW = "split-view"


class SemanticPosition(str, Enum):
    """Where, semantically, the agent wants an element to go."""
    AUTO = "auto"
    BELOW = "below"
    ASIDE = "aside"
    INDENT = "indent"
    NEW_COLUMN = "new-column"
    FOOTER = "footer"


class ShapeKind(str, Enum):
    """Stand-alone shapes."""
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    ARROW = "arrow"
    LINE = "line"


# Roles placed in the floating zone, anchored below a reference
FLOATING_ROLES = (SemanticRole.NOTE, SemanticRole.LABEL)

# Roles whose ``text`` is not body copy and cannot be rewritten
NON_TEXT_ROLES = (SemanticRole.CONTAINER, SemanticRole.CONNECTOR, SemanticRole.TREE_NODE)


# =============================================================================
# STATE
# =============================================================================

@dataclass
class ZoneCursor:
    """Next free position in a zone."""
    x: float
    y: float
    width: float


@dataclass
class Element:
    """A placed element, as remembered by the layout engine."""
    id: str
    role: SemanticRole
    zone: Zone
    bbox: BoundingBox
    text: Optional[str] = None
    group_id: Optional[str] = None
    ref_id: Optional[str] = None


@dataclass
class Group:
    """A titled container whose box grows to enclose its children."""
    id: str
    title: str
    zone: Zone
    bbox: BoundingBox
    color: str


@dataclass
class Placement:
    """
    Result of one layout operation.

    ``commands`` are the primitives to hand to the renderer, in drawing order.
    ``member_ids`` lists sub-elements created alongside the main one (tree
    nodes), and ``links`` the parent/child pairs between them.
    """
    id: str
    commands: List[BoardCommand] = field(default_factory=list)
    bbox: Optional[BoundingBox] = None
    warnings: List[str] = field(default_factory=list)
    member_ids: List[str] = field(default_factory=list)
    links: List[Tuple[str, str]] = field(default_factory=list)


def compute_zone_cursors(mode: LayoutMode, width: float, height: float) -> Dict[Zone, ZoneCursor]:
    """
    Fresh zone geometry for a canvas.

    Args:
        mode: Layout mode deciding how main and sidebar share the width
        width: Canvas width in pixels
        height: Canvas height in pixels

    Returns:
        A cursor per zone, positioned at the top of the zone. Widths are
        never negative: on a canvas narrower than its padding a zone is
        zero wide.
    """
    available = max(width - 2 * BOARD_PADDING, 0)
    split_main = available * SPLIT_MAIN_RATIO
    sidebar = ZoneCursor(
        x=BOARD_PADDING + split_main + ZONE_GAP,
        y=MAIN_TOP,
        width=max(available * SPLIT_SIDEBAR_RATIO - ZONE_GAP, 0),
    )
    main_width = split_main if mode == LayoutMode.SPLIT_VIEW else available

    return {
        Zone.HEADER: ZoneCursor(x=BOARD_PADDING, y=HEADER_TOP, width=available),
        Zone.MAIN: ZoneCursor(x=BOARD_PADDING, y=MAIN_TOP, width=main_width),
        Zone.SIDEBAR: sidebar,
        Zone.FOOTER: ZoneCursor(x=BOARD_PADDING, y=height - FOOTER_HEIGHT, width=available),
        Zone.FLOATING: ZoneCursor(x=BOARD_PADDING, y=MAIN_TOP, width=main_width),
    }


@dataclass
class LayoutState:
    """All mutable layout data for one board."""
    width: float = DEFAULT_CANVAS_WIDTH
    height: float = DEFAULT_CANVAS_HEIGHT
    mode: LayoutMode = LayoutMode.STANDARD
    subject: Subject = Subject.GENERAL
    cursors: Dict[Zone, ZoneCursor] = field(default_factory=dict)
    elements: Dict[str, Element] = field(default_factory=dict)
    groups: Dict[str, Group] = field(default_factory=dict)
    last_element_id: Optional[str] = None
    group_color_index: int = 0
    id_counter: int = 0

    def __post_init__(self):
        if not self.cursors:
            self.cursors = compute_zone_cursors(self.mode, self.width, self.height)

    def next_id(self, prefix: str) -> str:
        """Mint a board-unique id. The counter is never rewound."""
        self.id_counter += 1
        return f"{prefix}_{self.id_counter}"


# =============================================================================
# LAYOUT ENGINE
# =============================================================================

class LayoutEngine:
    """
    Semantic layout over a ``LayoutState``.

    Usage:
        engine = LayoutEngine()
        placement = engine.write_text("Photosynthesis", SemanticRole.TITLE)
        for command in placement.commands:
            await renderer.draw(command)
    """

    def __init__(self, state: Optional[LayoutState] = None):
        self.state = state or LayoutState()
        self._trees = TreeStrategy()
        self._timelines = TimelineStrategy()
        self._graphs = GraphStrategy()

    # =========================================================================
    # PROPERTIES & LOOKUPS
    # =========================================================================

    @property
    def mode(self) -> LayoutMode:
        return self.state.mode

    @property
    def subject(self) -> Subject:
        return self.state.subject

    @property
    def theme(self) -> Theme:
        return get_theme(self.state.subject)

    @property
    def elements(self) -> List[Element]:
        return list(self.state.elements.values())

    @property
    def groups(self) -> List[Group]:
        return list(self.state.groups.values())

    def new_id(self, prefix: str) -> str:
        """Mint an element id ahead of placing the element."""
        return self.state.next_id(prefix)

    def get_cursor(self, zone: Zone | str) -> ZoneCursor:
        """Copy of a zone's cursor."""
        return replace(self.state.cursors[Zone(zone)])

    def get_element(self, element_id: str) -> Optional[Element]:
        return self.state.elements.get(element_id)

    def get_group(self, group_id: str) -> Optional[Group]:
        return self.state.groups.get(group_id)

    def get_bbox(self, element_id: str) -> Optional[BoundingBox]:
        """Bounding box of an element or group, or None if unknown."""
        element = self.state.elements.get(element_id)
        if element is not None:
            return element.bbox
        group = self.state.groups.get(element_id)
        if group is not None:
            return group.bbox
        return None

    # =========================================================================
    # MODE & SUBJECT
    # =========================================================================

    def set_layout_mode(self, mode: LayoutMode | str) -> None:
        """
        Switch between standard and split-view.

        Zone x and width are recomputed for the new mode. Vertical progress is
        kept: each cursor resumes at the lower of its fresh top and where it
        had already reached, so later content never overlaps earlier content.
        """
        mode = LayoutMode(mode)
        self.state.mode = mode
        self._recompute_cursors()
        logger.debug(f"Layout mode set to {mode.value}")

    def set_subject(self, subject: Subject | str) -> Theme:
        """
        Switch the active subject. Only later placements use the new theme.

        Raises:
            ValueError: If ``subject`` is not a known subject
        """
        theme = get_theme(subject)
        self.state.subject = theme.subject
        logger.debug(f"Subject set to {theme.subject.value}")
        return theme

    def resize(self, width: float, height: float) -> None:
        """Adopt new canvas dimensions; placed elements are not moved."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        self.state.width = width
        self.state.height = height
        self._recompute_cursors()

    def reset(self) -> None:
        """Forget every element and group and rewind all cursors.

        The id counter is left untouched so ids are never reused on a board.
        """
        state = self.state
        state.elements.clear()
        state.groups.clear()
        state.last_element_id = None
        state.group_color_index = 0
        state.mode = LayoutMode.STANDARD
        state.cursors = compute_zone_cursors(state.mode, state.width, state.height)
        logger.info("Layout reset")

    # =========================================================================
    # TEXT
    # =========================================================================

    def write_text(
        self,
        text: str,
        role: SemanticRole | str = SemanticRole.BODY,
        position: SemanticPosition | str = SemanticPosition.AUTO,
        relative_to_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> Placement:
        """
        Place a block of text according to its role.

        Args:
            text: Text to write
            role: Semantic role, deciding zone and typography
            position: Semantic position (aside, indent, footer, ...)
            relative_to_id: Element or group to place below
            group_id: Group to append the text to

        Returns:
            Placement with a single text (or formula) primitive
        """
        role = SemanticRole(role)
        position = SemanticPosition(position)
        typo = get_typography(role)
        indent = self._indent_for(role, position)

        group = self.state.groups.get(group_id) if group_id else None
        if group_id and group is None:
            logger.debug(f"Group {group_id} not found, placing {role.value} in its zone")

        if group is not None:
            zone = group.zone
            max_width = group.bbox.width - 2 * GROUP_PADDING - indent
        else:
            zone = self._zone_for(role, position)
            max_width = self.state.cursors[zone].width - indent
        max_width = max(max_width, typo.size)
        width, height = self._measure(text, typo.size, max_width)
        cursor = self.state.cursors[zone]

        if group is not None:
            bbox = self._place_in_group(group, width, height, indent)
        elif role in FLOATING_ROLES:
            anchor = self.get_bbox(relative_to_id) if relative_to_id else None
            if anchor is not None:
                bbox = BoundingBox(
                    x=anchor.x, y=anchor.bottom + FLOATING_ANCHOR_GAP, width=width, height=height
                )
            else:
                bbox = BoundingBox(x=cursor.x + indent, y=cursor.y, width=width, height=height)
        else:
            anchor_y = self._relative_top(relative_to_id) if relative_to_id else None
            if anchor_y is not None:
                bbox = BoundingBox(x=cursor.x + indent, y=anchor_y, width=width, height=height)
                self._advance_past(zone, bbox.bottom + typo.margin)
            else:
                bbox = BoundingBox(x=cursor.x + indent, y=cursor.y, width=width, height=height)
                cursor.y += height + typo.margin

            if typo.align == "center":
                bbox = BoundingBox(
                    x=cursor.x + (cursor.width - width) / 2, y=bbox.y, width=width, height=height
                )

        element = self._register(
            self.state.next_id("el"),
            role,
            zone,
            bbox,
            text=text,
            group_id=group.id if group is not None else None,
            ref_id=relative_to_id,
        )
        placement = Placement(
            id=element.id,
            commands=[self._text_command(text, role, bbox, max_width)],
            bbox=bbox,
        )
        self._check_overflow(placement)
        return placement

    def place_text_at(
        self,
        text: str,
        role: SemanticRole | str,
        x: float,
        y: float,
        element_id: Optional[str] = None,
    ) -> Placement:
        """
        Place text at an absolute point (chosen by the grid placer).

        No zone cursor moves; the element lives in the floating zone.
        Pass ``element_id`` when the id was minted up front with ``new_id``.
        """
        role = SemanticRole(role)
        typo = get_typography(role)
        max_width = max(self.state.width - BOARD_PADDING - x, typo.size)
        width, height = self._measure(text, typo.size, max_width)
        bbox = BoundingBox(x=x, y=y, width=width, height=height)

        element = self._register(
            element_id or self.state.next_id("el"), role, Zone.FLOATING, bbox, text=text
        )
        placement = Placement(
            id=element.id,
            commands=[self._text_command(text, role, bbox, max_width)],
            bbox=bbox,
        )
        self._check_overflow(placement)
        return placement

    def rewrite_text(self, element_id: str, text: str) -> Optional[Placement]:
        """
        Replace the text of an existing element in place.

        The old area is erased and the new text drawn at the same anchor; the
        element keeps its id, role and position. Returns None if the id is
        unknown or does not name a text element.
        """
        element = self.state.elements.get(element_id)
        if element is None or element.role in NON_TEXT_ROLES:
            return None

        typo = get_typography(element.role)
        max_width = max(self.state.width - BOARD_PADDING - element.bbox.x, typo.size)
        width, height = self._measure(text, typo.size, max_width)
        old_bbox = element.bbox
        x = old_bbox.x
        if typo.align == "center":
            x = old_bbox.center_x - width / 2
        bbox = BoundingBox(x=x, y=old_bbox.y, width=width, height=height)

        element.bbox = bbox
        element.text = text
        group = self.state.groups.get(element.group_id) if element.group_id else None
        if group is not None:
            self._expand_group(group, bbox)

        erase = old_bbox.expanded(ERASE_PADDING)
        return Placement(
            id=element_id,
            commands=[
                EraseAreaPrimitive(x=erase.x, y=erase.y, width=erase.width, height=erase.height),
                self._text_command(text, element.role, bbox, max_width),
            ],
            bbox=bbox,
        )

    # =========================================================================
    # SHAPES
    # =========================================================================

    def draw_shape(
        self,
        shape: ShapeKind | str,
        position: SemanticPosition | str = SemanticPosition.AUTO,
        label: Optional[str] = None,
        relative_to_id: Optional[str] = None,
    ) -> Placement:
        """
        Draw a fixed-size shape centered in its zone column.

        With a reference, the shape goes directly below it and the cursor only
        moves if the shape reaches past it.
        """
        shape = ShapeKind(shape)
        zone = self._zone_for(SemanticRole.CONTAINER, SemanticPosition(position))
        cursor = self.state.cursors[zone]
        x = cursor.x + (cursor.width - SHAPE_WIDTH) / 2

        anchor = self.get_bbox(relative_to_id) if relative_to_id else None
        if anchor is not None:
            bbox = BoundingBox(
                x=x, y=anchor.bottom + RELATIVE_GAP, width=SHAPE_WIDTH, height=SHAPE_HEIGHT
            )
            self._advance_past(zone, bbox.bottom + SHAPE_MARGIN)
        else:
            bbox = BoundingBox(x=x, y=cursor.y, width=SHAPE_WIDTH, height=SHAPE_HEIGHT)
            cursor.y += SHAPE_HEIGHT + SHAPE_MARGIN

        element = self._register(
            self.state.next_id("shape"),
            SemanticRole.CONTAINER,
            zone,
            bbox,
            text=label,
            ref_id=relative_to_id,
        )
        placement = Placement(id=element.id, commands=self._shape_commands(shape, bbox, label), bbox=bbox)
        self._check_overflow(placement)
        return placement

    def place_shape_at(
        self,
        shape: ShapeKind | str,
        x: float,
        y: float,
        label: Optional[str] = None,
        element_id: Optional[str] = None,
    ) -> Placement:
        """Draw a shape with its top-left corner at an absolute point."""
        shape = ShapeKind(shape)
        bbox = BoundingBox(x=x, y=y, width=SHAPE_WIDTH, height=SHAPE_HEIGHT)
        element = self._register(
            element_id or self.state.next_id("shape"),
            SemanticRole.CONTAINER,
            Zone.FLOATING,
            bbox,
            text=label,
        )
        placement = Placement(id=element.id, commands=self._shape_commands(shape, bbox, label), bbox=bbox)
        self._check_overflow(placement)
        return placement

    def _shape_commands(
        self, shape: ShapeKind, bbox: BoundingBox, label: Optional[str]
    ) -> List[BoardCommand]:
        theme = self.theme
        color = theme.primary_color
        commands: List[BoardCommand] = []

        if shape == ShapeKind.RECTANGLE:
            commands.append(
                RectPrimitive(x=bbox.x, y=bbox.y, width=bbox.width, height=bbox.height, color=color)
            )
        elif shape == ShapeKind.CIRCLE:
            commands.append(
                CirclePrimitive(
                    x=bbox.center_x,
                    y=bbox.center_y,
                    radius=min(bbox.width, bbox.height) / 2,
                    color=color,
                )
            )
        elif shape == ShapeKind.ARROW:
            commands.append(
                ArrowPrimitive(x1=bbox.x, y1=bbox.center_y, x2=bbox.right, y2=bbox.center_y, color=color)
            )
        else:
            commands.append(
                LinePrimitive(x1=bbox.x, y1=bbox.center_y, x2=bbox.right, y2=bbox.center_y, color=color)
            )

        if label:
            typo = get_typography(SemanticRole.LABEL)
            commands.append(
                TextPrimitive(
                    text=label,
                    x=bbox.center_x,
                    y=bbox.center_y - typo.size * LINE_HEIGHT_RATIO / 2,
                    size=typo.size,
                    color=theme.color(typo.color_slot),
                    align="center",
                    weight=typo.weight,
                    font_family=theme.font_family,
                    max_width=max(bbox.width - 2 * GROUP_PADDING, typo.size),
                )
            )
        return commands

    # =========================================================================
    # GROUPS & CONNECTORS
    # =========================================================================

    def create_group(
        self, title: str, position: SemanticPosition | str = SemanticPosition.AUTO
    ) -> Placement:
        """
        Open a titled group spanning the zone width.

        The header box is fixed height; it grows as children are added.
        Border colors rotate through ``GROUP_COLORS``.
        """
        zone = self._zone_for(SemanticRole.CONTAINER, SemanticPosition(position))
        cursor = self.state.cursors[zone]
        bbox = BoundingBox(x=cursor.x, y=cursor.y, width=cursor.width, height=GROUP_HEADER_HEIGHT)
        cursor.y += GROUP_HEADER_HEIGHT + GROUP_MARGIN

        color = GROUP_COLORS[self.state.group_color_index % len(GROUP_COLORS)]
        self.state.group_color_index += 1

        group = Group(id=self.state.next_id("group"), title=title, zone=zone, bbox=bbox, color=color)
        self.state.groups[group.id] = group

        theme = self.theme
        typo = get_typography(SemanticRole.GROUP_TITLE)
        commands: List[BoardCommand] = [
            RectPrimitive(x=bbox.x, y=bbox.y, width=bbox.width, height=bbox.height, color=color),
            TextPrimitive(
                text=title,
                x=bbox.x + GROUP_PADDING,
                y=bbox.y + GROUP_PADDING,
                size=typo.size,
                color=theme.color(typo.color_slot),
                weight=typo.weight,
                font_family=theme.font_family,
                max_width=max(bbox.width - 2 * GROUP_PADDING, typo.size),
            ),
        ]
        placement = Placement(id=group.id, commands=commands, bbox=bbox)
        self._check_overflow(placement)
        return placement

    def connect_elements(
        self, source_id: str, target_id: str, label: Optional[str] = None
    ) -> Optional[Placement]:
        """
        Draw an arrow from the right-middle of one element to the left-middle
        of another.

        Returns:
            Placement for the connector, or None if either id is unknown
        """
        source = self.get_bbox(source_id)
        target = self.get_bbox(target_id)
        if source is None or target is None:
            logger.debug(f"Cannot connect {source_id} -> {target_id}: unresolved endpoint")
            return None

        theme = self.theme
        x1, y1 = source.right, source.center_y
        x2, y2 = target.x, target.center_y
        commands: List[BoardCommand] = [
            ArrowPrimitive(x1=x1, y1=y1, x2=x2, y2=y2, color=theme.secondary_color)
        ]
        if label:
            typo = get_typography(SemanticRole.LABEL)
            commands.append(
                TextPrimitive(
                    text=label,
                    x=(x1 + x2) / 2,
                    y=(y1 + y2) / 2 - CONNECTOR_LABEL_OFFSET - typo.size,
                    size=typo.size,
                    color=theme.color(typo.color_slot),
                    align="center",
                    weight=typo.weight,
                    font_family=theme.font_family,
                )
            )

        bbox = BoundingBox(x=min(x1, x2), y=min(y1, y2), width=abs(x2 - x1), height=abs(y2 - y1))
        element = self._register(
            self.state.next_id("arrow"),
            SemanticRole.CONNECTOR,
            Zone.FLOATING,
            bbox,
            text=label,
            ref_id=source_id,
        )
        return Placement(id=element.id, commands=commands, bbox=bbox)

    # =========================================================================
    # DIAGRAMS
    # =========================================================================

    def draw_tree(
        self, root: TreeNode, position: SemanticPosition | str = SemanticPosition.AUTO
    ) -> Placement:
        """
        Draw a top-down tree in the zone.

        Every node is recorded as a ``tree-node`` element (``member_ids``, in
        pre-order) and ``links`` holds each parent/child id pair. The cursor
        advances by a fixed reserved height; a warning is attached when the
        drawn tree is taller than that.
        """
        zone = self._zone_for(SemanticRole.CONTAINER, SemanticPosition(position))
        cursor = self.state.cursors[zone]
        bounds = ContentBounds(
            left=cursor.x, top=cursor.y, width=cursor.width, height=TREE_RESERVED_HEIGHT
        )
        result = self._trees.compute(root, bounds, self.theme)

        tree = self._register(
            self.state.next_id("tree"),
            SemanticRole.CONTAINER,
            zone,
            result.used_bounds.to_bbox(),
            text=root.label,
        )
        placement = Placement(
            id=tree.id, commands=result.commands, bbox=tree.bbox, warnings=list(result.warnings)
        )

        for node in result.nodes:
            node_id = self.state.next_id("node")
            self.state.elements[node_id] = Element(
                id=node_id,
                role=SemanticRole.TREE_NODE,
                zone=zone,
                bbox=node.bbox,
                text=node.label,
                ref_id=tree.id,
            )
            placement.member_ids.append(node_id)
            if node.parent_index is not None:
                placement.links.append((placement.member_ids[node.parent_index], node_id))

        cursor.y += TREE_RESERVED_HEIGHT
        if result.used_bounds.height > TREE_RESERVED_HEIGHT:
            placement.warnings.append(
                f"Tree height {result.used_bounds.height:.0f}px exceeds the "
                f"{TREE_RESERVED_HEIGHT}px reserved for it"
            )
            logger.warning(f"Tree {tree.id} taller than its reserved height")
        self._check_overflow(placement)
        return placement

    def draw_timeline(
        self,
        events: List[TimelineEvent],
        position: SemanticPosition | str = SemanticPosition.AUTO,
    ) -> Placement:
        """Draw a horizontal timeline across the zone."""
        zone = self._zone_for(SemanticRole.CONTAINER, SemanticPosition(position))
        cursor = self.state.cursors[zone]
        bounds = ContentBounds(left=cursor.x, top=cursor.y, width=cursor.width, height=TIMELINE_HEIGHT)
        result = self._timelines.compute(events, bounds, self.theme)
        cursor.y += TIMELINE_HEIGHT + SHAPE_MARGIN

        label = ", ".join(e.label for e in events) or None
        element = self._register(
            self.state.next_id("timeline"), SemanticRole.CONTAINER, zone, bounds.to_bbox(), text=label
        )
        placement = Placement(
            id=element.id, commands=result.commands, bbox=element.bbox, warnings=list(result.warnings)
        )
        self._check_overflow(placement)
        return placement

    def draw_graph(
        self,
        title: Optional[str],
        equations: List[str],
        position: SemanticPosition | str = SemanticPosition.AUTO,
        relative_to_id: Optional[str] = None,
    ) -> Placement:
        """
        Plot one or more equations in a fixed-size panel.

        Placement follows ``draw_shape``: centered in the column, below the
        reference when one is given.
        """
        zone = self._zone_for(SemanticRole.CONTAINER, SemanticPosition(position))
        cursor = self.state.cursors[zone]
        x = cursor.x + (cursor.width - GRAPH_WIDTH) / 2

        anchor = self.get_bbox(relative_to_id) if relative_to_id else None
        if anchor is not None:
            top = anchor.bottom + RELATIVE_GAP
            self._advance_past(zone, top + GRAPH_HEIGHT + SHAPE_MARGIN)
        else:
            top = cursor.y
            cursor.y += GRAPH_HEIGHT + SHAPE_MARGIN

        bounds = ContentBounds(left=x, top=top, width=GRAPH_WIDTH, height=GRAPH_HEIGHT)
        result = self._graphs.compute(
            GraphSpec(title=title, equations=equations), bounds, self.theme
        )
        element = self._register(
            self.state.next_id("graph"),
            SemanticRole.CONTAINER,
            zone,
            bounds.to_bbox(),
            text=title,
            ref_id=relative_to_id,
        )
        placement = Placement(
            id=element.id, commands=result.commands, bbox=element.bbox, warnings=list(result.warnings)
        )
        self._check_overflow(placement)
        return placement

    # =========================================================================
    # GEOMETRY QUERIES
    # =========================================================================

    def measure_text(
        self, text: str, role: SemanticRole | str, max_width: Optional[float] = None
    ) -> Tuple[float, float]:
        """Estimated (width, height) of ``text`` in a role's typography."""
        typo = get_typography(role)
        if max_width is None:
            max_width = self.state.cursors[Zone.MAIN].width
        return self._measure(text, typo.size, max(max_width, typo.size))

    def shape_size(self) -> Tuple[float, float]:
        return SHAPE_WIDTH, SHAPE_HEIGHT

    def zone_area(self, zone: Zone | str) -> BoundingBox:
        """Full rectangle a zone covers in the current mode."""
        zone = Zone(zone)
        state = self.state
        if zone == Zone.FLOATING:
            return BoundingBox(x=0, y=0, width=state.width, height=state.height)

        geometry = compute_zone_cursors(state.mode, state.width, state.height)[zone]
        footer_top = state.height - FOOTER_HEIGHT
        if zone == Zone.HEADER:
            top, bottom = HEADER_TOP, MAIN_TOP
        elif zone == Zone.FOOTER:
            top, bottom = footer_top, state.height
        else:
            top, bottom = MAIN_TOP, footer_top
        return BoundingBox(
            x=geometry.x, y=top, width=geometry.width, height=max(bottom - top, 0)
        )

    def members_of(self, element_id: str) -> List[str]:
        """Ids of tree nodes owned by a tree element."""
        return [
            e.id for e in self.state.elements.values()
            if e.ref_id == element_id and e.role == SemanticRole.TREE_NODE
        ]

    # =========================================================================
    # REMOVAL & DESCRIPTION
    # =========================================================================

    def remove_element(self, element_id: str) -> bool:
        """
        Forget an element or group. Children of a removed group stay on the
        board as ungrouped elements.

        Returns:
            True if something was removed
        """
        if self.state.elements.pop(element_id, None) is not None:
            if self.state.last_element_id == element_id:
                self.state.last_element_id = None
            return True

        if self.state.groups.pop(element_id, None) is not None:
            for element in self.state.elements.values():
                if element.group_id == element_id:
                    element.group_id = None
            return True
        return False

    def elements_within(self, area: BoundingBox) -> List[str]:
        """Ids of elements and groups whose center lies inside ``area``."""
        ids = [
            e.id for e in self.state.elements.values()
            if area.contains_point(e.bbox.center_x, e.bbox.center_y)
        ]
        ids.extend(
            g.id for g in self.state.groups.values()
            if area.contains_point(g.bbox.center_x, g.bbox.center_y)
        )
        return ids

    def remove_within(self, area: BoundingBox) -> List[str]:
        """Forget everything centered inside ``area``; returns the removed ids."""
        removed = self.elements_within(area)
        for element_id in removed:
            self.remove_element(element_id)
        return removed

    def describe(self) -> str:
        """Plain-text summary of the board for the agent."""
        state = self.state
        lines = [
            f"Board {state.width:.0f}x{state.height:.0f}, "
            f"mode {state.mode.value}, subject {state.subject.value}"
        ]
        for zone in (Zone.HEADER, Zone.MAIN, Zone.SIDEBAR, Zone.FOOTER):
            lines.append(f"{zone.value} cursor at y={state.cursors[zone].y:.0f}")
        for group in state.groups.values():
            children = [e.id for e in state.elements.values() if e.group_id == group.id]
            lines.append(f"group {group.id} '{group.title}' with {len(children)} item(s)")
        for element in state.elements.values():
            if element.role == SemanticRole.TREE_NODE:
                continue
            text = f" '{element.text}'" if element.text else ""
            lines.append(f"{element.role.value} {element.id}{text} in {element.zone.value}")
        return "\n".join(lines)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _zone_for(self, role: SemanticRole, position: SemanticPosition) -> Zone:
        if role == SemanticRole.TITLE:
            return Zone.HEADER
        if role in FLOATING_ROLES:
            return Zone.FLOATING
        if position in (SemanticPosition.ASIDE, SemanticPosition.NEW_COLUMN):
            if self.state.mode == LayoutMode.STANDARD:
                logger.info("Switching to split-view for sidebar content")
                self.set_layout_mode(LayoutMode.SPLIT_VIEW)
            return Zone.SIDEBAR
        if position == SemanticPosition.FOOTER:
            return Zone.FOOTER
        return Zone.MAIN

    def _indent_for(self, role: SemanticRole, position: SemanticPosition) -> float:
        indent = 0.0
        if role == SemanticRole.BULLET:
            indent += BULLET_INDENT
        elif role == SemanticRole.SUBHEADING:
            indent += SUBHEADING_INDENT
        if position == SemanticPosition.INDENT:
            indent += EXPLICIT_INDENT
        return indent

    def _measure(self, text: str, size: float, max_width: float) -> Tuple[float, float]:
        """Heuristic (width, height) of wrapped text."""
        width = min(len(text) * CHAR_WIDTH_RATIO * size, max_width)
        lines = estimate_line_count(text, size, max_width)
        return width, lines * LINE_HEIGHT_RATIO * size

    def _text_command(
        self, text: str, role: SemanticRole, bbox: BoundingBox, max_width: float
    ) -> BoardCommand:
        theme = self.theme
        typo = get_typography(role)
        color = theme.color(typo.color_slot)
        if role == SemanticRole.EQUATION:
            return FormulaPrimitive(expression=text, x=bbox.x, y=bbox.y, size=typo.size, color=color)
        return TextPrimitive(
            text=text,
            x=bbox.center_x if typo.align == "center" else bbox.x,
            y=bbox.y,
            size=typo.size,
            color=color,
            align=typo.align,
            weight=typo.weight,
            font_family=theme.font_family,
            max_width=max_width,
        )

    def _relative_top(self, ref_id: str) -> Optional[float]:
        """Top edge for an element placed relative to ``ref_id``.

        Stacks under the previous sibling when the last placed element shares
        the same reference.
        """
        last_id = self.state.last_element_id
        last = self.state.elements.get(last_id) if last_id else None
        if last is not None and last.ref_id == ref_id and last.role not in FLOATING_ROLES:
            return last.bbox.bottom + SIBLING_GAP
        anchor = self.get_bbox(ref_id)
        if anchor is None:
            logger.debug(f"Reference {ref_id} not found, using zone cursor")
            return None
        return anchor.bottom + RELATIVE_GAP

    def _advance_past(self, zone: Zone, y: float) -> None:
        cursor = self.state.cursors[zone]
        cursor.y = max(cursor.y, y)

    def _place_in_group(
        self, group: Group, width: float, height: float, indent: float
    ) -> BoundingBox:
        children = [e for e in self.state.elements.values() if e.group_id == group.id]
        if children:
            y = children[-1].bbox.bottom + GROUP_CHILD_GAP
        else:
            y = group.bbox.y + GROUP_CONTENT_OFFSET
        bbox = BoundingBox(x=group.bbox.x + GROUP_PADDING + indent, y=y, width=width, height=height)
        self._expand_group(group, bbox)
        return bbox

    def _expand_group(self, group: Group, child: BoundingBox) -> None:
        """Grow a group to enclose ``child``; groups never shrink."""
        box = group.bbox
        right = max(box.right, child.right + GROUP_PADDING)
        bottom = max(box.bottom, child.bottom + GROUP_PADDING)
        group.bbox = BoundingBox(x=box.x, y=box.y, width=right - box.x, height=bottom - box.y)

    def _register(
        self,
        element_id: str,
        role: SemanticRole,
        zone: Zone,
        bbox: BoundingBox,
        text: Optional[str] = None,
        group_id: Optional[str] = None,
        ref_id: Optional[str] = None,
    ) -> Element:
        element = Element(
            id=element_id, role=role, zone=zone, bbox=bbox,
            text=text, group_id=group_id, ref_id=ref_id,
        )
        self.state.elements[element_id] = element
        self.state.last_element_id = element_id
        return element

    def _check_overflow(self, placement: Placement) -> None:
        if placement.bbox is not None and placement.bbox.bottom > self.state.height:
            message = (
                f"{placement.id} extends to y={placement.bbox.bottom:.0f}, "
                f"past the canvas bottom ({self.state.height:.0f})"
            )
            logger.warning(message)
            placement.warnings.append(message)

    def _recompute_cursors(self) -> None:
        state = self.state
        fresh = compute_zone_cursors(state.mode, state.width, state.height)
        for zone, cursor in fresh.items():
            previous = state.cursors.get(zone)
            if previous is not None:
                cursor.y = max(cursor.y, previous.y)
        state.cursors = fresh
