"""
Whiteboard layout engine.

Turns semantic placement requests into pixel-positioned board primitives.
"""

from whiteboard.engine.data_models import GraphSpec, TimelineEvent, TreeNode
from whiteboard.engine.expression import Expression, evaluate, parse_expression
from whiteboard.engine.layout_engine import (
    Element,
    Group,
    LayoutEngine,
    LayoutMode,
    LayoutState,
    Placement,
    SemanticPosition,
    ShapeKind,
    Zone,
    ZoneCursor,
    compute_zone_cursors,
)
from whiteboard.engine.spatial_grid import (
    GridPlacer,
    PlacedElement,
    PositionConstraints,
    SpatialGrid,
)
from whiteboard.engine.themes import (
    ROLE_TYPOGRAPHY,
    THEMES,
    GridType,
    RoleTypography,
    SemanticRole,
    Subject,
    Theme,
    get_theme,
    get_typography,
    list_subjects,
)

__all__ = [
    # Inputs
    "GraphSpec",
    "TimelineEvent",
    "TreeNode",
    # Expressions
    "Expression",
    "evaluate",
    "parse_expression",
    # Layout
    "Element",
    "Group",
    "LayoutEngine",
    "LayoutMode",
    "LayoutState",
    "Placement",
    "SemanticPosition",
    "ShapeKind",
    "Zone",
    "ZoneCursor",
    "compute_zone_cursors",
    # Grid placement
    "GridPlacer",
    "PlacedElement",
    "PositionConstraints",
    "SpatialGrid",
    # Themes
    "ROLE_TYPOGRAPHY",
    "THEMES",
    "GridType",
    "RoleTypography",
    "SemanticRole",
    "Subject",
    "Theme",
    "get_theme",
    "get_typography",
    "list_subjects",
]
