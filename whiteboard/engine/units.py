"""
units.py — Canvas dimensions and layout constants.

This is the foundation module. ALL positioning math uses these constants.
Never hardcode pixel values anywhere else in the engine.

All values are canvas pixels (origin top-left, y grows downward).
"""

import math

# =============================================================================
# CANVAS DIMENSIONS (16:9 HD)
# =============================================================================

DEFAULT_CANVAS_WIDTH = 1920
DEFAULT_CANVAS_HEIGHT = 1080

# =============================================================================
# ZONES
# =============================================================================

BOARD_PADDING = 50          # Left/right padding shared by every zone
HEADER_TOP = 40             # Header zone starts here
MAIN_TOP = 160              # Main, sidebar and floating zones start here
FOOTER_HEIGHT = 100         # Footer zone is the bottom band of this height
ZONE_GAP = 40               # Horizontal gap between main and sidebar columns

SPLIT_MAIN_RATIO = 0.6      # Split-view: main column share of available width
SPLIT_SIDEBAR_RATIO = 0.4   # Split-view: sidebar column share (gap comes out of it)

# =============================================================================
# TEXT ESTIMATION
# =============================================================================

CHAR_WIDTH_RATIO = 0.55     # Average glyph width as a fraction of font size
LINE_HEIGHT_RATIO = 1.4     # Line height as a multiple of font size

BULLET_INDENT = 40
SUBHEADING_INDENT = 20
EXPLICIT_INDENT = 60

FLOATING_ANCHOR_GAP = 10    # Gap between a floating note and its anchor
RELATIVE_GAP = 20           # Gap below a referenced element
SIBLING_GAP = 15            # Gap between siblings stacked under one reference

# =============================================================================
# SHAPES, GROUPS, CONNECTORS
# =============================================================================

SHAPE_WIDTH = 300
SHAPE_HEIGHT = 200
SHAPE_MARGIN = 40

GROUP_HEADER_HEIGHT = 100
GROUP_MARGIN = 20           # Cursor gap after a group header
GROUP_PADDING = 20          # Inner padding between group border and children
GROUP_CONTENT_OFFSET = 60   # First child starts this far below the group top
GROUP_CHILD_GAP = 15

CONNECTOR_LABEL_OFFSET = 10

HIGHLIGHT_PADDING = 10
ERASE_PADDING = 5

# =============================================================================
# TREES
# =============================================================================

TREE_NODE_WIDTH = 160
TREE_NODE_HEIGHT = 60
TREE_SIBLING_GAP = 40
TREE_LEVEL_GAP = 100
TREE_RESERVED_HEIGHT = 400  # Cursor advance after a tree, independent of depth

# =============================================================================
# TIMELINES
# =============================================================================

TIMELINE_HEIGHT = 200
TIMELINE_INSET = 40
TIMELINE_TICK = 10
TIMELINE_DOT_RADIUS = 6
TIMELINE_LABEL_ABOVE = -70
TIMELINE_LABEL_BELOW = 24
TIMELINE_LABEL_LINE = 26

# =============================================================================
# GRAPHS
# =============================================================================

GRAPH_WIDTH = 600
GRAPH_HEIGHT = 400
GRAPH_INSET = 40
GRAPH_GRID_SPACING = 40
GRAPH_X_RANGE = (-10.0, 10.0)
GRAPH_Y_RANGE = (-10.0, 10.0)
GRAPH_SAMPLE_STEP = 0.2
GRAPH_PALETTE = ("#22d3ee", "#f472b6", "#facc15")

# =============================================================================
# SPATIAL GRID
# =============================================================================

GRID_CELL_SIZE = 50
DEFAULT_ELEMENT_WIDTH = 300
DEFAULT_ELEMENT_HEIGHT = 200
BELOW_PREVIOUS_GAP = 20
LABEL_OFFSET = 30

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def estimate_line_count(text: str, font_size: float, max_width: float) -> int:
    """Estimate wrapped line count for ``text`` at ``font_size`` within ``max_width``."""
    if max_width <= 0:
        return 1
    return max(1, math.ceil(len(text) * CHAR_WIDTH_RATIO * font_size / max_width))
