"""
spatial_grid.py — Occupancy grid for generic placement constraints.

The zone/cursor engine handles semantic flow ("next heading", "aside").
When the agent instead asks for a generic spot ("top_right", "somewhere in
the footer", "below the previous thing"), the GridPlacer answers from a
coarse boolean occupancy grid over the canvas:

- The canvas is split into square cells (default 50px).
- Every placed element marks the cells its box touches.
- Free space is searched row-major, top-left first, within a region.

Regions are defined for a 1920x1080 board and scaled to the actual canvas.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from whiteboard.dsl.schema import BoundingBox, Point
from whiteboard.engine.units import (
    BELOW_PREVIOUS_GAP,
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    DEFAULT_ELEMENT_HEIGHT,
    DEFAULT_ELEMENT_WIDTH,
    GRID_CELL_SIZE,
    LABEL_OFFSET,
)

logger = logging.getLogger(__name__)


# Region rectangles on the reference 1920x1080 board: (x, y, width, height)
REGIONS: Dict[str, Tuple[float, float, float, float]] = {
    "main": (200, 100, 1500, 800),
    "sidebar": (1720, 100, 180, 800),
    "header": (200, 20, 1500, 60),
    "footer": (200, 920, 1500, 100),
}

KEYWORD_POSITIONS = ("center", "top_left", "top_right", "bottom_left", "bottom_right", "below_previous")

# Fallback for below_previous on an empty board
FIRST_ELEMENT_POSITION = (200, 200)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class PositionConstraints:
    """
    Generic placement request.

    ``region`` is a region name (main, sidebar, header, footer), a keyword
    position (center, top_left, ..., below_previous) or "auto" (main).
    """
    region: Optional[str] = None
    relative_to: Optional[str] = None
    align_with: Optional[str] = None
    padding: float = 0


@dataclass
class PlacedElement:
    """An element reserved on the grid."""
    id: str
    kind: str
    bbox: BoundingBox


# =============================================================================
# OCCUPANCY GRID
# =============================================================================

class SpatialGrid:
    """Boolean occupancy grid over the canvas."""

    def __init__(self, width: float, height: float, cell_size: float = GRID_CELL_SIZE):
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.width = width
        self.height = height
        self.cell_size = cell_size
        self.cols = math.ceil(width / cell_size)
        self.rows = math.ceil(height / cell_size)
        self.cells: List[List[bool]] = [[False] * self.cols for _ in range(self.rows)]

    def _cell_range(self, area: BoundingBox) -> Tuple[int, int, int, int]:
        """Half-open (col0, row0, col1, row1) covered by ``area``, clipped to the grid."""
        col0 = max(0, math.floor(area.x / self.cell_size))
        row0 = max(0, math.floor(area.y / self.cell_size))
        col1 = min(self.cols, math.ceil(area.right / self.cell_size))
        row1 = min(self.rows, math.ceil(area.bottom / self.cell_size))
        return col0, row0, col1, row1

    def mark_occupied(self, area: BoundingBox) -> None:
        """Mark every cell touched by ``area``; parts off the canvas are ignored."""
        col0, row0, col1, row1 = self._cell_range(area)
        for row in range(row0, row1):
            for col in range(col0, col1):
                self.cells[row][col] = True

    def is_occupied(self, area: BoundingBox) -> bool:
        """True if any cell touched by ``area`` is occupied."""
        col0, row0, col1, row1 = self._cell_range(area)
        return any(
            self.cells[row][col]
            for row in range(row0, row1)
            for col in range(col0, col1)
        )

    def find_available_space(
        self, width: float, height: float, bounds: Optional[BoundingBox] = None
    ) -> Optional[Point]:
        """
        First fully free block of cells that fits ``width`` x ``height``.

        Args:
            width: Required width in pixels
            height: Required height in pixels
            bounds: Optional area the block must lie within; whole canvas if None

        Returns:
            Top-left corner of the block (cell-aligned), or None if nothing fits
        """
        need_cols = max(1, math.ceil(width / self.cell_size))
        need_rows = max(1, math.ceil(height / self.cell_size))

        if bounds is None:
            col0, row0, col1, row1 = 0, 0, self.cols, self.rows
        else:
            # Only whole cells inside the bounds are candidates
            col0 = max(0, math.ceil(bounds.x / self.cell_size))
            row0 = max(0, math.ceil(bounds.y / self.cell_size))
            col1 = min(self.cols, math.floor(bounds.right / self.cell_size))
            row1 = min(self.rows, math.floor(bounds.bottom / self.cell_size))

        for row in range(row0, row1 - need_rows + 1):
            for col in range(col0, col1 - need_cols + 1):
                if self._block_free(col, row, need_cols, need_rows):
                    return Point(x=col * self.cell_size, y=row * self.cell_size)
        return None

    def reset(self) -> None:
        for row in self.cells:
            for col in range(self.cols):
                row[col] = False

    def _block_free(self, col: int, row: int, cols: int, rows: int) -> bool:
        for r in range(row, row + rows):
            line = self.cells[r]
            for c in range(col, col + cols):
                if line[c]:
                    return False
        return True


# =============================================================================
# PLACER
# =============================================================================

class GridPlacer:
    """
    Places elements against generic constraints using a SpatialGrid.

    Usage:
        placer = GridPlacer(1920, 1080)
        point = placer.place_element("shape_3", "rectangle", 300, 200,
                                     PositionConstraints(region="top_right"))
    """

    def __init__(
        self,
        width: float = DEFAULT_CANVAS_WIDTH,
        height: float = DEFAULT_CANVAS_HEIGHT,
        cell_size: float = GRID_CELL_SIZE,
    ):
        self.width = width
        self.height = height
        self.grid = SpatialGrid(width, height, cell_size)
        self.placed: Dict[str, PlacedElement] = {}

    # =========================================================================
    # REGIONS
    # =========================================================================

    def region_bounds(self, region: str) -> BoundingBox:
        """
        Bounds of a named region scaled to the canvas.

        Raises:
            ValueError: If ``region`` is not a known region name
        """
        if region not in REGIONS:
            raise ValueError(f"Unknown region '{region}'. Available: {list(REGIONS)}")
        x, y, w, h = REGIONS[region]
        sx = self.width / DEFAULT_CANVAS_WIDTH
        sy = self.height / DEFAULT_CANVAS_HEIGHT
        return BoundingBox(x=x * sx, y=y * sy, width=w * sx, height=h * sy)

    def available_space(self, region: Optional[str] = None) -> List[BoundingBox]:
        """Candidate free rectangles in a region (the region itself when any space is left)."""
        bounds = self.region_bounds(region or "main")
        if self.grid.find_available_space(self.grid.cell_size, self.grid.cell_size, bounds) is None:
            return []
        return [bounds]

    # =========================================================================
    # POSITIONING
    # =========================================================================

    def find_optimal_position(
        self,
        constraints: PositionConstraints,
        width: float = DEFAULT_ELEMENT_WIDTH,
        height: float = DEFAULT_ELEMENT_HEIGHT,
    ) -> Point:
        """
        Choose a top-left corner for an element.

        Resolution order: ``relative_to``, ``align_with``, keyword position,
        then a free-space search in the region. When no block of the region
        is free the element is centered on the region anyway.
        """
        padding = constraints.padding or 0
        region = (constraints.region or "auto").lower()

        if constraints.relative_to and constraints.relative_to in self.placed:
            ref = self.placed[constraints.relative_to].bbox
            return Point(x=ref.x, y=ref.bottom + (padding or BELOW_PREVIOUS_GAP))

        if constraints.align_with and constraints.align_with in self.placed:
            ref = self.placed[constraints.align_with].bbox
            column = BoundingBox(
                x=ref.x,
                y=0,
                width=max(width + 2 * padding, self.grid.cell_size),
                height=self.height,
            )
            found = self.grid.find_available_space(width + 2 * padding, height + 2 * padding, column)
            if found is not None:
                return Point(x=ref.x, y=found.y + padding)
            return Point(x=ref.x, y=ref.bottom + (padding or BELOW_PREVIOUS_GAP))

        if region in KEYWORD_POSITIONS:
            return self._keyword_position(region, width, height)

        if region == "auto" or region not in REGIONS:
            if region != "auto":
                logger.debug(f"Unknown region '{region}', using main")
            region = "main"
        bounds = self.region_bounds(region)

        found = self.grid.find_available_space(width + 2 * padding, height + 2 * padding, bounds)
        if found is not None:
            return Point(x=found.x + padding, y=found.y + padding)

        logger.debug(f"No free space in {region}, centering on region")
        return Point(x=bounds.center_x - width / 2, y=bounds.center_y - height / 2)

    def place_element(
        self,
        element_id: str,
        kind: str,
        width: float,
        height: float,
        constraints: PositionConstraints,
    ) -> Point:
        """Find a position, reserve it on the grid and remember the element."""
        point = self.find_optimal_position(constraints, width, height)
        self.reserve(element_id, kind, BoundingBox(x=point.x, y=point.y, width=width, height=height))
        return point

    def reserve(self, element_id: str, kind: str, bbox: BoundingBox) -> None:
        """Record space taken by an element placed elsewhere (e.g. by zone layout)."""
        self.grid.mark_occupied(bbox)
        self.placed[element_id] = PlacedElement(id=element_id, kind=kind, bbox=bbox)

    def forget(self, element_id: str) -> None:
        """
        Drop an element and free its space.

        The grid is rebuilt from the elements still placed, so cells shared
        with a neighbour stay occupied.
        """
        if self.placed.pop(element_id, None) is None:
            return
        self.grid.reset()
        for element in self.placed.values():
            self.grid.mark_occupied(element.bbox)

    def place_label(self, start: Point, end: Point) -> Point:
        """Anchor for a label just above the midpoint of a connector."""
        return Point(x=(start.x + end.x) / 2, y=(start.y + end.y) / 2 - LABEL_OFFSET)

    def check_collisions(self, x: float, y: float, width: float, height: float) -> bool:
        """True if a box at (x, y) would overlap occupied space."""
        return self.grid.is_occupied(BoundingBox(x=x, y=y, width=width, height=height))

    def reset(self) -> None:
        self.grid.reset()
        self.placed.clear()

    def _keyword_position(self, keyword: str, width: float, height: float) -> Point:
        w, h = self.width, self.height
        if keyword == "center":
            return Point(x=w / 2 - width / 2, y=h / 2 - height / 2)
        if keyword == "top_left":
            return Point(x=50, y=50)
        if keyword == "top_right":
            return Point(x=w - 150, y=50)
        if keyword == "bottom_left":
            return Point(x=50, y=h - 100)
        if keyword == "bottom_right":
            return Point(x=w - 150, y=h - 100)

        # below_previous
        if self.placed:
            last = list(self.placed.values())[-1].bbox
            return Point(x=last.x, y=last.bottom + BELOW_PREVIOUS_GAP)
        x, y = FIRST_ELEMENT_POSITION
        return Point(x=x, y=y)
