"""
base_strategy.py — Abstract base class for diagram strategies.

A strategy turns structured diagram input (a tree, a list of events, a set of
equations) into board primitives inside a given content area. Strategies are
pure: they never touch cursors, ids or the registry. The layout engine hands
them bounds, then registers whatever they report back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional

from whiteboard.dsl.schema import BoardCommand, BoundingBox
from whiteboard.engine.themes import Theme


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class ContentBounds:
    """
    Area a strategy draws into.

    ``height`` is the space the caller reserved; strategies may draw past it
    and report the real extent through ``StrategyResult.used_bounds``.
    """
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2

    def to_bbox(self) -> BoundingBox:
        return BoundingBox(x=self.left, y=self.top, width=self.width, height=self.height)


@dataclass
class NodePosition:
    """Computed box for one addressable node (e.g. a tree node)."""
    label: str
    bbox: BoundingBox
    parent_index: Optional[int] = None      # Index into StrategyResult.nodes


@dataclass
class StrategyResult:
    """Primitives plus geometry reported back to the layout engine."""
    commands: List[BoardCommand] = field(default_factory=list)
    nodes: List[NodePosition] = field(default_factory=list)

    # Actual extent drawn (may exceed the reserved bounds)
    used_bounds: Optional[ContentBounds] = None

    warnings: List[str] = field(default_factory=list)


# =============================================================================
# BASE STRATEGY
# =============================================================================

class BaseDiagramStrategy(ABC):
    """Abstract base class for diagram generators."""

    @abstractmethod
    def compute(self, data: Any, bounds: ContentBounds, theme: Theme) -> StrategyResult:
        """
        Compute primitives for a diagram.

        Args:
            data: Strategy-specific structured input
            bounds: Content area to draw into
            theme: Active theme for colors and fonts

        Returns:
            StrategyResult with primitives and node geometry
        """
        pass
