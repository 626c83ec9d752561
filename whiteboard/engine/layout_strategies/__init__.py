"""
Diagram strategies used by the layout engine.

Each strategy implements ``compute(data, bounds, theme)`` and returns a
``StrategyResult``; the layout engine owns ids, cursors and registration.
"""

from whiteboard.engine.layout_strategies.base_strategy import (
    BaseDiagramStrategy,
    ContentBounds,
    NodePosition,
    StrategyResult,
)
from whiteboard.engine.layout_strategies.graph_strategy import GraphStrategy
from whiteboard.engine.layout_strategies.timeline_strategy import TimelineStrategy
from whiteboard.engine.layout_strategies.tree_strategy import TreeStrategy

__all__ = [
    "BaseDiagramStrategy",
    "ContentBounds",
    "NodePosition",
    "StrategyResult",
    "GraphStrategy",
    "TimelineStrategy",
    "TreeStrategy",
]
