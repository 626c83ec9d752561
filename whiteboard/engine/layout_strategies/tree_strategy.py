"""
tree_strategy.py — Top-down hierarchy layout.

Used for: concept trees, taxonomies, call graphs.
Pattern: each subtree is as wide as the sum of its children (a leaf takes one
node width plus a sibling gap); the whole tree is centered in the bounds and
every parent is centered over its own subtree.
"""

from typing import Dict, Optional

from whiteboard.dsl.schema import BoundingBox, LinePrimitive, RectPrimitive, TextPrimitive
from whiteboard.engine.data_models import TreeNode
from whiteboard.engine.layout_strategies.base_strategy import (
    BaseDiagramStrategy,
    ContentBounds,
    NodePosition,
    StrategyResult,
)
from whiteboard.engine.themes import SemanticRole, Theme, get_typography
from whiteboard.engine.units import (
    LINE_HEIGHT_RATIO,
    TREE_LEVEL_GAP,
    TREE_NODE_HEIGHT,
    TREE_NODE_WIDTH,
    TREE_SIBLING_GAP,
)


class TreeStrategy(BaseDiagramStrategy):
    """
    Tree layout strategy for hierarchical structures.

    Per node, primitives are emitted in a fixed order: the node rect, its
    label, then one connector line per child followed by that child's subtree.
    """

    def compute(self, data: TreeNode, bounds: ContentBounds, theme: Theme) -> StrategyResult:
        """Compute primitives for a tree rooted at ``data``."""
        widths: Dict[int, float] = {}
        total_width = self._subtree_width(data, widths)

        result = StrategyResult()
        left = bounds.center_x - total_width / 2
        self._layout_node(data, left, 0, bounds.top, None, widths, theme, result)

        depth = data.depth()
        height = depth * TREE_NODE_HEIGHT + (depth - 1) * TREE_LEVEL_GAP
        result.used_bounds = ContentBounds(
            left=left, top=bounds.top, width=total_width, height=height
        )
        return result

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _subtree_width(self, node: TreeNode, widths: Dict[int, float]) -> float:
        if not node.children:
            width = TREE_NODE_WIDTH + TREE_SIBLING_GAP
        else:
            width = sum(self._subtree_width(child, widths) for child in node.children)
        widths[id(node)] = width
        return width

    def _level_top(self, top: float, depth: int) -> float:
        return top + depth * (TREE_NODE_HEIGHT + TREE_LEVEL_GAP)

    def _layout_node(
        self,
        node: TreeNode,
        left: float,
        depth: int,
        top: float,
        parent_index: Optional[int],
        widths: Dict[int, float],
        theme: Theme,
        result: StrategyResult,
    ) -> None:
        center_x = left + widths[id(node)] / 2
        box = BoundingBox(
            x=center_x - TREE_NODE_WIDTH / 2,
            y=self._level_top(top, depth),
            width=TREE_NODE_WIDTH,
            height=TREE_NODE_HEIGHT,
        )
        index = len(result.nodes)
        result.nodes.append(NodePosition(label=node.label, bbox=box, parent_index=parent_index))

        typo = get_typography(SemanticRole.TREE_NODE)
        result.commands.append(
            RectPrimitive(
                x=box.x,
                y=box.y,
                width=box.width,
                height=box.height,
                color=theme.color(typo.color_slot),
                fill=theme.background,
            )
        )
        result.commands.append(
            TextPrimitive(
                text=node.label,
                x=center_x,
                y=box.center_y - typo.size * LINE_HEIGHT_RATIO / 2,
                size=typo.size,
                color=theme.secondary_color,
                align="center",
                weight=typo.weight,
                font_family=theme.font_family,
                max_width=TREE_NODE_WIDTH - 10,
            )
        )

        child_left = left
        child_top = self._level_top(top, depth + 1)
        for child in node.children:
            child_width = widths[id(child)]
            result.commands.append(
                LinePrimitive(
                    x1=center_x,
                    y1=box.bottom,
                    x2=child_left + child_width / 2,
                    y2=child_top,
                    color=theme.secondary_color,
                )
            )
            self._layout_node(child, child_left, depth + 1, top, index, widths, theme, result)
            child_left += child_width

