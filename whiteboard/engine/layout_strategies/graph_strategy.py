"""
graph_strategy.py — Function plot layout.

Draws a plot panel with the theme's background grid, x/y axes through the
origin, one sampled stroke per equation and a small legend. Equations are
evaluated by the sandboxed parser in ``engine.expression``; an equation that
fails to parse is skipped with a warning rather than failing the whole plot.
"""

import logging
from typing import List, Tuple

from whiteboard.dsl.schema import (
    BoardCommand,
    CirclePrimitive,
    LinePrimitive,
    Point,
    PolygonPrimitive,
    StrokePrimitive,
    TextPrimitive,
)
from whiteboard.engine.data_models import GraphSpec
from whiteboard.engine.expression import parse_expression
from whiteboard.engine.layout_strategies.base_strategy import (
    BaseDiagramStrategy,
    ContentBounds,
    StrategyResult,
)
from whiteboard.engine.themes import GridType, Theme
from whiteboard.engine.units import (
    GRAPH_GRID_SPACING,
    GRAPH_INSET,
    GRAPH_PALETTE,
    GRAPH_SAMPLE_STEP,
    GRAPH_X_RANGE,
    GRAPH_Y_RANGE,
)
from whiteboard.errors import ExpressionError

logger = logging.getLogger(__name__)

TITLE_SIZE = 22
LEGEND_SIZE = 16
LEGEND_LINE = 20
DOT_RADIUS = 1.5
CROSS_ARM = 4


class GraphStrategy(BaseDiagramStrategy):
    """Plot panel with sampled curves."""

    def compute(self, data: GraphSpec, bounds: ContentBounds, theme: Theme) -> StrategyResult:
        """Compute primitives for plotting ``data.equations`` inside ``bounds``."""
        result = StrategyResult(used_bounds=bounds)
        left = bounds.left + GRAPH_INSET
        right = bounds.right - GRAPH_INSET
        top = bounds.top + GRAPH_INSET
        bottom = bounds.bottom - GRAPH_INSET

        result.commands.append(
            PolygonPrimitive(
                points=[
                    Point(x=bounds.left, y=bounds.top),
                    Point(x=bounds.right, y=bounds.top),
                    Point(x=bounds.right, y=bounds.bottom),
                    Point(x=bounds.left, y=bounds.bottom),
                ],
                color=theme.grid_color,
                fill=theme.background,
            )
        )
        result.commands.extend(self._grid(theme, left, top, right, bottom))

        x_min, x_max = GRAPH_X_RANGE
        y_min, y_max = GRAPH_Y_RANGE

        def to_x(value: float) -> float:
            return left + (value - x_min) / (x_max - x_min) * (right - left)

        def to_y(value: float) -> float:
            return bottom - (value - y_min) / (y_max - y_min) * (bottom - top)

        # Axes through the origin
        result.commands.append(
            LinePrimitive(x1=left, y1=to_y(0), x2=right, y2=to_y(0), color=theme.secondary_color)
        )
        result.commands.append(
            LinePrimitive(x1=to_x(0), y1=top, x2=to_x(0), y2=bottom, color=theme.secondary_color)
        )

        if data.title:
            result.commands.append(
                TextPrimitive(
                    text=data.title,
                    x=bounds.center_x,
                    y=bounds.top + 8,
                    size=TITLE_SIZE,
                    color=theme.primary_color,
                    align="center",
                    weight="bold",
                    font_family=theme.font_family,
                )
            )

        samples = int(round((x_max - x_min) / GRAPH_SAMPLE_STEP)) + 1
        plotted = 0
        for index, equation in enumerate(data.equations):
            color = GRAPH_PALETTE[index % len(GRAPH_PALETTE)]
            try:
                expression = parse_expression(equation)
            except ExpressionError as e:
                logger.warning(f"Skipping equation: {e}")
                result.warnings.append(str(e))
                continue

            points: List[Point] = []
            for i in range(samples):
                x = x_min + i * GRAPH_SAMPLE_STEP
                y = expression.evaluate(x)
                if y is None:
                    continue
                py = to_y(y)
                if py < top or py > bottom:
                    continue
                points.append(Point(x=to_x(x), y=py))

            if len(points) < 2:
                result.warnings.append(f"Equation {equation!r} has no visible points")
            else:
                result.commands.append(StrokePrimitive(points=points, color=color))

            result.commands.append(
                TextPrimitive(
                    text=equation,
                    x=right,
                    y=top + plotted * LEGEND_LINE,
                    size=LEGEND_SIZE,
                    color=color,
                    align="right",
                    font_family=theme.font_family,
                )
            )
            plotted += 1

        return result

    def _grid(
        self, theme: Theme, left: float, top: float, right: float, bottom: float
    ) -> List[BoardCommand]:
        """Background grid in the theme's style."""
        if theme.grid_type == GridType.NONE:
            return []

        xs = _steps(left, right)
        ys = _steps(top, bottom)
        color = theme.grid_color
        commands: List[BoardCommand] = []

        if theme.grid_type == GridType.LINES:
            for x in xs:
                commands.append(LinePrimitive(x1=x, y1=top, x2=x, y2=bottom, color=color, width=1))
            for y in ys:
                commands.append(LinePrimitive(x1=left, y1=y, x2=right, y2=y, color=color, width=1))
        elif theme.grid_type == GridType.DOTS:
            for x, y in _pairs(xs, ys):
                commands.append(CirclePrimitive(x=x, y=y, radius=DOT_RADIUS, color=color, fill=color))
        else:
            for x, y in _pairs(xs, ys):
                commands.append(
                    LinePrimitive(x1=x - CROSS_ARM, y1=y, x2=x + CROSS_ARM, y2=y, color=color, width=1)
                )
                commands.append(
                    LinePrimitive(x1=x, y1=y - CROSS_ARM, x2=x, y2=y + CROSS_ARM, color=color, width=1)
                )
        return commands


def _steps(start: float, end: float) -> List[float]:
    count = int((end - start) // GRAPH_GRID_SPACING)
    return [start + k * GRAPH_GRID_SPACING for k in range(count + 1)]


def _pairs(xs: List[float], ys: List[float]) -> List[Tuple[float, float]]:
    return [(x, y) for y in ys for x in xs]
