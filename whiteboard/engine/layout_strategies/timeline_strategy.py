"""
timeline_strategy.py — Horizontal timeline layout.

Used for: historical sequences, project phases.
Pattern: one axis across the content width, events evenly spaced along it.
Labels alternate above and below the axis by index parity so that
neighboring labels never share a row.
"""

from typing import List

from whiteboard.dsl.schema import CirclePrimitive, LinePrimitive, TextPrimitive
from whiteboard.engine.data_models import TimelineEvent
from whiteboard.engine.layout_strategies.base_strategy import (
    BaseDiagramStrategy,
    ContentBounds,
    StrategyResult,
)
from whiteboard.engine.themes import Theme
from whiteboard.engine.units import (
    TIMELINE_DOT_RADIUS,
    TIMELINE_INSET,
    TIMELINE_LABEL_ABOVE,
    TIMELINE_LABEL_BELOW,
    TIMELINE_LABEL_LINE,
    TIMELINE_TICK,
)

YEAR_SIZE = 22
LABEL_SIZE = 18


class TimelineStrategy(BaseDiagramStrategy):
    """Evenly spaced events on a horizontal axis."""

    def compute(
        self, data: List[TimelineEvent], bounds: ContentBounds, theme: Theme
    ) -> StrategyResult:
        """Compute primitives for a timeline of ``data`` events."""
        result = StrategyResult(used_bounds=bounds)

        axis_y = bounds.center_y
        x_start = bounds.left + TIMELINE_INSET
        x_end = max(bounds.right - TIMELINE_INSET, x_start)
        result.commands.append(
            LinePrimitive(
                x1=x_start, y1=axis_y, x2=x_end, y2=axis_y,
                color=theme.secondary_color, width=3,
            )
        )

        if not data:
            result.warnings.append("Timeline has no events")
            return result

        spacing = (x_end - x_start) / (len(data) + 1)
        for i, event in enumerate(data):
            x = x_start + spacing * (i + 1)
            result.commands.append(
                LinePrimitive(
                    x1=x, y1=axis_y - TIMELINE_TICK, x2=x, y2=axis_y + TIMELINE_TICK,
                    color=theme.secondary_color,
                )
            )
            result.commands.append(
                CirclePrimitive(
                    x=x, y=axis_y, radius=TIMELINE_DOT_RADIUS,
                    color=theme.accent_color, fill=theme.accent_color,
                )
            )

            label_y = axis_y + (TIMELINE_LABEL_ABOVE if i % 2 == 0 else TIMELINE_LABEL_BELOW)
            if event.year:
                result.commands.append(
                    TextPrimitive(
                        text=event.year,
                        x=x,
                        y=label_y,
                        size=YEAR_SIZE,
                        color=theme.primary_color,
                        align="center",
                        weight="bold",
                        font_family=theme.font_family,
                    )
                )
            result.commands.append(
                TextPrimitive(
                    text=event.label,
                    x=x,
                    y=label_y + TIMELINE_LABEL_LINE,
                    size=LABEL_SIZE,
                    color=theme.secondary_color,
                    align="center",
                    font_family=theme.font_family,
                    max_width=spacing,
                )
            )

        return result
