"""Tests for diagram layout strategies."""

import pytest

from whiteboard.dsl.schema import (
    CirclePrimitive,
    LinePrimitive,
    StrokePrimitive,
    TextPrimitive,
)
from whiteboard.engine.data_models import GraphSpec, TimelineEvent, TreeNode
from whiteboard.engine.layout_strategies import (
    ContentBounds,
    GraphStrategy,
    TimelineStrategy,
    TreeStrategy,
)
from whiteboard.engine.themes import Subject, get_theme


@pytest.fixture
def bounds() -> ContentBounds:
    return ContentBounds(left=50, top=160, width=1820, height=400)


class TestTreeStrategy:
    """Tests for the top-down tree layout."""

    def test_tree_is_centered(self, bounds: ContentBounds, tree_data: dict):
        result = TreeStrategy().compute(TreeNode.model_validate(tree_data), bounds, get_theme("general"))
        assert result.used_bounds.center_x == pytest.approx(bounds.center_x)
        assert result.nodes[0].bbox.center_x == pytest.approx(bounds.center_x)

    def test_parent_indices_are_preorder(self, bounds: ContentBounds):
        root = TreeNode.model_validate(
            {"label": "A", "children": [{"label": "B", "children": [{"label": "C"}]}, {"label": "D"}]}
        )
        result = TreeStrategy().compute(root, bounds, get_theme("general"))
        assert [n.label for n in result.nodes] == ["A", "B", "C", "D"]
        assert [n.parent_index for n in result.nodes] == [None, 0, 1, 0]

    def test_lines_join_parent_and_child(self, bounds: ContentBounds, tree_data: dict):
        result = TreeStrategy().compute(TreeNode.model_validate(tree_data), bounds, get_theme("general"))
        root, left_child = result.nodes[0].bbox, result.nodes[1].bbox
        line = next(c for c in result.commands if isinstance(c, LinePrimitive))
        assert (line.x1, line.y1) == (root.center_x, root.bottom)
        assert (line.x2, line.y2) == (left_child.center_x, left_child.y)

    def test_used_height_grows_with_depth(self, bounds: ContentBounds):
        shallow = TreeStrategy().compute(TreeNode(label="leaf"), bounds, get_theme("general"))
        assert shallow.used_bounds.height == 60


class TestTimelineStrategy:
    """Tests for the horizontal timeline layout."""

    def test_events_evenly_spaced(self, bounds: ContentBounds):
        events = [TimelineEvent(year=y, label=str(y)) for y in (1900, 1950, 2000)]
        result = TimelineStrategy().compute(events, bounds, get_theme("history"))
        dots = [c for c in result.commands if isinstance(c, CirclePrimitive)]
        gaps = [b.x - a.x for a, b in zip(dots, dots[1:])]
        assert len(dots) == 3
        assert gaps[0] == pytest.approx(gaps[1])

    def test_missing_year_has_no_year_text(self, bounds: ContentBounds):
        result = TimelineStrategy().compute([TimelineEvent(label="Undated")], bounds, get_theme("history"))
        texts = [c for c in result.commands if isinstance(c, TextPrimitive)]
        assert [t.text for t in texts] == ["Undated"]

    def test_empty_timeline_warns(self, bounds: ContentBounds):
        result = TimelineStrategy().compute([], bounds, get_theme("history"))
        assert result.warnings == ["Timeline has no events"]
        assert len(result.commands) == 1


class TestGraphStrategy:
    """Tests for function plots."""

    def test_plots_each_equation(self, bounds: ContentBounds):
        spec = GraphSpec(title="Trig", equations=["sin(x)", "cos(x)"])
        result = GraphStrategy().compute(spec, bounds, get_theme(Subject.MATH))
        strokes = [c for c in result.commands if isinstance(c, StrokePrimitive)]
        assert len(strokes) == 2
        assert strokes[0].color != strokes[1].color
        assert result.warnings == []

    def test_points_stay_inside_panel(self, bounds: ContentBounds):
        result = GraphStrategy().compute(GraphSpec(equations=["x^3"]), bounds, get_theme("math"))
        stroke = next(c for c in result.commands if isinstance(c, StrokePrimitive))
        assert all(bounds.top <= p.y <= bounds.bottom for p in stroke.points)

    def test_invisible_curve_warns(self, bounds: ContentBounds):
        result = GraphStrategy().compute(GraphSpec(equations=["x + 100"]), bounds, get_theme("math"))
        assert not any(isinstance(c, StrokePrimitive) for c in result.commands)
        assert "no visible points" in result.warnings[0]

    def test_grid_style_follows_theme(self, bounds: ContentBounds):
        spec = GraphSpec(equations=["x"])
        dotted = GraphStrategy().compute(spec, bounds, get_theme("general"))
        plain = GraphStrategy().compute(spec, bounds, get_theme("history"))
        assert any(isinstance(c, CirclePrimitive) for c in dotted.commands)
        assert not any(isinstance(c, CirclePrimitive) for c in plain.commands)
