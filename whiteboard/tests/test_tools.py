"""Tests for agent tool declarations and the tool dispatcher."""

import asyncio

import pytest

from whiteboard.dsl.schema import ClearPrimitive
from whiteboard.engine.layout_engine import LayoutMode, Zone
from whiteboard.engine.themes import Subject
from whiteboard.errors import ToolCallError
from whiteboard.interpreter.tools import TOOL_DECLARATIONS, ToolResult
from whiteboard.session import BoardSession


def call(session: BoardSession, name: str, args=None) -> ToolResult:
    return asyncio.run(session.tools.call(name, args))


class TestDeclarations:
    """Tests for the declared tool set."""

    def test_declares_every_tool(self, session: BoardSession):
        names = [d["name"] for d in TOOL_DECLARATIONS]
        assert len(names) == 10
        assert names == session.tools.names

    def test_parameters_are_json_schema(self):
        write_text = next(d for d in TOOL_DECLARATIONS if d["name"] == "write_text")
        assert write_text["parameters"]["type"] == "object"
        assert write_text["parameters"]["required"] == ["text"]
        assert write_text["description"]


class TestDispatch:
    """Tests for argument checking."""

    def test_unknown_tool(self, session: BoardSession):
        with pytest.raises(ToolCallError, match="Unknown tool"):
            call(session, "draw_unicorn")

    def test_unexpected_argument(self, session: BoardSession):
        with pytest.raises(ToolCallError):
            call(session, "write_text", {"text": "Hi", "sparkle": True})

    def test_missing_argument(self, session: BoardSession):
        with pytest.raises(ToolCallError):
            call(session, "plot_functions", {"title": "Empty", "equations": []})

    def test_bad_subject(self, session: BoardSession):
        with pytest.raises(ToolCallError):
            call(session, "set_subject", {"subject": "music"})


class TestTools:
    """Tests for each tool's effect on the board."""

    def test_write_text(self, session: BoardSession):
        result = call(session, "write_text", {"text": "Mitosis", "role": "heading"})
        assert result.element_id.startswith("el_")
        assert session.registry.find_element_by_description("mitosis").id == result.element_id
        assert session.primitives[-1].text == "Mitosis"
        assert session.placer.placed[result.element_id].kind == "text"

    def test_write_text_into_unknown_group(self, session: BoardSession):
        with pytest.raises(ToolCallError, match="Unknown group"):
            call(session, "write_text", {"text": "Lost", "group_id": "group_99"})

    def test_group_then_child(self, session: BoardSession):
        group = call(session, "create_group", {"title": "Phases"})
        child = call(session, "write_text", {"text": "Prophase", "group_id": group.element_id})
        assert session.layout.get_element(child.element_id).group_id == group.element_id

    def test_draw_tree(self, session: BoardSession, tree_data: dict):
        result = call(session, "draw_tree", {"root": tree_data})
        assert result.element_id.startswith("tree_")
        assert len(result.member_ids) == 3
        assert len(session.registry.elements_by_type("tree-node")) == 3

    def test_draw_timeline(self, session: BoardSession):
        result = call(
            session,
            "draw_timeline",
            {"events": [{"year": 1789, "label": "Revolution"}, {"label": "Aftermath"}]},
        )
        assert session.registry.find_element(result.element_id).type == "timeline"

    def test_plot_functions_reports_warnings(self, session: BoardSession):
        result = call(session, "plot_functions", {"title": "Lines", "equations": ["x", "sqrt(x)"]})
        assert result.element_id.startswith("graph_")
        assert any("sqrt(x)" in w for w in result.warnings)

    @pytest.mark.parametrize("width, position", [(90, "auto"), (180, "aside")])
    def test_group_on_narrow_board(self, width, position):
        narrow = BoardSession(width=width, height=600)
        result = call(narrow, "create_group", {"title": "G", "position": position})
        assert narrow.layout.get_group(result.element_id).bbox.width == 0

    def test_connect_elements(self, session: BoardSession):
        a = call(session, "write_text", {"text": "Cause"})
        b = call(session, "write_text", {"text": "Effect"})
        arrow = call(session, "connect_elements", {"source_id": a.element_id, "target_id": b.element_id})
        assert arrow.element_id.startswith("arrow_")
        assert b.element_id in session.registry.connections(a.element_id)

    def test_connect_unknown_element(self, session: BoardSession):
        a = call(session, "write_text", {"text": "Cause"})
        with pytest.raises(ToolCallError):
            call(session, "connect_elements", {"source_id": a.element_id, "target_id": "el_404"})

    def test_set_subject_and_mode(self, session: BoardSession):
        call(session, "set_subject", {"subject": "history"})
        call(session, "set_layout_mode", {"mode": "split-view"})
        assert session.layout.subject == Subject.HISTORY
        assert session.layout.mode == LayoutMode.SPLIT_VIEW
        assert session.layout.get_cursor(Zone.MAIN).width == pytest.approx(1092)

    def test_create_new_board(self, session: BoardSession):
        first = call(session, "write_text", {"text": "Draft"})
        call(session, "create_new_board", {})
        assert isinstance(session.primitives[-1], ClearPrimitive)
        assert len(session.registry) == 0
        assert session.placer.placed == {}

        second = call(session, "write_text", {"text": "Fresh"})
        assert second.element_id != first.element_id
