"""Tests for the command interpreter and default handlers."""

import asyncio
import logging

import pytest

from whiteboard.dsl.schema import (
    ClearPrimitive,
    EraseAreaPrimitive,
    HighlightPrimitive,
    RectPrimitive,
    TextPrimitive,
)
from whiteboard.engine.layout_engine import Zone
from whiteboard.errors import CommandValidationError
from whiteboard.interpreter.commands import BUILTIN_ACTIONS, ExecutionResult
from whiteboard.renderer import RecordingRenderer
from whiteboard.session import BoardSession


def run(session: BoardSession, command) -> ExecutionResult:
    return asyncio.run(session.interpreter.execute_command(command))


class YieldingRenderer(RecordingRenderer):
    """Gives up control on every primitive, like a renderer doing real I/O."""

    async def draw(self, command) -> None:
        await asyncio.sleep(0)
        await super().draw(command)


class TestParsing:
    """Tests for parse_command and validate_command."""

    def test_builtin_actions_registered(self, session: BoardSession):
        assert set(session.interpreter.supported_actions) == set(BUILTIN_ACTIONS)

    def test_generates_command_id(self, session: BoardSession):
        command = session.interpreter.parse_command({"action": "write_text", "content": "Hi"})
        assert command.id.startswith("cmd_")

    def test_aliases_are_accepted(self, session: BoardSession):
        command = session.interpreter.parse_command(
            {"action": "draw_arrow", "from": "a", "to": "b", "position": {"relativeTo": "a"}}
        )
        assert command.source == "a"
        assert command.target == "b"
        assert command.position.relative_to == "a"

    def test_non_mapping_rejected(self, session: BoardSession):
        with pytest.raises(CommandValidationError):
            session.interpreter.parse_command(["write_text"])

    def test_unknown_style_key_rejected(self, session: BoardSession):
        with pytest.raises(CommandValidationError) as exc:
            session.interpreter.parse_command(
                {"action": "write_text", "content": "x", "style": {"sparkle": True}}
            )
        assert exc.value.field == "style.sparkle"

    def test_missing_required_field(self, session: BoardSession):
        command = session.interpreter.parse_command({"action": "draw_arrow", "from": "a"})
        with pytest.raises(CommandValidationError) as exc:
            session.interpreter.validate_command(command)
        assert exc.value.field == "to"


class TestExecution:
    """Tests for execute_command outcomes."""

    def test_write_text_registers_and_renders(self, session: BoardSession):
        result = run(session, {"id": "c1", "action": "write_text", "content": "Photosynthesis"})
        assert result.success
        assert result.command_id == "c1"
        element = session.registry.find_element(result.element_id)
        assert element.content == "Photosynthesis"
        assert session.layout.get_element(result.element_id) is not None
        assert session.primitives == result.commands

    def test_missing_action_is_validation_error(self, session: BoardSession):
        result = run(session, {"content": "orphan"})
        assert not result.success
        assert result.error_type == "validation"

    def test_unsupported_action(self, session: BoardSession):
        result = run(session, {"action": "teleport"})
        assert result.error_type == "validation"
        assert "teleport" in result.error

    def test_validation_failure_does_not_mutate(self, session: BoardSession):
        run(session, {"action": "write_text", "content": "   "})
        assert len(session.registry) == 0
        assert session.primitives == []

    def test_handler_exception_becomes_failure(self, session: BoardSession):
        async def explode(command, ctx):
            raise RuntimeError("kaboom")

        session.interpreter.register_action("explode", explode)
        result = run(session, {"action": "explode"})
        assert not result.success
        assert result.error_type == "handler"
        assert result.error == "kaboom"

    def test_overwriting_handler_warns(self, session: BoardSession, caplog):
        async def noop(command, ctx):
            return ExecutionResult(command_id=command.id, success=True)

        with caplog.at_level(logging.WARNING):
            session.interpreter.register_action("write_text", noop)
        assert "Overwriting" in caplog.text
        assert run(session, {"action": "write_text", "content": "x"}).element_id is None


class TestTextStyles:
    """Tests for style options on write_text."""

    def test_size_maps_to_role(self, session: BoardSession):
        result = run(session, {"action": "write_text", "content": "Cells", "style": {"size": "title"}})
        assert session.layout.get_element(result.element_id).zone == Zone.HEADER

    def test_small_text_shrinks(self, session: BoardSession):
        result = run(session, {"action": "write_text", "content": "fine print", "style": {"size": "small"}})
        assert result.commands[0].size == pytest.approx(21)

    def test_background_drawn_beneath(self, session: BoardSession):
        result = run(
            session,
            {"action": "write_text", "content": "Key idea", "style": {"background": "#112233"}},
        )
        assert isinstance(result.commands[0], RectPrimitive)
        assert result.commands[0].fill == "#112233"
        assert isinstance(result.commands[1], TextPrimitive)

    def test_border_and_color(self, session: BoardSession):
        result = run(
            session,
            {
                "action": "write_text",
                "content": "Example",
                "style": {"color": "#ff0000", "border": {"style": "dashed"}},
            },
        )
        text, border = result.commands
        assert text.color == "#ff0000"
        assert border.dash == "dashed"

    def test_generic_region_uses_grid(self, session: BoardSession):
        result = run(
            session, {"action": "write_text", "content": "Center stage", "position": {"region": "center"}}
        )
        element = session.layout.get_element(result.element_id)
        assert element.zone == Zone.FLOATING
        assert element.bbox.center_x == pytest.approx(960)
        assert session.placer.placed[result.element_id].kind == "text"

    def test_grid_placements_reserve_space(self, session: BoardSession):
        result = run(session, {"action": "draw_shape", "content": "box", "position": {"region": "top_left"}})
        assert result.position.x == pytest.approx(50)
        assert session.placer.placed[result.element_id].kind == "rectangle"
        assert session.placer.check_collisions(60, 60, 10, 10)
        assert not session.placer.check_collisions(400, 300, 10, 10)

    def test_relative_to_by_description(self, session: BoardSession):
        anchor = run(session, {"action": "write_text", "content": "Anchor"})
        run(session, {"action": "write_text", "content": "Elsewhere"})
        detail = run(
            session,
            {"action": "write_text", "content": "Detail", "position": {"relativeTo": "anchor"}},
        )
        anchor_box = session.layout.get_bbox(anchor.element_id)
        assert detail.position.y == pytest.approx(anchor_box.bottom + 20)

    def test_write_into_group(self, session: BoardSession):
        group = asyncio.run(session.tools.call("create_group", {"title": "Organelles"}))
        result = run(
            session, {"action": "write_text", "content": "Nucleus", "data": {"group": group.element_id}}
        )
        assert session.layout.get_element(result.element_id).group_id == group.element_id

    def test_write_into_non_group_fails(self, session: BoardSession):
        text = run(session, {"action": "write_text", "content": "Plain"})
        result = run(session, {"action": "write_text", "content": "x", "data": {"group": text.element_id}})
        assert result.error_type == "resolution"


class TestReferences:
    """Tests for arrows, highlights, erase and modify."""

    def test_arrow_between_descriptions(self, session: BoardSession):
        a = run(session, {"action": "write_text", "content": "Reactants"})
        b = run(session, {"action": "write_text", "content": "Products", "position": {"region": "aside"}})
        arrow = run(session, {"action": "draw_arrow", "from": "reactants", "to": "Products", "label": "yields"})
        assert arrow.success
        assert b.element_id in session.registry.connections(a.element_id)
        assert session.registry.find_element(arrow.element_id).source == a.element_id

    def test_arrow_unknown_reference(self, session: BoardSession):
        run(session, {"action": "write_text", "content": "Reactants"})
        result = run(session, {"action": "draw_arrow", "from": "Reactants", "to": "unicorn"})
        assert result.error_type == "resolution"

    def test_highlight(self, session: BoardSession):
        text = run(session, {"action": "write_text", "content": "Important"})
        result = run(session, {"action": "highlight", "reference": "Important"})
        assert isinstance(result.commands[0], HighlightPrimitive)
        assert result.element_id == text.element_id

    def test_highlight_unknown(self, session: BoardSession):
        result = run(session, {"action": "highlight", "reference": "nothing here"})
        assert result.error_type == "resolution"

    def test_erase_forgets_element(self, session: BoardSession):
        text = run(session, {"action": "write_text", "content": "Mistake"})
        result = run(session, {"action": "erase", "reference": "Mistake"})
        assert isinstance(result.commands[0], EraseAreaPrimitive)
        assert session.registry.find_element(text.element_id) is None
        assert session.layout.get_element(text.element_id) is None
        assert text.element_id not in session.placer.placed

    def test_below_previous_ignores_erased_element(self, session: BoardSession):
        keep = run(session, {"action": "write_text", "content": "Keep"})
        run(session, {"action": "write_text", "content": "Mistake", "position": {"region": "bottom_right"}})
        run(session, {"action": "erase", "reference": "Mistake"})
        after = run(
            session,
            {"action": "write_text", "content": "Next", "position": {"region": "below_previous"}},
        )
        keep_box = session.layout.get_bbox(keep.element_id)
        assert after.position.x == pytest.approx(keep_box.x)
        assert after.position.y == pytest.approx(keep_box.bottom + 20)

    def test_modify_rewrites_and_reindexes(self, session: BoardSession):
        text = run(session, {"action": "write_text", "content": "Old wording"})
        result = run(session, {"action": "modify", "reference": "Old wording", "content": "New wording"})
        assert result.success
        assert result.element_id == text.element_id
        assert session.registry.find_element_by_description("New wording").id == text.element_id

    def test_modify_requires_change(self, session: BoardSession):
        run(session, {"action": "write_text", "content": "Same"})
        result = run(session, {"action": "modify", "reference": "Same"})
        assert result.error_type == "validation"


class TestDiagramsAndClearing:
    """Tests for create_diagram and clear_region."""

    def test_tree_registers_nodes(self, session: BoardSession, tree_data: dict):
        result = run(session, {"action": "create_diagram", "content": "tree", "data": {"root": tree_data}})
        assert result.success
        nodes = session.registry.elements_by_type("tree-node")
        assert [n.content for n in nodes] == ["Cell", "Nucleus", "Cytoplasm"]
        assert nodes[0].id in session.registry.connections(result.element_id)
        assert session.registry.connections(nodes[0].id) >= {nodes[1].id, nodes[2].id}

    def test_timeline_requires_events(self, session: BoardSession):
        result = run(session, {"action": "create_diagram", "data": {"kind": "timeline"}})
        assert result.error_type == "validation"

    def test_graph_from_equations(self, session: BoardSession):
        result = run(
            session,
            {"action": "create_diagram", "data": {"equations": ["x^2"], "title": "Parabola"}},
        )
        assert result.success
        assert session.registry.find_element_by_description("Parabola").id == result.element_id

    def test_unknown_diagram_kind(self, session: BoardSession):
        result = run(session, {"action": "create_diagram", "content": "venn"})
        assert result.error_type == "handler"

    def test_clear_everything(self, session: BoardSession):
        run(session, {"action": "write_text", "content": "One"})
        result = run(session, {"action": "clear_region", "position": {"region": "auto"}})
        assert isinstance(result.commands[0], ClearPrimitive)
        assert len(session.registry) == 0
        assert session.renderer.since_clear() == []

    def test_clear_main_keeps_header(self, session: BoardSession):
        title = run(session, {"action": "write_text", "content": "Title", "style": {"size": "title"}})
        body = run(session, {"action": "write_text", "content": "Body"})
        run(session, {"action": "clear_region", "position": {"region": "main"}})
        assert title.element_id in session.registry
        assert body.element_id not in session.registry

    def test_clear_requires_region(self, session: BoardSession):
        result = run(session, {"action": "clear_region"})
        assert result.error_type == "validation"


class TestQueue:
    """Tests for queued execution."""

    def test_drains_in_fifo_order(self, session: BoardSession):
        interpreter = session.interpreter
        for i in range(3):
            assert interpreter.queue_command({"id": f"q{i}", "action": "write_text", "content": f"Line {i}"}) == i + 1

        results = asyncio.run(interpreter.process_queue())
        assert [r.command_id for r in results] == ["q0", "q1", "q2"]
        assert interpreter.queue_length == 0
        assert not interpreter.is_processing

    def test_failure_does_not_block_queue(self, session: BoardSession):
        interpreter = session.interpreter
        interpreter.queue_command({"action": "teleport"})
        interpreter.queue_command({"action": "write_text", "content": "Still runs"})
        results = asyncio.run(interpreter.process_queue())
        assert [r.success for r in results] == [False, True]

    def test_commands_queued_during_drain_run_in_same_drain(self, session: BoardSession):
        interpreter = session.interpreter
        nested = []

        async def enqueue_more(command, ctx):
            interpreter.queue_command({"id": "late", "action": "write_text", "content": "Late"})
            nested.append(await interpreter.process_queue())
            return ExecutionResult(command_id=command.id, success=True)

        interpreter.register_action("enqueue_more", enqueue_more)
        interpreter.queue_command({"id": "first", "action": "enqueue_more"})
        results = asyncio.run(interpreter.process_queue())

        assert nested == [[]]
        assert [r.command_id for r in results] == ["first", "late"]

    def test_submit_returns_own_result(self, session: BoardSession):
        async def scenario():
            return await asyncio.gather(
                session.interpreter.submit({"id": "a", "action": "write_text", "content": "A"}),
                session.interpreter.submit({"id": "b", "action": "write_text", "content": "B"}),
            )

        first, second = asyncio.run(scenario())
        assert (first.command_id, second.command_id) == ("a", "b")
        assert second.position.y > first.position.y

    def test_clear_queue(self, session: BoardSession):
        session.interpreter.queue_command({"action": "write_text", "content": "never"})
        session.interpreter.clear_queue()
        assert session.interpreter.queue_length == 0
        assert asyncio.run(session.interpreter.process_queue()) == []

    def test_batch_waits_for_running_drain(self):
        """A batch queued behind another caller's drain still gets its own results."""
        session = BoardSession(renderer=YieldingRenderer())
        interpreter = session.interpreter

        async def scenario():
            return await asyncio.gather(
                interpreter.submit({"id": "a", "action": "write_text", "content": "A"}),
                interpreter.submit_many([
                    {"id": "b1", "action": "write_text", "content": "B1"},
                    {"id": "b2", "action": "teleport"},
                ]),
            )

        single, batch = asyncio.run(scenario())
        assert single.command_id == "a"
        assert [r.command_id for r in batch] == ["b1", "b2"]
        assert [r.success for r in batch] == [True, False]
        assert [c.text for c in session.primitives] == ["A", "B1"]
        assert interpreter.queue_length == 0
