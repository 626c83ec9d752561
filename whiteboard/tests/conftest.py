"""Pytest configuration and fixtures."""

import pytest

from whiteboard.context.registry import ElementRegistry
from whiteboard.engine.layout_engine import LayoutEngine, LayoutState
from whiteboard.engine.spatial_grid import GridPlacer
from whiteboard.session import BoardSession


@pytest.fixture
def layout() -> LayoutEngine:
    """Layout engine on an empty 1920x1080 board."""
    return LayoutEngine()


@pytest.fixture
def small_layout() -> LayoutEngine:
    """Layout engine on a board too short for most content."""
    return LayoutEngine(LayoutState(width=800, height=300))


@pytest.fixture
def registry() -> ElementRegistry:
    return ElementRegistry()


@pytest.fixture
def placer() -> GridPlacer:
    return GridPlacer(1920, 1080)


@pytest.fixture
def session() -> BoardSession:
    """A fresh board session with a recording renderer."""
    return BoardSession(board_id="board_test")


@pytest.fixture
def tree_data() -> dict:
    return {
        "label": "Cell",
        "children": [
            {"label": "Nucleus"},
            {"label": "Cytoplasm"},
        ],
    }
