"""Renderer boundary for board primitives."""

from whiteboard.renderer.base import BoardRenderer, RecordingRenderer

__all__ = ["BoardRenderer", "RecordingRenderer"]
