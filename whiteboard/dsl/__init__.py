"""Board primitive schema."""

from whiteboard.dsl.schema import (
    ArrowPrimitive,
    BoardCommand,
    BoundingBox,
    CirclePrimitive,
    ClearPrimitive,
    EraseAreaPrimitive,
    FormulaPrimitive,
    HighlightPrimitive,
    LinePrimitive,
    Point,
    PolygonPrimitive,
    RectPrimitive,
    StrokePrimitive,
    TextPrimitive,
)

__all__ = [
    "ArrowPrimitive",
    "BoardCommand",
    "BoundingBox",
    "CirclePrimitive",
    "ClearPrimitive",
    "EraseAreaPrimitive",
    "FormulaPrimitive",
    "HighlightPrimitive",
    "LinePrimitive",
    "Point",
    "PolygonPrimitive",
    "RectPrimitive",
    "StrokePrimitive",
    "TextPrimitive",
]
