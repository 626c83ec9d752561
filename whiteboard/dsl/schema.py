"""Pydantic v2 models for board primitives.

A primitive (``BoardCommand``) is a fully resolved, pixel-positioned drawing
instruction handed to the rendering surface. The renderer has no layout
authority: every coordinate and color is decided before a primitive is built.
All measurements are canvas pixels with the origin at the top-left corner.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Geometry Models
# ============================================================================


class Point(BaseModel):
    """A 2D point in canvas pixels."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class BoundingBox(BaseModel):
    """Axis-aligned bounding box in canvas pixels."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(description="Left position")
    y: float = Field(description="Top position")
    width: float = Field(ge=0, description="Width")
    height: float = Field(ge=0, description="Height")

    @property
    def right(self) -> float:
        """Right edge position."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Bottom edge position."""
        return self.y + self.height

    @property
    def center_x(self) -> float:
        """Horizontal center."""
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        """Vertical center."""
        return self.y + self.height / 2

    def contains(self, other: "BoundingBox") -> bool:
        """Check whether ``other`` lies entirely inside this box."""
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def contains_point(self, x: float, y: float) -> bool:
        """Check whether a point lies inside this box (edges inclusive)."""
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def intersects(self, other: "BoundingBox") -> bool:
        """Check whether two boxes overlap."""
        return not (
            other.x > self.right
            or other.right < self.x
            or other.y > self.bottom
            or other.bottom < self.y
        )

    def expanded(self, margin: float) -> "BoundingBox":
        """Return a new box grown by ``margin`` on every side."""
        return BoundingBox(
            x=self.x - margin,
            y=self.y - margin,
            width=self.width + 2 * margin,
            height=self.height + 2 * margin,
        )


# ============================================================================
# Primitive Models
# ============================================================================


class TextPrimitive(BaseModel):
    """Text drawn at an anchor point."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str
    x: float
    y: float
    size: float = Field(default=28, gt=0, description="Font size in pixels")
    color: str = Field(default="#f8fafc", description="Hex color")
    align: Literal["left", "center", "right"] = "left"
    weight: Literal["light", "normal", "bold"] = "normal"
    font_family: Optional[str] = None
    max_width: Optional[float] = Field(default=None, description="Wrap width for the renderer")


class RectPrimitive(BaseModel):
    """Rectangle outline with optional fill."""

    model_config = ConfigDict(frozen=True)

    type: Literal["rect"] = "rect"
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)
    color: str
    fill: Optional[str] = None
    line_width: float = 2
    dash: Literal["solid", "dashed", "dotted"] = "solid"


class CirclePrimitive(BaseModel):
    """Circle centered at (x, y)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["circle"] = "circle"
    x: float
    y: float
    radius: float = Field(ge=0)
    color: str
    fill: Optional[str] = None


class LinePrimitive(BaseModel):
    """Straight line segment."""

    model_config = ConfigDict(frozen=True)

    type: Literal["line"] = "line"
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float = 2


class ArrowPrimitive(BaseModel):
    """Straight arrow with its head at (x2, y2)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["arrow"] = "arrow"
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float = 2


class PolygonPrimitive(BaseModel):
    """Closed polygon."""

    model_config = ConfigDict(frozen=True)

    type: Literal["polygon"] = "polygon"
    points: list[Point]
    color: str
    fill: Optional[str] = None


class StrokePrimitive(BaseModel):
    """Open polyline, used for plotted curves."""

    model_config = ConfigDict(frozen=True)

    type: Literal["stroke"] = "stroke"
    points: list[Point]
    color: str
    width: float = 3


class FormulaPrimitive(BaseModel):
    """Mathematical expression rendered by the surface's formula typesetter."""

    model_config = ConfigDict(frozen=True)

    type: Literal["formula"] = "formula"
    expression: str
    x: float
    y: float
    size: float = Field(default=36, gt=0)
    color: str = "#f8fafc"


class HighlightPrimitive(BaseModel):
    """Translucent highlight band over an area."""

    model_config = ConfigDict(frozen=True)

    type: Literal["highlight"] = "highlight"
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)
    color: str


class EraseAreaPrimitive(BaseModel):
    """Erase everything inside a rectangle."""

    model_config = ConfigDict(frozen=True)

    type: Literal["erase-area"] = "erase-area"
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class ClearPrimitive(BaseModel):
    """Wipe the whole board."""

    model_config = ConfigDict(frozen=True)

    type: Literal["clear"] = "clear"


BoardCommand = Annotated[
    Union[
        TextPrimitive,
        RectPrimitive,
        CirclePrimitive,
        LinePrimitive,
        ArrowPrimitive,
        PolygonPrimitive,
        StrokePrimitive,
        FormulaPrimitive,
        HighlightPrimitive,
        EraseAreaPrimitive,
        ClearPrimitive,
    ],
    Field(discriminator="type"),
]
