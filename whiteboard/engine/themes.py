"""
themes.py — Per-subject themes and role-driven typography.

Two static tables live here:

- THEMES: one complete visual bundle per subject (background, grid, three
  palette slots and a font family).
- ROLE_TYPOGRAPHY: size, color slot, weight, bottom margin and alignment for
  each semantic text role. Colors are stored as slots ("primary",
  "secondary", "accent") and resolved against the active theme at layout
  time, so changing the subject only affects later placements.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class Subject(str, Enum):
    """Board subjects, each bound to exactly one theme."""
    GENERAL = "general"
    MATH = "math"
    SCIENCE = "science"
    HISTORY = "history"
    LITERATURE = "literature"


class GridType(str, Enum):
    """Background grid styles."""
    LINES = "lines"
    DOTS = "dots"
    CROSS = "cross"
    NONE = "none"


class SemanticRole(str, Enum):
    """Pedagogical/typographic category of a board element."""
    TITLE = "title"
    HEADING = "heading"
    SUBHEADING = "subheading"
    BODY = "body"
    BULLET = "bullet"
    EQUATION = "equation"
    EXAMPLE = "example"
    NOTE = "note"
    CONTAINER = "container"
    CONNECTOR = "connector"
    LABEL = "label"
    GROUP_TITLE = "group-title"
    TREE_NODE = "tree-node"


ColorSlot = Literal["primary", "secondary", "accent"]


# =============================================================================
# THEMES
# =============================================================================

class Theme(BaseModel):
    """Complete visual configuration for one subject."""

    model_config = ConfigDict(frozen=True)

    subject: Subject
    background: str = Field(description="Board background color")
    grid_type: GridType
    grid_color: str
    primary_color: str
    secondary_color: str
    accent_color: str
    font_family: str

    def color(self, slot: ColorSlot) -> str:
        """Resolve a color slot to a hex color."""
        if slot == "primary":
            return self.primary_color
        if slot == "secondary":
            return self.secondary_color
        return self.accent_color


THEMES: Dict[Subject, Theme] = {
    Subject.GENERAL: Theme(
        subject=Subject.GENERAL,
        background="#0f172a",
        grid_type=GridType.DOTS,
        grid_color="#1e293b",
        primary_color="#22d3ee",
        secondary_color="#94a3b8",
        accent_color="#facc15",
        font_family="Kalam",
    ),
    Subject.MATH: Theme(
        subject=Subject.MATH,
        background="#0b1120",
        grid_type=GridType.LINES,
        grid_color="#1e3a5f",
        primary_color="#60a5fa",
        secondary_color="#cbd5e1",
        accent_color="#f472b6",
        font_family="Kalam",
    ),
    Subject.SCIENCE: Theme(
        subject=Subject.SCIENCE,
        background="#052e16",
        grid_type=GridType.CROSS,
        grid_color="#14532d",
        primary_color="#4ade80",
        secondary_color="#d1fae5",
        accent_color="#fb923c",
        font_family="Patrick Hand",
    ),
    Subject.HISTORY: Theme(
        subject=Subject.HISTORY,
        background="#2b2118",
        grid_type=GridType.NONE,
        grid_color="#3f3126",
        primary_color="#f59e0b",
        secondary_color="#e7d7c1",
        accent_color="#b91c1c",
        font_family="Caveat",
    ),
    Subject.LITERATURE: Theme(
        subject=Subject.LITERATURE,
        background="#1c1917",
        grid_type=GridType.LINES,
        grid_color="#292524",
        primary_color="#c084fc",
        secondary_color="#e7e5e4",
        accent_color="#fda4af",
        font_family="Caveat",
    ),
}


def get_theme(subject: Subject | str) -> Theme:
    """
    Look up the theme for a subject.

    Args:
        subject: Subject enum or its case-insensitive string value

    Returns:
        The subject's Theme

    Raises:
        ValueError: If the subject is not one of the five built-in subjects
    """
    return THEMES[Subject(subject.lower() if isinstance(subject, str) else subject)]


def list_subjects() -> List[str]:
    """Return the names of all built-in subjects."""
    return [s.value for s in THEMES]


# =============================================================================
# ROLE TYPOGRAPHY
# =============================================================================

@dataclass(frozen=True)
class RoleTypography:
    """Text style for one semantic role."""
    size: float
    color_slot: ColorSlot
    weight: Literal["light", "normal", "bold"]
    margin: float                       # Bottom margin added to the cursor advance
    align: Literal["left", "center", "right"] = "left"


ROLE_TYPOGRAPHY: Dict[SemanticRole, RoleTypography] = {
    SemanticRole.TITLE: RoleTypography(56, "primary", "bold", 40, align="center"),
    SemanticRole.HEADING: RoleTypography(40, "primary", "bold", 30),
    SemanticRole.SUBHEADING: RoleTypography(32, "secondary", "bold", 24),
    SemanticRole.BODY: RoleTypography(28, "secondary", "normal", 20),
    SemanticRole.BULLET: RoleTypography(28, "secondary", "normal", 16),
    SemanticRole.EQUATION: RoleTypography(36, "accent", "normal", 30),
    SemanticRole.EXAMPLE: RoleTypography(24, "accent", "normal", 20),
    SemanticRole.NOTE: RoleTypography(22, "accent", "light", 15),
    SemanticRole.LABEL: RoleTypography(22, "accent", "bold", 10),
    SemanticRole.GROUP_TITLE: RoleTypography(26, "primary", "bold", 20),
    SemanticRole.TREE_NODE: RoleTypography(20, "primary", "normal", 0),
}


def get_typography(role: SemanticRole | str) -> RoleTypography:
    """Typography for a role; non-text roles fall back to body text."""
    return ROLE_TYPOGRAPHY.get(SemanticRole(role), ROLE_TYPOGRAPHY[SemanticRole.BODY])


# Border colors rotated through successive groups to tell clusters apart
GROUP_COLORS = (
    "#334155",
    "#1e40af",
    "#047857",
    "#7e22ce",
    "#be185d",
)
