"""
data_models.py — Structured diagram inputs shared by the engine, the
interpreter and the tool surface.

These arrive as untrusted JSON from the agent, so they are pydantic models
rather than plain dataclasses: a malformed tree or timeline is rejected at the
boundary instead of half-drawn.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TreeNode(BaseModel):
    """One node of a hierarchy passed to ``draw_tree``."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(min_length=1)
    children: List["TreeNode"] = Field(default_factory=list)

    def count(self) -> int:
        """Total number of nodes in this subtree."""
        return 1 + sum(child.count() for child in self.children)

    def depth(self) -> int:
        """Number of levels in this subtree (a leaf has depth 1)."""
        if not self.children:
            return 1
        return 1 + max(child.depth() for child in self.children)


class TimelineEvent(BaseModel):
    """A dated event on a timeline."""

    model_config = ConfigDict(frozen=True)

    year: str = ""
    label: str

    @field_validator("year", mode="before")
    @classmethod
    def _year_as_text(cls, value):
        # Agents send years as numbers as often as strings
        return "" if value is None else str(value)


class GraphSpec(BaseModel):
    """Function plot request."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    equations: List[str] = Field(default_factory=list)
