"""Entity & relationship registry for a single board.

The registry is the board's memory. Every created element is recorded with
its content and an optional free-text description so that later commands can
refer back to it ("the circle", "the mitochondria label") instead of by id.
Elements can be linked by symmetric relationships, and every mutation is
appended to an audit log.
"""

import logging
import uuid
from dataclasses import dataclass, field, fields, replace
from typing import Any

from whiteboard.context.audit import AuditAction, AuditEntry, AuditLog
from whiteboard.dsl.schema import BoundingBox

logger = logging.getLogger(__name__)

# Minimum token-overlap score for a fuzzy description match
SIMILARITY_THRESHOLD = 0.7


@dataclass
class BoardElement:
    """A registered board element."""

    id: str
    type: str
    content: str | None = None
    bbox: BoundingBox | None = None
    style: dict[str, Any] = field(default_factory=dict)
    description: str | None = None
    source: str | None = None
    target: str | None = None
    label: str | None = None

    @property
    def semantic_description(self) -> str | None:
        """Text used for fuzzy matching: the description, else the content."""
        return self.description or self.content

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "content": self.content,
            "bbox": self.bbox.model_dump() if self.bbox else None,
            "style": self.style,
            "description": self.description,
            "source": self.source,
            "target": self.target,
            "label": self.label,
        }


_UPDATABLE_FIELDS = {f.name for f in fields(BoardElement)} - {"id"}


def token_similarity(first: str, second: str) -> float:
    """Token-overlap similarity ``2 * |A ∩ B| / (|A| + |B|)`` over whitespace tokens.

    Returns 0.0 when either side has no tokens.
    """
    tokens_a = first.lower().split()
    tokens_b = second.lower().split()
    if not tokens_a or not tokens_b:
        return 0.0
    common = set(tokens_a) & set(tokens_b)
    return 2 * len(common) / (len(tokens_a) + len(tokens_b))


class ElementRegistry:
    """Directory of board elements, their descriptions and relationships.

    Lookups never raise: an unknown id or unmatched description yields None.
    """

    def __init__(self, audit_log: AuditLog | None = None):
        self._elements: dict[str, BoardElement] = {}
        self._index: dict[str, str] = {}                # lower-cased description -> id
        self._relationships: dict[str, set[str]] = {}
        self.audit = audit_log or AuditLog()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_element(
        self,
        element_type: str,
        *,
        content: str | None = None,
        bbox: BoundingBox | None = None,
        style: dict[str, Any] | None = None,
        source: str | None = None,
        target: str | None = None,
        label: str | None = None,
        description: str | None = None,
        element_id: str | None = None,
    ) -> str:
        """Register an element.

        Args:
            element_type: Kind of element (text, rectangle, arrow, tree, ...).
            content: Text content, if any.
            bbox: Board position and size.
            style: Style payload the element was drawn with.
            source: Source element id, for connectors.
            target: Target element id, for connectors.
            label: Connector or shape label.
            description: Free-text description; indexed for exact lookup.
            element_id: Explicit id; one is generated when omitted.

        Returns:
            The element id.
        """
        element_id = element_id or f"elem_{uuid.uuid4().hex[:12]}"
        element = BoardElement(
            id=element_id,
            type=element_type,
            content=content,
            bbox=bbox,
            style=dict(style or {}),
            description=description,
            source=source,
            target=target,
            label=label,
        )
        self._elements[element_id] = element

        if description:
            self._index_description(description, element_id)

        self._relationships.setdefault(element_id, set())
        self.audit.log(
            AuditAction.ELEMENT_REGISTERED,
            element_id=element_id,
            payload={"type": element_type, "content": content, "description": description},
        )
        return element_id

    def update_element(self, element_id: str, **changes: Any) -> BoardElement | None:
        """Apply field changes to an element.

        A changed description replaces the old index entry.

        Returns:
            The updated element, or None if the id is unknown.

        Raises:
            ValueError: If a change names a field elements do not have.
        """
        element = self._elements.get(element_id)
        if element is None:
            return None

        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        updated = replace(element, **changes)
        self._elements[element_id] = updated

        if "description" in changes and changes["description"] != element.description:
            self._drop_index_entries(element_id)
            if updated.description:
                self._index_description(updated.description, element_id)

        self.audit.log(
            AuditAction.ELEMENT_UPDATED,
            element_id=element_id,
            payload={k: v for k, v in changes.items() if k != "bbox"},
        )
        return updated

    def remove_element(self, element_id: str) -> bool:
        """Remove an element, its index entries and every edge touching it.

        Returns:
            True if the element existed.
        """
        element = self._elements.pop(element_id, None)
        if element is None:
            return False

        self._drop_index_entries(element_id)
        self._relationships.pop(element_id, None)
        for connections in self._relationships.values():
            connections.discard(element_id)

        self.audit.log(AuditAction.ELEMENT_REMOVED, element_id=element_id)
        return True

    def clear(self) -> None:
        """Forget all elements. The audit log is kept."""
        count = len(self._elements)
        self._elements.clear()
        self._index.clear()
        self._relationships.clear()
        self.audit.log(AuditAction.CONTEXT_CLEARED, payload={"removed": count})

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_element(self, element_id: str) -> BoardElement | None:
        """Look up an element by id."""
        return self._elements.get(element_id)

    def find_element_by_description(self, description: str) -> BoardElement | None:
        """Look up an element by description.

        An exact (case-insensitive) index hit wins; otherwise the best fuzzy
        match over all elements is returned if it scores above the threshold.
        """
        if not description or not description.strip():
            return None

        element_id = self._index.get(description.strip().lower())
        if element_id is not None and element_id in self._elements:
            return self._elements[element_id]
        return self.find_similar_element(description)

    def find_similar_element(self, description: str) -> BoardElement | None:
        """Best fuzzy match for ``description``, or None if nothing scores above 0.7.

        Ties go to the earliest registered element.
        """
        best: BoardElement | None = None
        best_score = SIMILARITY_THRESHOLD
        for element in self._elements.values():
            text = element.semantic_description
            if not text:
                continue
            score = token_similarity(description, text)
            if score > best_score:
                best, best_score = element, score
        return best

    def resolve_reference(self, reference: str | None) -> BoardElement | None:
        """Resolve one reference: description first, then id."""
        if not reference:
            return None
        return self.find_element_by_description(reference) or self.find_element(reference)

    def resolve_references(
        self, from_ref: str | None, to_ref: str | None
    ) -> tuple[BoardElement | None, BoardElement | None]:
        """Resolve both ends of a connection independently."""
        return self.resolve_reference(from_ref), self.resolve_reference(to_ref)

    def all_elements(self) -> list[BoardElement]:
        return list(self._elements.values())

    def elements_by_type(self, element_type: str) -> list[BoardElement]:
        return [e for e in self._elements.values() if e.type == element_type]

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def add_relationship(self, first_id: str, second_id: str) -> bool:
        """Link two registered elements. Idempotent and symmetric.

        Returns:
            True if both elements are registered (whether or not the edge is new).
        """
        first = self._relationships.get(first_id)
        second = self._relationships.get(second_id)
        if first is None or second is None or first_id == second_id:
            return False

        if second_id not in first:
            first.add(second_id)
            second.add(first_id)
            self.audit.log(
                AuditAction.RELATIONSHIP_ADDED,
                element_id=first_id,
                payload={"from": first_id, "to": second_id},
            )
        return True

    def get_relationships(self, element_id: str) -> list[BoardElement]:
        """Elements connected to ``element_id``, in registration order."""
        connections = self._relationships.get(element_id)
        if not connections:
            return []
        return [e for e in self._elements.values() if e.id in connections]

    def connections(self, element_id: str) -> set[str]:
        """Ids connected to ``element_id`` (a copy)."""
        return set(self._relationships.get(element_id, ()))

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_history(self) -> list[AuditEntry]:
        """The full ordered audit log."""
        return self.audit.entries

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._elements

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _index_description(self, description: str, element_id: str) -> None:
        key = description.strip().lower()
        previous = self._index.get(key)
        if previous is not None and previous != element_id:
            logger.debug(f"Description '{key}' now points to {element_id} (was {previous})")
        self._index[key] = element_id

    def _drop_index_entries(self, element_id: str) -> None:
        for key in [k for k, v in self._index.items() if v == element_id]:
            del self._index[key]
