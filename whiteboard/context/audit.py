"""Append-only audit trail of board context mutations."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class AuditAction(str, Enum):
    """Types of auditable context mutations."""

    ELEMENT_REGISTERED = "element.registered"
    ELEMENT_UPDATED = "element.updated"
    ELEMENT_REMOVED = "element.removed"
    RELATIONSHIP_ADDED = "relationship.added"
    CONTEXT_CLEARED = "context.cleared"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AuditEntry:
    """Represents a single audit log entry."""

    action: AuditAction
    element_id: str | None = None
    payload: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary."""
        return {
            "action": self.action.value,
            "element_id": self.element_id,
            "payload": self.payload,
            "timestamp": self.timestamp.isoformat(),
        }


class AuditLog:
    """
    In-memory audit log.

    Entries are only ever appended; nothing, including clearing the board
    context, removes them.
    """

    def __init__(self):
        self._entries: list[AuditEntry] = []

    def log(
        self,
        action: AuditAction,
        element_id: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> AuditEntry:
        """
        Record an audit event.

        Args:
            action: The type of mutation
            element_id: Element affected, if any
            payload: Additional details about the mutation

        Returns:
            The created audit entry
        """
        entry = AuditEntry(action=action, element_id=element_id, payload=payload or {})
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> list[AuditEntry]:
        """All entries in insertion order (a copy)."""
        return list(self._entries)

    def query(
        self,
        action: AuditAction | None = None,
        element_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict]:
        """
        Filter entries.

        Args:
            action: Filter by action type
            element_id: Filter by affected element
            limit: Maximum number of results
            offset: Pagination offset

        Returns:
            Matching entries as dictionaries, oldest first
        """
        results = []
        for entry in self._entries:
            if action and entry.action != action:
                continue
            if element_id and entry.element_id != element_id:
                continue
            results.append(entry.to_dict())
        return results[offset:offset + limit]

    def __len__(self) -> int:
        return len(self._entries)
