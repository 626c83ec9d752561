"""Board context: element registry and audit trail."""

from whiteboard.context.audit import AuditAction, AuditEntry, AuditLog
from whiteboard.context.registry import (
    SIMILARITY_THRESHOLD,
    BoardElement,
    ElementRegistry,
    token_similarity,
)

__all__ = [
    "AuditAction",
    "AuditEntry",
    "AuditLog",
    "SIMILARITY_THRESHOLD",
    "BoardElement",
    "ElementRegistry",
    "token_similarity",
]
