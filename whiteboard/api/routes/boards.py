"""Board routes.

Boards live in process memory, one ``BoardSession`` each, and are gone when
the process exits.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from whiteboard.api.config import get_settings
from whiteboard.context.audit import AuditAction
from whiteboard.errors import ToolCallError
from whiteboard.interpreter.commands import ExecutionResult
from whiteboard.interpreter.tools import TOOL_DECLARATIONS, ToolResult
from whiteboard.session import BoardSession

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# STORE
# =============================================================================

class BoardStore:
    """In-memory board sessions keyed by id."""

    def __init__(self, max_boards: int):
        self.max_boards = max_boards
        self._boards: dict[str, BoardSession] = {}

    def add(self, session: BoardSession) -> BoardSession:
        if len(self._boards) >= self.max_boards:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Board limit of {self.max_boards} reached",
            )
        self._boards[session.board_id] = session
        return session

    def get(self, board_id: str) -> BoardSession:
        session = self._boards.get(board_id)
        if session is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Board not found",
            )
        return session

    def remove(self, board_id: str) -> None:
        self.get(board_id)
        del self._boards[board_id]

    def sessions(self) -> list[BoardSession]:
        return list(self._boards.values())


_store: BoardStore | None = None


def get_store() -> BoardStore:
    """Process-wide board store, created on first use."""
    global _store
    if _store is None:
        _store = BoardStore(get_settings().max_boards)
    return _store


# =============================================================================
# SCHEMAS
# =============================================================================

class BoardCreate(BaseModel):
    """Request to create a board."""
    width: float | None = Field(None, gt=0)
    height: float | None = Field(None, gt=0)
    subject: str | None = None


class BoardSummary(BaseModel):
    """Board state as seen by clients."""
    board_id: str
    width: float
    height: float
    mode: str
    subject: str
    elements: int
    groups: int
    primitives: int
    queue_length: int
    description: str


class BoardListResponse(BaseModel):
    boards: list[BoardSummary]
    total: int


class BatchRequest(BaseModel):
    """Commands to queue and drain in order."""
    commands: list[dict[str, Any]] = Field(..., min_length=1)


class BatchResponse(BaseModel):
    results: list[ExecutionResult]
    succeeded: int
    failed: int


class PrimitivesResponse(BaseModel):
    primitives: list[dict[str, Any]]
    total: int


class HistoryResponse(BaseModel):
    entries: list[dict[str, Any]]
    total: int
    limit: int
    offset: int


# =============================================================================
# ROUTES
# =============================================================================

@router.post("", response_model=BoardSummary, status_code=status.HTTP_201_CREATED)
async def create_board(request: BoardCreate, store: BoardStore = Depends(get_store)):
    """Create a new, empty board."""
    settings = get_settings()
    try:
        session = BoardSession(
            width=request.width or settings.canvas_width,
            height=request.height or settings.canvas_height,
            subject=request.subject or settings.default_subject,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    store.add(session)
    return session.summary()


@router.get("", response_model=BoardListResponse)
async def list_boards(store: BoardStore = Depends(get_store)):
    """List live boards."""
    boards = [session.summary() for session in store.sessions()]
    return BoardListResponse(boards=boards, total=len(boards))


@router.get("/tools")
async def list_tools() -> list[dict[str, Any]]:
    """Tool declarations for a function-calling agent."""
    return TOOL_DECLARATIONS


@router.get("/{board_id}", response_model=BoardSummary)
async def get_board(board_id: str, store: BoardStore = Depends(get_store)):
    """Mode, subject, counts and a plain-text description of a board."""
    return store.get(board_id).summary()


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(board_id: str, store: BoardStore = Depends(get_store)):
    """Delete a board and everything on it."""
    store.remove(board_id)
    logger.info(f"Deleted board {board_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{board_id}/commands", response_model=ExecutionResult)
async def execute_command(
    board_id: str,
    command: dict[str, Any],
    store: BoardStore = Depends(get_store),
):
    """Execute one semantic command.

    Command failures are reported in the body (``success: false``), not as
    HTTP errors.
    """
    session = store.get(board_id)
    return await session.interpreter.submit(command)


@router.post("/{board_id}/commands/batch", response_model=BatchResponse)
async def execute_batch(
    board_id: str,
    request: BatchRequest,
    store: BoardStore = Depends(get_store),
):
    """Queue commands and return their results in FIFO order.

    Commands run after anything already queued on the board, even when
    another request's drain is the one executing them.
    """
    session = store.get(board_id)
    results = await session.interpreter.submit_many(request.commands)
    succeeded = sum(1 for r in results if r.success)
    return BatchResponse(results=results, succeeded=succeeded, failed=len(results) - succeeded)


@router.post("/{board_id}/tools/{tool_name}", response_model=ToolResult)
async def call_tool(
    board_id: str,
    tool_name: str,
    args: dict[str, Any] | None = None,
    store: BoardStore = Depends(get_store),
):
    """Run an agent tool call against a board."""
    session = store.get(board_id)
    try:
        return await session.tools.call(tool_name, args or {})
    except ToolCallError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{board_id}/primitives", response_model=PrimitivesResponse)
async def get_primitives(
    board_id: str,
    since_clear: bool = False,
    store: BoardStore = Depends(get_store),
):
    """Primitive stream drawn so far, optionally only after the last clear."""
    session = store.get(board_id)
    commands = session.renderer.since_clear() if since_clear else session.primitives
    primitives = [c.model_dump(mode="json") for c in commands]
    return PrimitivesResponse(primitives=primitives, total=len(primitives))


@router.get("/{board_id}/history", response_model=HistoryResponse)
async def get_history(
    board_id: str,
    action: AuditAction | None = None,
    element_id: str | None = None,
    limit: int = 100,
    offset: int = 0,
    store: BoardStore = Depends(get_store),
):
    """Registry audit log, oldest first."""
    session = store.get(board_id)
    entries = session.audit.query(action=action, element_id=element_id, limit=limit, offset=offset)
    return HistoryResponse(entries=entries, total=len(session.audit), limit=limit, offset=offset)
