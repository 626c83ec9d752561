"""
interpreter.py — Semantic command interpreter.

Validates untyped agent commands and dispatches them to action handlers:

    raw dict -> parse_command -> validate_command -> handler -> ExecutionResult

A command's failure is always converted into a structured result; it never
raises out of ``execute_command`` and never blocks the commands after it.
Commands can also be deferred into a FIFO queue. A single in-flight flag
guarantees at most one drain at a time; commands queued during a drain are
picked up by that same drain.
"""

import asyncio
import logging
import uuid
from collections import deque
from typing import Any, Deque, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from whiteboard.errors import CommandValidationError, ResolutionError
from whiteboard.interpreter.commands import (
    ExecutionResult,
    HandlerContext,
    SemanticCommand,
)
from whiteboard.interpreter.handlers import DEFAULT_HANDLERS, ActionHandler

logger = logging.getLogger(__name__)

# Fields each built-in action cannot do without ("position.region" is nested)
REQUIRED_FIELDS: Dict[str, Tuple[str, ...]] = {
    "write_text": ("content",),
    "draw_arrow": ("from", "to"),
    "highlight": ("reference",),
    "erase": ("reference",),
    "modify": ("reference",),
    "clear_region": ("position.region",),
}

_FIELD_ATTRS = {"from": "source", "to": "target"}


def generate_command_id() -> str:
    return f"cmd_{uuid.uuid4().hex[:8]}"


def _field_value(command: SemanticCommand, path: str) -> Any:
    value: Any = command
    for part in path.split("."):
        if value is None:
            return None
        value = getattr(value, _FIELD_ATTRS.get(part, part), None)
    return value


def _describe_validation_error(error: ValidationError) -> Tuple[str, Optional[str]]:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    return f"Invalid command field '{field}': {first.get('msg')}", field


class CommandInterpreter:
    """
    Dispatches semantic commands for one board.

    Usage:
        interpreter = CommandInterpreter(context)
        result = await interpreter.execute_command({"action": "write_text", "content": "Cells"})
    """

    def __init__(self, context: HandlerContext):
        self.context = context
        self._handlers: Dict[str, ActionHandler] = {}
        self._queue: Deque[Tuple[Any, Optional[asyncio.Future]]] = deque()
        self._processing = False

        for action, handler in DEFAULT_HANDLERS.items():
            self.register_action(action, handler)

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register_action(self, action: str, handler: ActionHandler) -> None:
        """
        Register a handler for an action, extending the accepted action set.

        An existing handler for the same action is replaced.
        """
        if action in self._handlers:
            logger.warning(f"Action handler for '{action}' already exists. Overwriting.")
        self._handlers[action] = handler

    @property
    def supported_actions(self) -> List[str]:
        return list(self._handlers)

    # =========================================================================
    # PARSE & VALIDATE
    # =========================================================================

    def parse_command(self, raw: Any) -> SemanticCommand:
        """
        Turn raw command data into a typed SemanticCommand.

        Args:
            raw: A mapping with at least an ``action`` key, or a SemanticCommand

        Returns:
            The parsed command, with a generated id if it had none

        Raises:
            CommandValidationError: If ``raw`` is not a mapping, has no action,
                or carries an unknown or malformed field
        """
        if isinstance(raw, SemanticCommand):
            return raw
        if not isinstance(raw, Mapping):
            raise CommandValidationError("Invalid command format: expected object")
        if not raw.get("action"):
            raise CommandValidationError("Command missing required field: action", field="action")

        data = dict(raw)
        if not data.get("id"):
            data["id"] = generate_command_id()
        try:
            return SemanticCommand.model_validate(data)
        except ValidationError as e:
            message, field = _describe_validation_error(e)
            raise CommandValidationError(message, field=field) from e

    def validate_command(self, command: SemanticCommand) -> None:
        """
        Check the action is supported and its required fields are present.

        Raises:
            CommandValidationError: Naming the unsupported action or missing field
        """
        if command.action not in self._handlers:
            raise CommandValidationError(
                f"Unsupported action type: {command.action}", field="action"
            )

        for path in REQUIRED_FIELDS.get(command.action, ()):
            value = _field_value(command, path)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise CommandValidationError(
                    f"{command.action} requires {path} field", field=path
                )

    # =========================================================================
    # EXECUTION
    # =========================================================================

    async def execute_command(self, raw: Any) -> ExecutionResult:
        """
        Parse, validate and run one command.

        Never raises: every failure becomes ``ExecutionResult(success=False)``
        with an ``error_type`` of validation, resolution or handler.
        """
        command_id = raw.get("id") if isinstance(raw, Mapping) else getattr(raw, "id", None)
        try:
            command = self.parse_command(raw)
            self.validate_command(command)
        except CommandValidationError as e:
            logger.info(f"Rejected command {command_id or ''}: {e}")
            return ExecutionResult.failure(str(e), "validation", command_id)

        handler = self._handlers[command.action]
        logger.debug(f"Dispatching {command.action} ({command.id})")
        try:
            return await handler(command, self.context)
        except CommandValidationError as e:
            logger.info(f"Rejected command {command.id}: {e}")
            return ExecutionResult.failure(str(e), "validation", command.id)
        except ResolutionError as e:
            logger.info(f"Unresolved reference in {command.id}: {e}")
            return ExecutionResult.failure(str(e), "resolution", command.id)
        except Exception as e:
            logger.exception(f"Command {command.id} ({command.action}) failed")
            return ExecutionResult.failure(str(e) or type(e).__name__, "handler", command.id)

    # =========================================================================
    # QUEUE
    # =========================================================================

    def queue_command(self, raw: Any) -> int:
        """
        Defer a command. Safe to call while the queue is draining.

        Returns:
            Queue length after appending
        """
        self._queue.append((raw, None))
        return len(self._queue)

    async def process_queue(self) -> List[ExecutionResult]:
        """
        Drain the queue in FIFO order.

        Returns the results of the commands this call executed; a call made
        while another drain is in flight returns immediately with no results.
        """
        if self._processing:
            return []

        self._processing = True
        results: List[ExecutionResult] = []
        try:
            while self._queue:
                raw, future = self._queue.popleft()
                result = await self.execute_command(raw)
                results.append(result)
                if future is not None and not future.done():
                    future.set_result(result)
        finally:
            self._processing = False
        return results

    async def submit(self, raw: Any) -> ExecutionResult:
        """
        Queue a command and wait for its own result.

        Concurrent callers are serialized through the queue instead of
        interleaving their handlers.
        """
        results = await self.submit_many([raw])
        return results[0]

    async def submit_many(self, raws: List[Any]) -> List[ExecutionResult]:
        """
        Queue several commands back to back and wait for all of their results.

        Results come back in submission order. If another drain is already
        running, that drain executes these commands and this call waits for it.
        """
        loop = asyncio.get_running_loop()
        futures = []
        for raw in raws:
            future = loop.create_future()
            self._queue.append((raw, future))
            futures.append(future)
        if not self._processing:
            await self.process_queue()
        return list(await asyncio.gather(*futures))

    def clear_queue(self) -> None:
        """Drop pending commands; callers awaiting them are cancelled."""
        while self._queue:
            _, future = self._queue.popleft()
            if future is not None and not future.done():
                future.cancel()

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def is_processing(self) -> bool:
        return self._processing
