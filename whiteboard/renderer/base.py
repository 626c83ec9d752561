"""Renderer boundary.

A renderer consumes fully positioned primitives, in order. It never computes
positions; that is the layout engine's job. Drawing may suspend (animation,
network hand-off), which is the only await point in command execution.
"""

from abc import ABC, abstractmethod

from whiteboard.dsl.schema import BoardCommand, ClearPrimitive


class BoardRenderer(ABC):
    """Abstract drawing surface."""

    @abstractmethod
    async def draw(self, command: BoardCommand) -> None:
        """Draw one primitive.

        Args:
            command: A resolved board primitive.
        """
        pass

    async def draw_all(self, commands: list[BoardCommand]) -> None:
        """Draw primitives sequentially, preserving order."""
        for command in commands:
            await self.draw(command)


class RecordingRenderer(BoardRenderer):
    """Renderer that keeps every primitive it is given.

    Backs the HTTP service (clients poll the primitive stream) and tests.
    A ``clear`` primitive is recorded like any other so that replaying the
    stream reproduces the board.
    """

    def __init__(self) -> None:
        self.commands: list[BoardCommand] = []

    async def draw(self, command: BoardCommand) -> None:
        self.commands.append(command)

    def since_clear(self) -> list[BoardCommand]:
        """Primitives drawn after the most recent ``clear``."""
        for index in range(len(self.commands) - 1, -1, -1):
            if isinstance(self.commands[index], ClearPrimitive):
                return self.commands[index + 1:]
        return list(self.commands)

    def reset(self) -> None:
        self.commands.clear()
