"""Abstract interface for live game persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StaleWriteError(Exception):
    """Save rejected because the stored version moved past the expected one."""

    def __init__(self, game_id: str, expected_version: int) -> None:
        self.game_id = game_id
        self.expected_version = expected_version
        super().__init__(f"Game {game_id} is no longer at version {expected_version}")


class GameRepository(ABC):
    """Abstract interface for game document persistence.

    Games are stored as schemaless JSON documents; validation belongs to the
    caller. Every document carries an integer ``version`` that ``save_game``
    bumps, so writers racing on the same game cannot silently overwrite each
    other.
    """

    @abstractmethod
    async def get_game(self, game_id: str) -> dict[str, Any] | None: ...

    @abstractmethod
    async def create_game(self, game_id: str, data: dict[str, Any]) -> bool:
        """Insert at version 1. Returns False when the id is already taken."""

    @abstractmethod
    async def save_game(self, game_id: str, data: dict[str, Any], expected_version: int) -> int:
        """Overwrite the document if it is still at ``expected_version``.

        Returns the new version. Raises StaleWriteError otherwise.
        """

    @abstractmethod
    async def delete_game(self, game_id: str) -> bool: ...

    @abstractmethod
    async def list_games(self) -> list[dict[str, Any]]: ...

    @abstractmethod
    async def count_games(self) -> int: ...
