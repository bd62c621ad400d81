"""Abstract interface for player session persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared.dal.models import PlayerSession


class SessionRepository(ABC):
    """Abstract interface for per-player presence records."""

    @abstractmethod
    async def get_session(self, player_id: str) -> PlayerSession | None: ...

    @abstractmethod
    async def save_session(self, session: PlayerSession) -> None:
        """Insert or replace the session for ``session.player_id``."""

    @abstractmethod
    async def delete_session(self, player_id: str) -> bool: ...

    @abstractmethod
    async def list_sessions(self) -> list[PlayerSession]: ...
