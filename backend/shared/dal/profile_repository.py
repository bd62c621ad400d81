"""Abstract interface for player profile persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared.dal.models import PlayerProfile


class ProfileRepository(ABC):
    """Abstract interface for player profile persistence.

    Profiles are keyed by lowercased name, so lookups are case-insensitive.
    """

    @abstractmethod
    async def get_profile(self, name: str) -> PlayerProfile | None: ...

    @abstractmethod
    async def save_profile(self, profile: PlayerProfile) -> None:
        """Insert or replace the profile stored under its name key."""
