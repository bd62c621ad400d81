"""Data access layer: repository interfaces and shared persistence models."""

from shared.dal.game_repository import GameRepository, StaleWriteError
from shared.dal.models import GameHistoryEntry, PlayerPreferences, PlayerProfile, PlayerSession, PlayerStats
from shared.dal.profile_repository import ProfileRepository
from shared.dal.session_repository import SessionRepository

__all__ = [
    "GameHistoryEntry",
    "GameRepository",
    "PlayerPreferences",
    "PlayerProfile",
    "PlayerSession",
    "PlayerStats",
    "ProfileRepository",
    "SessionRepository",
    "StaleWriteError",
]
