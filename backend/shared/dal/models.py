"""Persistence models for the data access layer.

Field names are stored camelCase so documents written by the legacy
file-based server load without conversion.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_DOCUMENT_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore")


class PlayerStats(BaseModel):
    """Lifetime aggregates, updated when a game the player sat in completes."""

    model_config = _DOCUMENT_CONFIG

    games_played: int = 0
    games_won: int = 0
    games_lost: int = 0
    win_rate: float = 0  # percent, 0-100
    total_score: int = 0
    average_score: float = 0
    best_score: int = 0
    total_bids: int = 0
    bids_made: int = 0  # rounds where tricks == bid
    bid_accuracy: float = 0  # percent, 0-100


class PlayerPreferences(BaseModel):
    model_config = _DOCUMENT_CONFIG

    favorite_team_name: str = ""
    preferred_game_mode: str = "teams"
    notifications: bool = True


class GameHistoryEntry(BaseModel):
    """Summary of one completed game, newest first in a profile's history."""

    model_config = _DOCUMENT_CONFIG

    game_id: str
    title: str = ""
    game_mode: str = "teams"
    completed_at: int = 0
    rounds_played: int = 0
    final_score: int = 0
    won: bool = False
    player_count: int = 0


class PlayerProfile(BaseModel):
    """Name-keyed player record; the key is the lowercased name."""

    model_config = _DOCUMENT_CONFIG

    player_id: str
    name: str
    created_at: int = 0
    last_login: int = 0
    login_count: int = 0
    stats: PlayerStats = Field(default_factory=PlayerStats)
    preferences: PlayerPreferences = Field(default_factory=PlayerPreferences)
    recent_games: tuple[GameHistoryEntry, ...] = ()

    @property
    def name_key(self) -> str:
        return self.name.strip().lower()


class PlayerSession(BaseModel):
    """Presence record for one player id, optionally bound to a game."""

    model_config = _DOCUMENT_CONFIG

    player_id: str = Field(validation_alias=AliasChoices("playerId", "id", "player_id"), serialization_alias="playerId")
    game_id: str | None = None
    name: str = "Guest Player"
    joined_at: int = 0
    last_seen: int = 0
    is_online: bool = True
