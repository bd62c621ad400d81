"""Result types returned by the session services and serialized by the HTTP layer."""

from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shared.dal.models import GameHistoryEntry, PlayerProfile
from spades.logic.state import SpadesGame

_VIEW_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ActiveGameSummary(BaseModel):
    """A non-completed game a named player is seated in."""

    model_config = _VIEW_CONFIG

    game_id: str
    game_code: str
    title: str
    status: str
    current_round: int
    total_rounds: int
    player_count: int
    last_activity: int
    player_id: str


class AdminGameSummary(BaseModel):
    model_config = _VIEW_CONFIG

    id: str
    code: str
    title: str
    host: str
    players: int
    status: str
    created_at: int
    last_activity: int


class AdminPlayerSummary(BaseModel):
    model_config = _VIEW_CONFIG

    id: str
    name: str
    game_id: str | None
    last_seen: int
    is_online: bool


class GameJoined(NamedTuple):
    """Outcome of create or join: the stored game and the caller's player id."""

    game: SpadesGame
    player_id: str
    auto_mode: bool = False


class ActionOutcome(NamedTuple):
    """Outcome of a dispatched action; ``game`` is None once the game is deleted."""

    game: SpadesGame | None
    deleted: bool = False

    def to_wire(self) -> dict[str, Any]:
        if self.deleted or self.game is None:
            return {"success": True, "gameDeleted": True}
        return {"success": True, "game": self.game.to_wire()}


class LoginResult(NamedTuple):
    profile: PlayerProfile
    active_games: list[ActiveGameSummary]

    def to_wire(self) -> dict[str, Any]:
        return {
            "success": True,
            "profile": self.profile.model_dump(mode="json", by_alias=True),
            "activeGames": [g.model_dump(by_alias=True) for g in self.active_games],
            "hasActiveGames": bool(self.active_games),
        }


class ResumeResult(NamedTuple):
    game_id: str
    player_id: str
    game: SpadesGame

    def to_wire(self) -> dict[str, Any]:
        return {"success": True, "gameId": self.game_id, "playerId": self.player_id, "game": self.game.to_wire()}


class ProfileView(NamedTuple):
    profile: PlayerProfile
    active_games: list[ActiveGameSummary]
    recent_games: tuple[GameHistoryEntry, ...]

    def to_wire(self) -> dict[str, Any]:
        return {
            "success": True,
            "profile": self.profile.model_dump(mode="json", by_alias=True),
            "activeGames": [g.model_dump(by_alias=True) for g in self.active_games],
            "recentGames": [g.model_dump(by_alias=True) for g in self.recent_games],
        }


class DeleteReport(NamedTuple):
    deleted: list[str]
    failed: list[str]
