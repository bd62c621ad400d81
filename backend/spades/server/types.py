"""Request body models for the HTTP API.

Field names follow the client's camelCase JSON; unknown fields are ignored
so older clients keep working.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from shared.validators import normalize_game_code, normalize_player_name
from spades.logic.enums import GameMode
from spades.logic.state import DEFAULT_BID_TIMER_SECONDS, DEFAULT_MAX_PLAYERS, DEFAULT_MAX_ROUNDS, TeamConfig

_REQUEST_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

MAX_ROUNDS_LIMIT = 52
MAX_PLAYERS_LIMIT = 16


class CreateGameRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    host_name: str
    game_mode: GameMode = GameMode.TEAMS
    number_of_teams: int = Field(default=2, ge=1, le=MAX_PLAYERS_LIMIT)
    players_per_team: int = Field(default=2, ge=1, le=MAX_PLAYERS_LIMIT)
    auto_assign_teams: bool = True
    bid_timer: int = Field(default=DEFAULT_BID_TIMER_SECONDS, ge=0)
    bidding_style: str = Field(default="visible", max_length=20)
    total_rounds: int = Field(default=DEFAULT_MAX_ROUNDS, ge=1, le=MAX_ROUNDS_LIMIT)
    max_players: int = Field(default=DEFAULT_MAX_PLAYERS, ge=2, le=MAX_PLAYERS_LIMIT)
    title: str = Field(default="", max_length=100)
    description: str = Field(default="", max_length=500)

    @field_validator("host_name")
    @classmethod
    def _validate_host_name(cls, v: str) -> str:
        return normalize_player_name(v)

    @property
    def team_config(self) -> TeamConfig:
        return TeamConfig(
            game_mode=self.game_mode,
            number_of_teams=self.number_of_teams,
            players_per_team=self.players_per_team,
            auto_assign_teams=self.auto_assign_teams,
        )


class JoinGameRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    code: str = Field(min_length=1, max_length=10)
    player_name: str
    team: str | None = Field(default=None, max_length=20)

    @field_validator("code")
    @classmethod
    def _validate_code(cls, v: str) -> str:
        return normalize_game_code(v)

    @field_validator("player_name")
    @classmethod
    def _validate_player_name(cls, v: str) -> str:
        return normalize_player_name(v)


class ActionRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    game_id: str = Field(min_length=1, max_length=10)
    player_id: str = Field(min_length=1, max_length=50)
    action: str = Field(min_length=1, max_length=50)
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("game_id")
    @classmethod
    def _validate_game_id(cls, v: str) -> str:
        return normalize_game_code(v)

    @field_validator("data", mode="before")
    @classmethod
    def _default_data(cls, v: Any) -> Any:  # noqa: ANN401
        return {} if v is None else v


class LoginRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    name: str

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        return normalize_player_name(v)


class ResumeRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    player_name: str
    game_id: str = Field(min_length=1, max_length=10)

    @field_validator("player_name")
    @classmethod
    def _validate_player_name(cls, v: str) -> str:
        return normalize_player_name(v)

    @field_validator("game_id")
    @classmethod
    def _validate_game_id(cls, v: str) -> str:
        return normalize_game_code(v)


class PlayerStatusRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    player_id: str = Field(min_length=1, max_length=50)
    is_online: bool = True
    last_seen: int | None = Field(default=None, ge=0)


class DeleteGamesRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    game_ids: list[str]


class DeletePlayersRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    player_ids: list[str]
