"""
Frozen game state models for Spades.

Every transition produces a new SpadesGame via ``model_copy(update=...)``;
nested dicts are rebuilt rather than mutated. Field aliases are camelCase so
records persisted by earlier server versions validate unchanged and the wire
format stays stable for clients. Unknown legacy keys are ignored on read.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from spades.logic.enums import GameMode, GameStatus, Personality, PlayerStatus, RoundStatus

DEFAULT_MAX_ROUNDS = 13
DEFAULT_MAX_PLAYERS = 4
DEFAULT_BID_TIMER_SECONDS = 300

AUTO_GAME_TITLE = "Auto Game"
AUTO_HOST_NAME = "Human Player"

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds (the persisted timestamp unit)."""
    return int(time.time() * 1000)


class TeamConfig(BaseModel):
    """How players are grouped for scoring. Fixed at creation."""

    model_config = _MODEL_CONFIG

    game_mode: GameMode = GameMode.TEAMS
    number_of_teams: int = Field(default=2, ge=1)
    players_per_team: int = Field(default=2, ge=1)
    auto_assign_teams: bool = True


class SpadesPlayer(BaseModel):
    """A seat at the table, human or computer."""

    model_config = _MODEL_CONFIG

    id: str
    name: str
    team: str | None = None
    is_host: bool = False
    is_computer: bool = False
    personality: Personality | None = None
    status: PlayerStatus = PlayerStatus.ACTIVE
    joined_at: int = 0
    last_activity: int | None = None


class SpadesRound(BaseModel):
    """
    One scoring unit of play.

    Round N distributes exactly N tricks. A player id missing from ``bids`` or
    ``tricks`` means that player has not submitted yet.
    """

    model_config = _MODEL_CONFIG

    round: int = Field(ge=1)
    bids: dict[str, int] = Field(default_factory=dict)
    tricks: dict[str, int] = Field(default_factory=dict)
    scores: dict[str, int] = Field(default_factory=dict)
    status: RoundStatus = RoundStatus.BIDDING

    @property
    def trick_total(self) -> int:
        return sum(self.tricks.values())


class SpadesGame(BaseModel):
    """Root aggregate: players, rounds, scores and status of one table."""

    model_config = _MODEL_CONFIG

    id: str
    code: str
    host_id: str = ""
    host_name: str = ""
    title: str = ""
    description: str = ""
    created_at: int = 0
    last_activity: int = 0

    status: GameStatus = GameStatus.LOBBY
    current_round: int = Field(default=0, ge=0)
    max_rounds: int = Field(default=DEFAULT_MAX_ROUNDS, ge=1)
    max_players: int = Field(default=DEFAULT_MAX_PLAYERS, ge=1)

    team_config: TeamConfig = Field(default_factory=TeamConfig)
    bidding_style: str = "visible"
    bid_timer: int = DEFAULT_BID_TIMER_SECONDS

    players: dict[str, SpadesPlayer] = Field(default_factory=dict)
    rounds: tuple[SpadesRound, ...] = ()
    scores: dict[str, int] = Field(default_factory=dict)
    round_scores: dict[int, dict[str, int]] = Field(default_factory=dict)

    # optimistic concurrency counter, bumped by the store on every save
    version: int = 0

    @property
    def is_individual(self) -> bool:
        return self.team_config.game_mode == GameMode.INDIVIDUAL

    @property
    def is_auto_game(self) -> bool:
        """Auto games are recognized by the markers the auto-mode shortcut writes."""
        return self.title == AUTO_GAME_TITLE or self.host_name == AUTO_HOST_NAME

    @property
    def active_round(self) -> SpadesRound | None:
        """The round indexed by ``current_round``, or None in the lobby."""
        if self.current_round < 1 or self.current_round > len(self.rounds):
            return None
        return self.rounds[self.current_round - 1]

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys, used for both persistence and responses."""
        return self.model_dump(mode="json", by_alias=True)
