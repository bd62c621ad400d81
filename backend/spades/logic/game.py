"""
Pure builders for creating a table and seating players.

Typing ``auto`` as a name is a testing shortcut: the caller is seated as
"Human Player", computer personas fill the table and the game starts at once.
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from spades.logic.ai_player import COMPUTER_PERSONAS
from spades.logic.enums import GameMode, GameStatus, ValidationCode
from spades.logic.exceptions import InvalidPhaseError, InvalidValueError
from spades.logic.round import begin_play
from spades.logic.state import (
    AUTO_GAME_TITLE,
    AUTO_HOST_NAME,
    DEFAULT_BID_TIMER_SECONDS,
    DEFAULT_MAX_PLAYERS,
    DEFAULT_MAX_ROUNDS,
    SpadesGame,
    SpadesPlayer,
    TeamConfig,
    now_ms,
)
from spades.logic.teams import assign_teams, initial_team_scores, team_name

if TYPE_CHECKING:
    from spades.logic.ai_player import AIPlayer

logger = structlog.get_logger()

GAME_CODE_LENGTH = 4
PLAYER_ID_LENGTH = 9
AUTO_TABLE_SIZE = 4
AUTO_NAME = "auto"

_PLAYER_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_game_code() -> str:
    """Four random uppercase letters; uniqueness is the caller's concern."""
    return "".join(secrets.choice(string.ascii_uppercase) for _ in range(GAME_CODE_LENGTH))


def generate_player_id() -> str:
    return "".join(secrets.choice(_PLAYER_ID_ALPHABET) for _ in range(PLAYER_ID_LENGTH))


def is_auto_name(name: str) -> bool:
    return name.strip().lower() == AUTO_NAME


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidValueError("Player name is required", code=ValidationCode.INVALID_NAME)
    return cleaned


def _default_team(config: TeamConfig, seat: int) -> str | None:
    if config.game_mode != GameMode.TEAMS:
        return None
    return team_name(seat % config.number_of_teams)


def _add_computer_players(
    game: SpadesGame,
    seats: int,
    now: int,
    new_player_id: Callable[[], str],
) -> SpadesGame:
    players = dict(game.players)
    for persona in COMPUTER_PERSONAS[:seats]:
        pid = new_player_id()
        players[pid] = SpadesPlayer(
            id=pid,
            name=persona.name,
            team=_default_team(game.team_config, len(players)),
            is_computer=True,
            personality=persona.personality,
            joined_at=now,
        )
    return game.model_copy(update={"players": assign_teams(players, game.team_config)})


def create_game(
    code: str,
    host_name: str,
    ai: AIPlayer,
    *,
    team_config: TeamConfig | None = None,
    max_rounds: int = DEFAULT_MAX_ROUNDS,
    max_players: int = DEFAULT_MAX_PLAYERS,
    title: str = "",
    description: str = "",
    bidding_style: str = "visible",
    bid_timer: int = DEFAULT_BID_TIMER_SECONDS,
    now: int | None = None,
    new_player_id: Callable[[], str] = generate_player_id,
) -> tuple[SpadesGame, str]:
    """
    Build a lobby game with the host in the first seat.

    Returns the game and the host's player id. An ``auto`` host gets an
    individual-mode table filled with computer personas that is already
    bidding round 1.
    """
    host_name = _clean_name(host_name)
    now = now if now is not None else now_ms()
    auto = is_auto_name(host_name)
    team_config = team_config or TeamConfig()

    if auto:
        team_config = team_config.model_copy(update={"game_mode": GameMode.INDIVIDUAL})
        host_name = AUTO_HOST_NAME
        title = AUTO_GAME_TITLE
        max_players = AUTO_TABLE_SIZE

    host_id = new_player_id()
    host = SpadesPlayer(
        id=host_id,
        name=host_name,
        team=team_name(0) if team_config.game_mode == GameMode.TEAMS else None,
        is_host=True,
        joined_at=now,
    )
    game = SpadesGame(
        id=code,
        code=code,
        host_id=host_id,
        host_name=host_name,
        title=title.strip() or f"{host_name}'s Game",
        description=description.strip(),
        created_at=now,
        last_activity=now,
        max_rounds=max_rounds,
        max_players=max_players,
        team_config=team_config,
        bidding_style=bidding_style,
        bid_timer=bid_timer,
        players=assign_teams({host_id: host}, team_config),
        scores=initial_team_scores(team_config),
    )

    if auto:
        game = _add_computer_players(game, AUTO_TABLE_SIZE - 1, now, new_player_id)
        game = begin_play(game, ai)
        logger.info("auto game created", game_id=code)

    return game, host_id


def add_player(
    game: SpadesGame,
    player_name: str,
    ai: AIPlayer,
    *,
    team: str | None = None,
    now: int | None = None,
    new_player_id: Callable[[], str] = generate_player_id,
) -> tuple[SpadesGame, str]:
    """
    Seat a new player in a lobby game.

    ``team`` is honored only for teams-mode games with manual assignment.
    An ``auto`` joiner fills the table up to four seats with computer
    personas and starts the game once four players are present.

    Raises:
        InvalidPhaseError: If the game has left the lobby or has no free seat
        InvalidValueError: If the name is blank

    """
    player_name = _clean_name(player_name)
    if game.status != GameStatus.LOBBY:
        raise InvalidPhaseError("Game already in progress", code=ValidationCode.GAME_IN_PROGRESS)
    if len(game.players) >= game.max_players:
        raise InvalidPhaseError(
            f"Game is full ({game.max_players} players maximum)",
            code=ValidationCode.GAME_FULL,
            maxPlayers=game.max_players,
        )

    now = now if now is not None else now_ms()
    auto = is_auto_name(player_name)
    config = game.team_config

    seat_team = _default_team(config, len(game.players))
    if seat_team is not None and team and not config.auto_assign_teams:
        seat_team = team

    player_id = new_player_id()
    players = dict(game.players)
    players[player_id] = SpadesPlayer(
        id=player_id,
        name=AUTO_HOST_NAME if auto else player_name,
        team=seat_team,
        joined_at=now,
    )
    new_game = game.model_copy(update={"players": assign_teams(players, config), "last_activity": now})

    if auto:
        open_seats = max(0, AUTO_TABLE_SIZE - len(new_game.players))
        new_game = _add_computer_players(new_game, open_seats, now, new_player_id)
        if len(new_game.players) == AUTO_TABLE_SIZE:
            new_game = begin_play(new_game, ai)

    logger.info("player joined", game_id=game.id, player_id=player_id, auto=auto)
    return new_game, player_id
