from __future__ import annotations

import random
from typing import TYPE_CHECKING

import pytest

from shared.db import Database, SqliteGameRepository, SqliteProfileRepository, SqliteSessionRepository
from spades.logic.ai_player import AIPlayer
from spades.logic.enums import GameMode, GameStatus, Personality, RoundStatus
from spades.logic.state import SpadesGame, SpadesPlayer, SpadesRound, TeamConfig
from spades.session.admin import AdminService
from spades.session.identity import PlayerIdentityService
from spades.session.manager import SpadesGameService
from spades.session.store import GameStore

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


# ============================================================================
# Test State Builder Helpers
# ============================================================================


class ScriptedRandom(random.Random):
    """Random source replaying a fixed sequence of ``random()`` values, cycling when exhausted."""

    def __init__(self, values: Sequence[float]) -> None:
        super().__init__(0)
        self._values = list(values)
        self._index = 0

    def random(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


def scripted_ai(*values: float) -> AIPlayer:
    return AIPlayer(ScriptedRandom(values or (0.5,)))


def create_player(
    player_id: str,
    name: str | None = None,
    *,
    team: str | None = None,
    is_host: bool = False,
    is_computer: bool = False,
    personality: Personality | None = None,
) -> SpadesPlayer:
    return SpadesPlayer(
        id=player_id,
        name=name or player_id.capitalize(),
        team=team,
        is_host=is_host,
        is_computer=is_computer,
        personality=personality,
    )


def create_round(
    round_number: int = 1,
    *,
    bids: dict[str, int] | None = None,
    tricks: dict[str, int] | None = None,
    scores: dict[str, int] | None = None,
    status: RoundStatus = RoundStatus.BIDDING,
) -> SpadesRound:
    return SpadesRound(
        round=round_number,
        bids=bids or {},
        tricks=tricks or {},
        scores=scores or {},
        status=status,
    )


def create_game(
    players: Sequence[SpadesPlayer] | None = None,
    *,
    game_id: str = "ABCD",
    status: GameStatus = GameStatus.LOBBY,
    rounds: Sequence[SpadesRound] = (),
    current_round: int | None = None,
    max_rounds: int = 13,
    max_players: int = 4,
    game_mode: GameMode = GameMode.TEAMS,
    auto_assign_teams: bool = True,
    scores: dict[str, int] | None = None,
    round_scores: dict[int, dict[str, int]] | None = None,
    title: str = "Test Game",
) -> SpadesGame:
    """
    Build a game directly, bypassing create/join.

    Default roster is a four-seat teams table: host ``p1`` and ``p3`` on team1,
    ``p2`` and ``p4`` on team2.
    """
    if players is None:
        players = [
            create_player("p1", "Alice", team="team1", is_host=True),
            create_player("p2", "Bob", team="team2"),
            create_player("p3", "Carol", team="team1"),
            create_player("p4", "Dave", team="team2"),
        ]
    host = next((p for p in players if p.is_host), None)
    if scores is None:
        scores = {} if game_mode == GameMode.INDIVIDUAL else {"team1": 0, "team2": 0}
    return SpadesGame(
        id=game_id,
        code=game_id,
        host_id=host.id if host else "",
        host_name=host.name if host else "",
        title=title,
        status=status,
        current_round=len(rounds) if current_round is None else current_round,
        max_rounds=max_rounds,
        max_players=max_players,
        team_config=TeamConfig(game_mode=game_mode, auto_assign_teams=auto_assign_teams),
        players={p.id: p for p in players},
        rounds=tuple(rounds),
        scores=scores,
        round_scores=round_scores or {},
    )


def individual_players(count: int = 3) -> list[SpadesPlayer]:
    """Host ``p1`` plus ``count - 1`` humans, no teams."""
    return [create_player(f"p{i + 1}", is_host=i == 0) for i in range(count)]


# ============================================================================
# Storage Fixtures
# ============================================================================


@pytest.fixture
def db() -> Iterator[Database]:
    database = Database(":memory:")
    database.connect()
    yield database
    database.close()


@pytest.fixture
def sessions(db: Database) -> SqliteSessionRepository:
    return SqliteSessionRepository(db)


@pytest.fixture
def profiles(db: Database) -> SqliteProfileRepository:
    return SqliteProfileRepository(db)


@pytest.fixture
def store(db: Database, sessions: SqliteSessionRepository) -> GameStore:
    return GameStore(SqliteGameRepository(db), sessions)


@pytest.fixture
def identity(store: GameStore, profiles: SqliteProfileRepository) -> PlayerIdentityService:
    return PlayerIdentityService(store, profiles, history_limit=3)


@pytest.fixture
def service(store: GameStore, identity: PlayerIdentityService) -> SpadesGameService:
    return SpadesGameService(store, identity, scripted_ai(0.5))


@pytest.fixture
def admin(store: GameStore, sessions: SqliteSessionRepository) -> AdminService:
    return AdminService(store, sessions, online_window_seconds=60)
