"""Tests for name-based login, active-game lookup, resume and profile stats."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from spades.logic.enums import GameMode, GameStatus, PlayerStatus, RoundStatus, ValidationCode
from spades.logic.exceptions import (
    ForbiddenActionError,
    GameNotFoundError,
    InvalidPhaseError,
    InvalidValueError,
    ProfileNotFoundError,
)
from spades.session.identity import winning_player_ids
from spades.tests.conftest import create_game, create_player, create_round, individual_players

if TYPE_CHECKING:
    from shared.db import SqliteProfileRepository, SqliteSessionRepository
    from spades.logic.state import SpadesGame
    from spades.session.identity import PlayerIdentityService
    from spades.session.store import GameStore


class TestLogin:
    async def test_first_login_creates_profile(self, identity: PlayerIdentityService) -> None:
        result = await identity.login("  Alice ")
        assert result.profile.name == "Alice"
        assert result.profile.login_count == 1
        assert len(result.profile.player_id) == 9
        assert result.to_wire()["hasActiveGames"] is False

    async def test_repeat_login_is_case_insensitive(self, identity: PlayerIdentityService) -> None:
        first = await identity.login("Alice")
        second = await identity.login("ALICE")
        assert second.profile.player_id == first.profile.player_id
        assert second.profile.login_count == 2
        assert second.profile.name == "Alice"

    async def test_blank_name(self, identity: PlayerIdentityService) -> None:
        with pytest.raises(InvalidValueError) as exc_info:
            await identity.login("   ")
        assert exc_info.value.code == ValidationCode.INVALID_NAME

    async def test_lists_active_games(self, identity: PlayerIdentityService, store: GameStore) -> None:
        await store.create(create_game(game_id="OLDR").model_copy(update={"last_activity": 100}))
        await store.create(create_game(game_id="NEWR").model_copy(update={"last_activity": 200}))
        await store.create(create_game(game_id="DONE", status=GameStatus.COMPLETED))
        await store.create(create_game([create_player("x", "Zed", is_host=True)], game_id="ELSE"))

        result = await identity.login("alice")
        assert [g.game_id for g in result.active_games] == ["NEWR", "OLDR"]
        assert result.active_games[0].player_id == "p1"
        assert result.active_games[0].player_count == 4
        wire = result.to_wire()
        assert wire["hasActiveGames"] is True
        assert wire["activeGames"][0]["gameCode"] == "NEWR"


class TestResume:
    async def test_marks_player_active(
        self,
        identity: PlayerIdentityService,
        store: GameStore,
        sessions: SqliteSessionRepository,
    ) -> None:
        away = create_player("p2", "Bob", team="team2").model_copy(update={"status": PlayerStatus.INACTIVE})
        game = create_game([create_player("p1", "Alice", team="team1", is_host=True), away])
        await store.create(game)

        result = await identity.resume("bob", "ABCD")
        assert result.player_id == "p2"
        assert result.game.players["p2"].status == PlayerStatus.ACTIVE
        assert result.game.version == 2
        assert (await sessions.get_session("p2")).game_id == "ABCD"

    async def test_not_seated(self, identity: PlayerIdentityService, store: GameStore) -> None:
        await store.create(create_game())
        with pytest.raises(ForbiddenActionError) as exc_info:
            await identity.resume("Zed", "ABCD")
        assert exc_info.value.code == ValidationCode.NOT_IN_GAME

    async def test_completed_game(self, identity: PlayerIdentityService, store: GameStore) -> None:
        await store.create(create_game(status=GameStatus.COMPLETED))
        with pytest.raises(InvalidPhaseError) as exc_info:
            await identity.resume("Alice", "ABCD")
        assert exc_info.value.code == ValidationCode.GAME_COMPLETED

    async def test_missing_game(self, identity: PlayerIdentityService) -> None:
        with pytest.raises(GameNotFoundError):
            await identity.resume("Alice", "NOPE")


class TestGetProfile:
    async def test_missing_profile(self, identity: PlayerIdentityService) -> None:
        with pytest.raises(ProfileNotFoundError) as exc_info:
            await identity.get_profile("Nobody")
        assert exc_info.value.code == ValidationCode.PROFILE_NOT_FOUND

    async def test_profile_view(self, identity: PlayerIdentityService, store: GameStore) -> None:
        await identity.login("Alice")
        await store.create(create_game())
        view = await identity.get_profile("alice")
        wire = view.to_wire()
        assert wire["profile"]["name"] == "Alice"
        assert wire["profile"]["loginCount"] == 1
        assert [g["gameId"] for g in wire["activeGames"]] == ["ABCD"]
        assert wire["recentGames"] == []


def _completed_game(game_id: str, *, alice_tricks: int = 1) -> SpadesGame:
    bids = {"p1": 1, "p2": 0, "p3": 0, "p4": 0}
    tricks = {"p1": alice_tricks, "p2": 1 - alice_tricks, "p3": 0, "p4": 0}
    scores = {pid: 0 for pid in bids}
    scores["p1"] = 10 if alice_tricks else -10
    scores["p2"] = 1 - alice_tricks
    return create_game(
        game_id=game_id,
        status=GameStatus.COMPLETED,
        rounds=[create_round(1, bids=bids, tricks=tricks, scores=scores, status=RoundStatus.COMPLETED)],
        round_scores={1: scores},
        scores={"team1": scores["p1"], "team2": scores["p2"]},
    )


class TestRecordCompletedGame:
    async def test_skips_players_without_profile(
        self,
        identity: PlayerIdentityService,
        profiles: SqliteProfileRepository,
    ) -> None:
        await identity.login("Alice")
        await identity.record_completed_game(_completed_game("GAME"))
        assert await profiles.get_profile("Bob") is None
        alice = await profiles.get_profile("Alice")
        assert alice.stats.games_played == 1

    async def test_recording_is_idempotent(
        self,
        identity: PlayerIdentityService,
        profiles: SqliteProfileRepository,
    ) -> None:
        await identity.login("Alice")
        game = _completed_game("GAME")
        await identity.record_completed_game(game)
        await identity.record_completed_game(game)
        alice = await profiles.get_profile("Alice")
        assert alice.stats.games_played == 1
        assert len(alice.recent_games) == 1

    async def test_history_capped_newest_first(
        self,
        identity: PlayerIdentityService,
        profiles: SqliteProfileRepository,
    ) -> None:
        await identity.login("Alice")
        for game_id in ("GMEA", "GMEB", "GMEC", "GMED"):
            await identity.record_completed_game(_completed_game(game_id))
        alice = await profiles.get_profile("Alice")
        assert [e.game_id for e in alice.recent_games] == ["GMED", "GMEC", "GMEB"]
        assert alice.stats.games_played == 4

    async def test_running_averages(
        self,
        identity: PlayerIdentityService,
        profiles: SqliteProfileRepository,
    ) -> None:
        await identity.login("Alice")
        await identity.record_completed_game(_completed_game("WINS"))
        await identity.record_completed_game(_completed_game("LOSS", alice_tricks=0))
        stats = (await profiles.get_profile("Alice")).stats
        assert (stats.games_won, stats.games_lost) == (1, 1)
        assert stats.win_rate == 50.0
        assert stats.total_score == 0
        assert stats.average_score == 0
        assert stats.best_score == 10
        assert (stats.total_bids, stats.bids_made, stats.bid_accuracy) == (2, 1, 50.0)

    async def test_computers_are_skipped(
        self,
        identity: PlayerIdentityService,
        profiles: SqliteProfileRepository,
    ) -> None:
        await identity.login("Rookie Bot")
        game = create_game(
            [create_player("h", "Host", is_host=True), create_player("c1", "Rookie Bot", is_computer=True)],
            status=GameStatus.COMPLETED,
            game_mode=GameMode.INDIVIDUAL,
        )
        await identity.record_completed_game(game)
        assert (await profiles.get_profile("Rookie Bot")).stats.games_played == 0


class TestWinningPlayers:
    def test_top_team_wins(self) -> None:
        game = create_game(scores={"team1": 40, "team2": 30})
        assert winning_player_ids(game) == {"p1", "p3"}

    def test_team_tie_shares_win(self) -> None:
        game = create_game(scores={"team1": 30, "team2": 30})
        assert winning_player_ids(game) == {"p1", "p2", "p3", "p4"}

    def test_individual_top_total(self) -> None:
        game = create_game(
            individual_players(3),
            game_mode=GameMode.INDIVIDUAL,
            round_scores={1: {"p1": 10, "p2": 20, "p3": 0}, 2: {"p1": 10, "p2": -10, "p3": 5}},
        )
        assert winning_player_ids(game) == {"p1"}
