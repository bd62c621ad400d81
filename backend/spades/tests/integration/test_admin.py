"""Tests for admin listings, bulk deletes and the presence heartbeat."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shared.dal.models import PlayerSession
from spades.logic.state import now_ms
from spades.tests.conftest import create_game

if TYPE_CHECKING:
    from shared.db import SqliteSessionRepository
    from spades.session.admin import AdminService
    from spades.session.store import GameStore


class TestListGames:
    async def test_summaries(self, admin: AdminService, store: GameStore) -> None:
        await store.create(create_game(title="").model_copy(update={"created_at": 50}))
        [summary] = await admin.list_games()
        assert summary.id == "ABCD"
        assert summary.title == "Untitled Game"
        assert summary.host == "Alice"
        assert summary.players == 4
        assert summary.status == "lobby"
        assert summary.last_activity == 50
        assert summary.model_dump(by_alias=True)["createdAt"] == 50


class TestDeleteGames:
    async def test_deletes_games_and_sessions(
        self,
        admin: AdminService,
        store: GameStore,
        sessions: SqliteSessionRepository,
    ) -> None:
        game = await store.create(create_game())
        await store.register_sessions(game, ["p1", "p2"])

        report = await admin.delete_games(["ABCD", "NOPE"])
        assert report.deleted == ["ABCD"]
        assert report.failed == ["NOPE"]
        assert await store.count() == 0
        assert await sessions.list_sessions() == []


class TestPlayers:
    async def test_online_window(self, admin: AdminService, sessions: SqliteSessionRepository) -> None:
        now = now_ms()
        await sessions.save_session(PlayerSession(player_id="fresh", last_seen=now, is_online=True))
        await sessions.save_session(PlayerSession(player_id="stale", last_seen=now - 120_000, is_online=True))
        await sessions.save_session(PlayerSession(player_id="gone", last_seen=now, is_online=False))

        online = {p.id: p.is_online for p in await admin.list_players()}
        assert online == {"fresh": True, "stale": False, "gone": False}

    async def test_delete_players(self, admin: AdminService, sessions: SqliteSessionRepository) -> None:
        await sessions.save_session(PlayerSession(player_id="a1"))
        report = await admin.delete_players(["a1", "zz"])
        assert (report.deleted, report.failed) == (["a1"], ["zz"])

    async def test_touch_creates_guest(self, admin: AdminService) -> None:
        session = await admin.touch_player("newbie")
        assert session.name == "Guest Player"
        assert session.is_online
        assert session.last_seen > 0

    async def test_touch_updates_existing(self, admin: AdminService, sessions: SqliteSessionRepository) -> None:
        await sessions.save_session(PlayerSession(player_id="p1", game_id="ABCD", name="Alice"))
        await admin.touch_player("p1", is_online=False, last_seen=1234)
        session = await sessions.get_session("p1")
        assert (session.name, session.game_id, session.is_online, session.last_seen) == ("Alice", "ABCD", False, 1234)
