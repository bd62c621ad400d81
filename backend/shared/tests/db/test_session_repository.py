"""Tests for SqliteSessionRepository."""

from __future__ import annotations

import pytest

from shared.dal.models import PlayerSession
from shared.db.connection import Database
from shared.db.session_repository import SqliteSessionRepository


@pytest.fixture
def repo():
    db = Database(":memory:")
    db.connect()
    yield SqliteSessionRepository(db)
    db.close()


class TestSessionRepository:
    async def test_save_and_get(self, repo: SqliteSessionRepository) -> None:
        await repo.save_session(PlayerSession(player_id="p1", game_id="ABCD", name="Alice"))

        result = await repo.get_session("p1")
        assert result == PlayerSession(player_id="p1", game_id="ABCD", name="Alice")

    async def test_save_replaces(self, repo: SqliteSessionRepository) -> None:
        await repo.save_session(PlayerSession(player_id="p1"))
        await repo.save_session(PlayerSession(player_id="p1", is_online=False))

        sessions = await repo.list_sessions()
        assert len(sessions) == 1
        assert not sessions[0].is_online

    async def test_delete(self, repo: SqliteSessionRepository) -> None:
        await repo.save_session(PlayerSession(player_id="p1"))
        assert await repo.delete_session("p1")
        assert not await repo.delete_session("p1")
        assert await repo.get_session("p1") is None

    async def test_list_sorted_by_id(self, repo: SqliteSessionRepository) -> None:
        for player_id in ("p2", "p1"):
            await repo.save_session(PlayerSession(player_id=player_id))

        assert [s.player_id for s in await repo.list_sessions()] == ["p1", "p2"]
