"""Tests for SqliteGameRepository."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from shared.dal.game_repository import StaleWriteError
from shared.db.connection import Database
from shared.db.game_repository import SqliteGameRepository

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def repo(tmp_path: Path):
    db = Database(tmp_path / "spades.db")
    db.connect()
    yield SqliteGameRepository(db)
    db.close()


class TestCreateAndGet:
    async def test_create_sets_version_one(self, repo: SqliteGameRepository) -> None:
        assert await repo.create_game("ABCD", {"id": "ABCD", "status": "lobby", "version": 7})

        result = await repo.get_game("ABCD")
        assert result == {"id": "ABCD", "status": "lobby", "version": 1}

    async def test_get_returns_none_for_unknown(self, repo: SqliteGameRepository) -> None:
        assert await repo.get_game("NOPE") is None

    async def test_duplicate_create_returns_false(self, repo: SqliteGameRepository) -> None:
        await repo.create_game("ABCD", {"id": "ABCD", "title": "First"})
        assert not await repo.create_game("ABCD", {"id": "ABCD", "title": "Second"})

        result = await repo.get_game("ABCD")
        assert result is not None
        assert result["title"] == "First"


class TestSaveGame:
    async def test_save_bumps_version(self, repo: SqliteGameRepository) -> None:
        await repo.create_game("ABCD", {"id": "ABCD"})
        assert await repo.save_game("ABCD", {"id": "ABCD", "status": "bidding"}, expected_version=1) == 2

        result = await repo.get_game("ABCD")
        assert result == {"id": "ABCD", "status": "bidding", "version": 2}

    async def test_stale_version_rejected(self, repo: SqliteGameRepository) -> None:
        await repo.create_game("ABCD", {"id": "ABCD"})
        await repo.save_game("ABCD", {"id": "ABCD", "title": "Winner"}, expected_version=1)

        with pytest.raises(StaleWriteError) as exc_info:
            await repo.save_game("ABCD", {"id": "ABCD", "title": "Loser"}, expected_version=1)
        assert exc_info.value.expected_version == 1
        result = await repo.get_game("ABCD")
        assert result is not None
        assert result["title"] == "Winner"

    async def test_missing_game_is_stale(self, repo: SqliteGameRepository) -> None:
        with pytest.raises(StaleWriteError):
            await repo.save_game("NOPE", {"id": "NOPE"}, expected_version=1)


class TestListAndDelete:
    async def test_list_most_recent_first(self, repo: SqliteGameRepository) -> None:
        await repo.create_game("OLDR", {"id": "OLDR", "lastActivity": 100})
        await repo.create_game("NEWR", {"id": "NEWR", "lastActivity": 900})
        await repo.create_game("IDLE", {"id": "IDLE"})

        assert [g["id"] for g in await repo.list_games()] == ["NEWR", "OLDR", "IDLE"]
        assert await repo.count_games() == 3

    async def test_delete(self, repo: SqliteGameRepository) -> None:
        await repo.create_game("ABCD", {"id": "ABCD"})
        assert await repo.delete_game("ABCD")
        assert not await repo.delete_game("ABCD")
        assert await repo.count_games() == 0
