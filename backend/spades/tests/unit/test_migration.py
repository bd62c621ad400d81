"""Tests for upgrading game records written by older server versions."""

from spades.logic.enums import GameMode, GameStatus, RoundStatus
from spades.logic.migration import (
    backfill_round_scores,
    convert_auto_game_to_individual,
    migrate_game,
    repair_legacy_document,
)
from spades.logic.state import AUTO_GAME_TITLE, AUTO_HOST_NAME, SpadesGame
from spades.tests.conftest import create_game, create_round


class TestBackfillRoundScores:
    def test_copies_completed_round_scores(self) -> None:
        game = create_game(
            status=GameStatus.SCORING,
            rounds=[
                create_round(1, scores={"p1": 10}, status=RoundStatus.COMPLETED),
                create_round(2, scores={"p1": 20}, status=RoundStatus.COMPLETED),
            ],
            round_scores={1: {"p1": 10}},
        )
        assert backfill_round_scores(game).round_scores == {1: {"p1": 10}, 2: {"p1": 20}}

    def test_existing_entries_win(self) -> None:
        game = create_game(
            rounds=[create_round(1, scores={"p1": 10}, status=RoundStatus.COMPLETED)],
            round_scores={1: {"p1": 99}},
        )
        assert backfill_round_scores(game) is game

    def test_incomplete_rounds_ignored(self) -> None:
        game = create_game(rounds=[create_round(1, scores={"p1": 10}, status=RoundStatus.REVIEW)])
        assert backfill_round_scores(game) is game


class TestConvertAutoGame:
    def test_auto_title_converted(self) -> None:
        game = create_game(title=AUTO_GAME_TITLE, scores={"team1": 30, "team2": 0})
        converted = convert_auto_game_to_individual(game)
        assert converted.team_config.game_mode == GameMode.INDIVIDUAL
        assert converted.scores == {}
        assert all(p.team is None for p in converted.players.values())

    def test_auto_host_name_converted(self) -> None:
        game = create_game().model_copy(update={"host_name": AUTO_HOST_NAME})
        assert convert_auto_game_to_individual(game).is_individual

    def test_regular_teams_game_untouched(self) -> None:
        game = create_game()
        assert convert_auto_game_to_individual(game) is game


class TestMigrateGame:
    def test_reports_change(self) -> None:
        game = create_game(title=AUTO_GAME_TITLE)
        migrated, changed = migrate_game(game)
        assert changed
        assert migrated.is_individual

    def test_idempotent(self) -> None:
        game = create_game(
            title=AUTO_GAME_TITLE,
            rounds=[create_round(1, scores={"p1": 10}, status=RoundStatus.COMPLETED)],
        )
        once, _ = migrate_game(game)
        twice, changed = migrate_game(once)
        assert not changed
        assert twice == once

    def test_current_record_unchanged(self) -> None:
        game = create_game()
        migrated, changed = migrate_game(game)
        assert migrated is game
        assert not changed


class TestRepairLegacyDocument:
    def test_null_team_score_in_individual_game(self) -> None:
        document = {"id": "LEGA", "teamConfig": {"gameMode": "individual"}, "scores": {"null": None}}
        assert repair_legacy_document(document)["scores"] == {}
        assert document["scores"] == {"null": None}

    def test_individual_game_drops_any_team_scores(self) -> None:
        document = {"teamConfig": {"gameMode": "individual"}, "scores": {"team1": 30}}
        assert repair_legacy_document(document)["scores"] == {}

    def test_teamless_entries_dropped_from_team_scores(self) -> None:
        document = {"teamConfig": {"gameMode": "teams"}, "scores": {"team1": 30, "team2": -10, "null": 0}}
        assert repair_legacy_document(document)["scores"] == {"team1": 30, "team2": -10}

    def test_null_round_scores_cleared(self) -> None:
        rounds = [{"round": 1, "scores": {"p1": 10, "p2": None}}, {"round": 2, "scores": None}]
        repaired = repair_legacy_document({"rounds": rounds})
        assert repaired["rounds"] == [{"round": 1, "scores": {"p1": 10}}, {"round": 2, "scores": {}}]

    def test_valid_document_returned_as_is(self) -> None:
        document = create_game(status=GameStatus.SCORING, scores={"team1": 10, "team2": 0}).to_wire()
        assert repair_legacy_document(document) is document

    def test_repaired_document_validates(self) -> None:
        document = {
            "id": "LEGA",
            "code": "LEGA",
            "teamConfig": {"gameMode": "individual"},
            "rounds": [{"round": 1, "scores": {"p1": 10, "null": None}, "status": "completed"}],
            "scores": {"null": None},
        }
        game, changed = migrate_game(SpadesGame.model_validate(repair_legacy_document(document)))
        assert game.scores == {}
        assert game.round_scores == {1: {"p1": 10}}
        assert changed
