"""Tests for DAL persistence models."""

from shared.dal.models import PlayerProfile, PlayerSession


class TestPlayerProfile:
    def test_name_key_is_lowercased(self):
        profile = PlayerProfile(player_id="abc123xyz", name=" Alice ")
        assert profile.name_key == "alice"

    def test_loads_legacy_camel_case_document(self):
        profile = PlayerProfile.model_validate(
            {
                "playerId": "abc123xyz",
                "name": "Alice",
                "loginCount": 4,
                "stats": {"gamesPlayed": 2, "bidAccuracy": 75.0},
                "recentGames": [{"gameId": "ABCD", "finalScore": 120, "won": True}],
                "unknownField": "ignored",
            },
        )
        assert profile.login_count == 4
        assert profile.stats.games_played == 2
        assert profile.stats.bid_accuracy == 75.0
        assert profile.recent_games[0].final_score == 120

    def test_dumps_camel_case(self):
        dumped = PlayerProfile(player_id="abc123xyz", name="Alice").model_dump(by_alias=True)
        assert dumped["playerId"] == "abc123xyz"
        assert dumped["stats"]["gamesPlayed"] == 0
        assert dumped["preferences"]["preferredGameMode"] == "teams"


class TestPlayerSession:
    def test_accepts_legacy_id_key(self):
        session = PlayerSession.model_validate({"id": "p1", "gameId": "ABCD"})
        assert session.player_id == "p1"
        assert session.game_id == "ABCD"

    def test_accepts_player_id_key(self):
        assert PlayerSession.model_validate({"playerId": "p1"}).player_id == "p1"

    def test_defaults(self):
        session = PlayerSession(player_id="p1")
        assert session.name == "Guest Player"
        assert session.game_id is None
        assert session.is_online

    def test_serializes_player_id_alias(self):
        assert PlayerSession(player_id="p1").model_dump(by_alias=True)["playerId"] == "p1"
