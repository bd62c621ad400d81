"""
Team assignment for Spades tables.

Assignment is round-robin by join order and is re-applied to the current
partial roster on every join, so it stays deterministic for a given roster.
"""

from spades.logic.enums import GameMode
from spades.logic.state import SpadesPlayer, TeamConfig


def team_name(index: int) -> str:
    """1-based team identifier, e.g. ``team_name(0) == "team1"``."""
    return f"team{index + 1}"


def assign_teams(players: dict[str, SpadesPlayer], team_config: TeamConfig) -> dict[str, SpadesPlayer]:
    """
    Return players with ``team`` set according to the team configuration.

    Individual mode clears every team. Teams mode with auto-assignment
    distributes players round-robin over ``number_of_teams``; with manual
    assignment players keep whatever team they already chose.
    """
    if team_config.game_mode == GameMode.INDIVIDUAL:
        return {pid: p.model_copy(update={"team": None}) for pid, p in players.items()}

    if not team_config.auto_assign_teams:
        return dict(players)

    return {
        pid: p.model_copy(update={"team": team_name(i % team_config.number_of_teams)})
        for i, (pid, p) in enumerate(players.items())
    }


def initial_team_scores(team_config: TeamConfig) -> dict[str, int]:
    """Zeroed team score table, or empty for individual games."""
    if team_config.game_mode == GameMode.INDIVIDUAL:
        return {}
    return {team_name(i): 0 for i in range(team_config.number_of_teams)}
