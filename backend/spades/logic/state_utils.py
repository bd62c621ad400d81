"""
Immutable state update utilities using Pydantic model_copy.

These helpers never mutate their input; they return new game values with the
requested changes applied.
"""

from spades.logic.state import SpadesGame, SpadesPlayer, SpadesRound

_PLAYER_FIELDS = set(SpadesPlayer.model_fields)


def update_player(game: SpadesGame, player_id: str, **updates: object) -> SpadesGame:
    """
    Return new game with the player's fields replaced.

    Raises:
        ValueError: If the player is unknown or update fields are invalid

    """
    if player_id not in game.players:
        raise ValueError(f"Unknown player {player_id!r}")
    invalid_fields = set(updates) - _PLAYER_FIELDS
    if invalid_fields:
        raise ValueError(f"Invalid player fields: {invalid_fields}")
    players = dict(game.players)
    players[player_id] = game.players[player_id].model_copy(update=updates)
    return game.model_copy(update={"players": players})


def replace_active_round(game: SpadesGame, round_state: SpadesRound) -> SpadesGame:
    """Return new game with the round at ``current_round`` swapped for ``round_state``."""
    index = game.current_round - 1
    if not (0 <= index < len(game.rounds)):
        raise ValueError(f"Game {game.id} has no round {game.current_round}")
    rounds = list(game.rounds)
    rounds[index] = round_state
    return game.model_copy(update={"rounds": tuple(rounds)})


def with_bid(round_state: SpadesRound, player_id: str, bid: int) -> SpadesRound:
    return round_state.model_copy(update={"bids": {**round_state.bids, player_id: bid}})


def with_tricks(round_state: SpadesRound, player_id: str, tricks: int) -> SpadesRound:
    return round_state.model_copy(update={"tricks": {**round_state.tricks, player_id: tricks}})


def without_player_entries(round_state: SpadesRound, player_id: str) -> SpadesRound:
    """Drop a departed player's bid and tricks so round totals only count seated players."""
    if player_id not in round_state.bids and player_id not in round_state.tricks:
        return round_state
    return round_state.model_copy(
        update={
            "bids": {pid: v for pid, v in round_state.bids.items() if pid != player_id},
            "tricks": {pid: v for pid, v in round_state.tricks.items() if pid != player_id},
        }
    )


def all_players_bid(game: SpadesGame, round_state: SpadesRound) -> bool:
    return all(pid in round_state.bids for pid in game.players)


def all_players_reported_tricks(game: SpadesGame, round_state: SpadesRound) -> bool:
    return all(pid in round_state.tricks for pid in game.players)
