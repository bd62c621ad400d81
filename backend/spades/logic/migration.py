"""
Upgrade records written by older server versions.

``repair_legacy_document`` fixes raw stored shapes before validation.
``migrate_game`` is pure and idempotent; the store applies it on every load
and after every action, and persists the result when anything changed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from spades.logic.enums import GameMode, RoundStatus

if TYPE_CHECKING:
    from spades.logic.state import SpadesGame


def backfill_round_scores(game: SpadesGame) -> SpadesGame:
    """Copy scores of completed rounds that have no ``roundScores`` entry yet."""
    missing = {
        index + 1: dict(round_state.scores)
        for index, round_state in enumerate(game.rounds)
        if round_state.status == RoundStatus.COMPLETED
        and round_state.scores
        and (index + 1) not in game.round_scores
    }
    if not missing:
        return game
    return game.model_copy(update={"round_scores": {**game.round_scores, **missing}})


def convert_auto_game_to_individual(game: SpadesGame) -> SpadesGame:
    """Auto games were once created in teams mode; they are individual now."""
    if not game.is_auto_game or game.team_config.game_mode != GameMode.TEAMS:
        return game
    return game.model_copy(
        update={
            "team_config": game.team_config.model_copy(update={"game_mode": GameMode.INDIVIDUAL}),
            "players": {pid: p.model_copy(update={"team": None}) for pid, p in game.players.items()},
            "scores": {},
        }
    )


def migrate_game(game: SpadesGame) -> tuple[SpadesGame, bool]:
    """Apply every migration; returns the game and whether anything changed."""
    migrated = convert_auto_game_to_individual(backfill_round_scores(game))
    return migrated, migrated is not game


def _clean_score_map(scores: object) -> dict[str, int] | None:
    """Integer entries of a stored score map, or None when nothing had to be dropped."""
    if not isinstance(scores, dict):
        return {}
    kept = {
        key: value
        for key, value in scores.items()
        if key != "null" and isinstance(value, int) and not isinstance(value, bool)
    }
    return None if len(kept) == len(scores) else kept


def repair_legacy_document(document: dict[str, Any]) -> dict[str, Any]:
    """
    Fix stored shapes that older servers wrote and ``SpadesGame`` rejects.

    Individual games were saved with a ``{"null": null}`` team score map, and
    some team maps picked up entries for players without a team. Those
    entries are dropped from the game and round score maps. Works on the raw
    document before validation and returns it unchanged (the same object)
    when nothing needed fixing.
    """
    update: dict[str, Any] = {}
    team_config = document.get("teamConfig")
    individual = isinstance(team_config, dict) and team_config.get("gameMode") == GameMode.INDIVIDUAL
    if "scores" in document:
        cleaned = {} if individual and document["scores"] else _clean_score_map(document["scores"])
        if cleaned is not None:
            update["scores"] = cleaned

    rounds = document.get("rounds")
    if isinstance(rounds, list):
        repaired = []
        for round_document in rounds:
            cleaned = None
            if isinstance(round_document, dict) and "scores" in round_document:
                cleaned = _clean_score_map(round_document["scores"])
            repaired.append(round_document if cleaned is None else {**round_document, "scores": cleaned})
        if any(new is not old for new, old in zip(repaired, rounds, strict=True)):
            update["rounds"] = repaired

    if not update:
        return document
    return {**document, **update}
