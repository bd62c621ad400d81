"""
Round scoring for the house-rule Spades variant.

A failed contract is penalized symmetrically (``10 * won - 10 * shortfall``),
not with the traditional ``-10 * bid``.
"""

POINTS_PER_BID_TRICK = 10
POINTS_PER_BAG = 1


def calculate_score(bid: int, tricks_won: int) -> int:
    """
    Score one player's round.

    - nil bid (0): one point per trick won, so zero when nil is made
    - exact: 10 per bid trick
    - over: 10 per bid trick plus 1 per bag
    - under: 10 per trick won minus 10 per missing trick
    """
    if bid == 0:
        return tricks_won * POINTS_PER_BAG

    if tricks_won == bid:
        return bid * POINTS_PER_BID_TRICK

    if tricks_won > bid:
        return bid * POINTS_PER_BID_TRICK + (tricks_won - bid) * POINTS_PER_BAG

    return tricks_won * POINTS_PER_BID_TRICK - (bid - tricks_won) * POINTS_PER_BID_TRICK


def score_round(bids: dict[str, int], tricks: dict[str, int], player_ids: list[str]) -> dict[str, int]:
    """Score every listed player; a missing bid or trick count counts as 0."""
    return {pid: calculate_score(bids.get(pid, 0), tricks.get(pid, 0)) for pid in player_ids}


def player_totals(round_scores: dict[int, dict[str, int]]) -> dict[str, int]:
    """Cumulative per-player totals derived from the per-round score record."""
    totals: dict[str, int] = {}
    for round_number in sorted(round_scores):
        for pid, delta in round_scores[round_number].items():
            totals[pid] = totals.get(pid, 0) + delta
    return totals
