"""
AI player decision making for Spades.

Computer players never see cards; they pick a bid and later report a trick
count drawn from personality-shaped distributions. The engine only keeps
its own output consistent with the personality; the caller owns the round's
trick budget.
"""

from __future__ import annotations

import random
from typing import NamedTuple

from spades.logic.enums import Personality


class ComputerPersona(NamedTuple):
    name: str
    personality: Personality


# seat order used when auto mode fills a table
COMPUTER_PERSONAS: tuple[ComputerPersona, ...] = (
    ComputerPersona("Rookie Bot", Personality.CONSERVATIVE),
    ComputerPersona("Strategic Sam", Personality.SMART),
    ComputerPersona("Aggressive Alice", Personality.AGGRESSIVE),
)


class AIPlayer:
    """
    Personality-driven bid and trick generator.

    All randomness flows through the injected ``random.Random`` so tests can
    seed it or substitute a scripted source; only ``rng.random()`` is used.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()  # noqa: S311

    def _draw(self, count: int, offset: int = 0) -> int:
        """Uniform integer in ``[offset, offset + count)``."""
        return int(self._rng.random() * count) + offset

    def _chance(self, probability: float) -> bool:
        return self._rng.random() < probability

    def decide_bid(self, personality: Personality | None, round_number: int) -> int:
        """Choose a bid; never exceeds the number of tricks in the round."""
        if personality == Personality.CONSERVATIVE:
            bid = self._draw(4, 1)
            if round_number <= 3 and self._chance(0.2):
                bid = 0
        elif personality == Personality.SMART:
            bid = self._draw(6, 1)
            if round_number <= 2 and self._chance(0.15):
                bid = 0
        elif personality == Personality.AGGRESSIVE:
            bid = self._draw(8, 2)
            if self._chance(0.1):
                bid = 0
        else:
            bid = self._draw(4, 1)

        return min(bid, round_number)

    def decide_tricks(self, personality: Personality | None, bid: int) -> int:
        """
        Suggest a trick count for a finished round.

        Conservative players land at or around their bid, smart players at or
        just under it, aggressive players tend over. The suggestion is capped
        at the bid itself, so a nil bidder always suggests zero.
        """
        if personality == Personality.CONSERVATIVE:
            if bid == 0:
                tricks = 0 if self._chance(0.7) else self._draw(2, 1)
            else:
                tricks = bid + self._draw(3, -1)
        elif personality == Personality.SMART:
            if bid == 0:
                tricks = 0 if self._chance(0.8) else self._draw(2, 1)
            else:
                tricks = bid + self._draw(2, -1)
        elif personality == Personality.AGGRESSIVE:
            if bid == 0:
                tricks = 0 if self._chance(0.6) else self._draw(3, 1)
            else:
                tricks = bid + self._draw(4, -1)
        else:
            tricks = self._draw(8)

        return min(max(0, tricks), bid)
