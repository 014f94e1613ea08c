from __future__ import annotations

import math
from dataclasses import dataclass

# Ratings are damage percentages. A rating gap of STOCK_VALUE is worth one stock.
STOCK_VALUE = 150
# Ratings further apart than this cannot be updated from a match.
MAX_DELTA = 300
# Total rating exchanged in an evenly rated match.
K_FACTOR = 10.0
# Logistic scale of the expected-score curve.
LOGISTIC_SCALE = 200.0


class RatingsTooFarApart(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class MatchResult:
    winner_before: int
    winner_after: int
    loser_before: int
    loser_after: int


def handicap(rating_a: int, rating_b: int) -> tuple[int, int]:
    """(stocks, extra percent) the stronger player starts with."""
    diff = abs(int(rating_a) - int(rating_b))
    return diff // STOCK_VALUE, diff % STOCK_VALUE


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def expected_score(winner: int, loser: int) -> float:
    return 1.0 / (1.0 + 10.0 ** ((float(loser) - float(winner)) / LOGISTIC_SCALE))


def apply_match(winner: int, loser: int) -> MatchResult:
    if abs(int(winner) - int(loser)) > MAX_DELTA:
        raise RatingsTooFarApart(f"rating gap {abs(int(winner) - int(loser))}% exceeds {MAX_DELTA}%")
    change = K_FACTOR * (1.0 - expected_score(winner, loser))
    return MatchResult(
        winner_before=int(winner),
        winner_after=max(0, _round_half_up(winner + change)),
        loser_before=int(loser),
        loser_after=max(0, _round_half_up(loser - change)),
    )
