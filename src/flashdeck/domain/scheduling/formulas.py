"""
Memory-model equations.

This is a pure computation module with no I/O. Every function takes the
ParameterSet explicitly; weights are indexed as in the published algorithm:

    w[0..3]   initial stability for Again/Hard/Good/Easy
    w[4..5]   initial difficulty (base, per-grade slope)
    w[6]      difficulty change per grade
    w[7]      difficulty mean reversion
    w[8..10]  recall stability (scale, stability decay, retrievability gain)
    w[11..14] post-lapse stability
    w[15..16] hard penalty, easy bonus
    w[17..18] short-term (same-day) stability
"""

import math
import random
from datetime import datetime

from flashdeck.domain.constants import (
    DECAY,
    FACTOR,
    FUZZ_MIN_INTERVAL,
    FUZZ_RANGES,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    MIN_STABILITY,
)

from .models import Rating
from .parameters import ParameterSet


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def clamp_difficulty(difficulty: float) -> float:
    return min(max(difficulty, MIN_DIFFICULTY), MAX_DIFFICULTY)


def _floor_stability(stability: float) -> float:
    return max(stability, MIN_STABILITY)


def initial_stability(rating: Rating, params: ParameterSet) -> float:
    return _floor_stability(params.weights[rating - 1])


def initial_difficulty(rating: Rating, params: ParameterSet) -> float:
    w = params.weights
    return clamp_difficulty(w[4] - (rating - 3) * w[5])


def next_difficulty(difficulty: float, rating: Rating, params: ParameterSet) -> float:
    """Shift by grade, then revert toward the initial difficulty of Good."""
    w = params.weights
    shifted = difficulty - w[6] * (rating - 3)
    reverted = w[7] * w[4] + (1 - w[7]) * shifted
    return clamp_difficulty(reverted)


def retrievability(elapsed_days: float, stability: float) -> float:
    """Power-law forgetting curve: R = (1 + t / (9S)) ** -1."""
    if elapsed_days <= 0:
        return 1.0
    return (1 + FACTOR * elapsed_days / stability) ** DECAY


def recall_stability(
    difficulty: float,
    stability: float,
    r: float,
    rating: Rating,
    params: ParameterSet,
) -> float:
    """Stability after a successful long-term review. Grows more when R was low."""
    w = params.weights
    hard_penalty = w[15] if rating == Rating.HARD else 1.0
    easy_bonus = w[16] if rating == Rating.EASY else 1.0
    growth = (
        math.exp(w[8])
        * (11 - difficulty)
        * stability ** (-w[9])
        * (math.exp(w[10] * (1 - r)) - 1)
        * hard_penalty
        * easy_bonus
    )
    return _floor_stability(stability * (1 + growth))


def forget_stability(
    difficulty: float, stability: float, r: float, params: ParameterSet
) -> float:
    """Post-lapse stability. Never larger than the stability before the lapse."""
    w = params.weights
    lapsed = (
        w[11]
        * difficulty ** (-w[12])
        * ((stability + 1) ** w[13] - 1)
        * math.exp(w[14] * (1 - r))
    )
    return _floor_stability(min(lapsed, stability))


def short_term_stability(stability: float, rating: Rating, params: ParameterSet) -> float:
    """Stability after a same-day review."""
    w = params.weights
    return _floor_stability(stability * math.exp(w[17] * (rating - 3 + w[18])))


def next_interval(stability: float, params: ParameterSet) -> int:
    """Whole days until R decays to the desired retention, bounded to [1, maximum]."""
    raw = stability / FACTOR * (params.desired_retention ** (1 / DECAY) - 1)
    return min(max(round_half_up(raw), 1), params.maximum_interval)


def fuzz_interval(
    interval: int,
    elapsed_days: int,
    params: ParameterSet,
    seed: str,
) -> int:
    """
    Spread long intervals over a small window so cards added together drift apart.

    Deterministic: the same seed always yields the same interval.
    """
    if interval < FUZZ_MIN_INTERVAL:
        return interval

    delta = 1.0
    for start, end, factor in FUZZ_RANGES:
        delta += factor * max(min(interval, end) - start, 0.0)

    min_ivl = max(2, round_half_up(interval - delta))
    max_ivl = min(round_half_up(interval + delta), params.maximum_interval)
    if interval > elapsed_days:
        min_ivl = max(min_ivl, elapsed_days + 1)
    min_ivl = min(min_ivl, max_ivl)

    rng = random.Random(seed)
    return rng.randint(min_ivl, max_ivl)


def fuzz_seed(now: datetime, reps: int, difficulty: float, stability: float) -> str:
    return f"{now.timestamp()}_{reps}_{difficulty * stability:.6f}"
