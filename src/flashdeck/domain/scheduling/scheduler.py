"""
Scheduler: rating-conditioned state transitions and interval derivation.

Both public operations are pure. `project` computes the candidate outcome for every
rating; `commit` parses a rating and returns the matching candidate, so a preview
and the committed result can never disagree. Neither reads the clock: the reference
instant is always passed in.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from . import formulas
from .models import LEARNING_PHASES, MemoryState, Rating, State
from .parameters import DEFAULT_PARAMETERS, ParameterSet

SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class Outcome:
    """Candidate result of committing one rating."""

    rating: Rating
    memory: MemoryState
    interval: str  # Human-readable label, e.g. "10m", "3d"


def project(
    state: MemoryState,
    now: datetime,
    params: ParameterSet = DEFAULT_PARAMETERS,
) -> dict[Rating, Outcome]:
    """
    Compute, without committing anything, what each rating would produce.

    Returns:
        Mapping ordered Again, Hard, Good, Easy.
    """
    candidates = {rating: _step(state, rating, now, params) for rating in Rating}

    if state.state == State.REVIEW:
        candidates = _order_review_intervals(candidates, now, params)

    return {
        rating: Outcome(
            rating=rating,
            memory=memory,
            interval=format_interval(memory.due, now),
        )
        for rating, memory in candidates.items()
    }


def commit(
    state: MemoryState,
    rating: object,
    now: datetime,
    params: ParameterSet = DEFAULT_PARAMETERS,
) -> MemoryState:
    """Apply one rating. Raises InvalidRating if it is not Again/Hard/Good/Easy."""
    parsed = Rating.parse(rating)
    return project(state, now, params)[parsed].memory


def format_interval(due: datetime, now: datetime) -> str:
    """Label the gap between now and due with its largest sensible unit."""
    seconds = (due - now).total_seconds()
    minutes = formulas.round_half_up(seconds / 60)
    hours = formulas.round_half_up(seconds / 3600)
    days = formulas.round_half_up(seconds / SECONDS_PER_DAY)

    if minutes < 60:
        return f"{minutes}m"
    if hours < 24:
        return f"{hours}h"
    if days < 30:
        return f"{days}d"
    months = formulas.round_half_up(days / 30)
    if months < 12:
        return f"{months}mo"
    return f"{formulas.round_half_up(days / 365)}y"


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------


def _elapsed(state: MemoryState, now: datetime) -> float:
    if state.last_review is None:
        return 0.0
    return max((now - state.last_review).total_seconds() / SECONDS_PER_DAY, 0.0)


def _step(
    state: MemoryState,
    rating: Rating,
    now: datetime,
    params: ParameterSet,
) -> MemoryState:
    elapsed = _elapsed(state, now)
    elapsed_days = math.floor(elapsed)
    lapses = state.lapses + (1 if rating == Rating.AGAIN else 0)

    if state.state == State.NEW:
        stability = formulas.initial_stability(rating, params)
        difficulty = formulas.initial_difficulty(rating, params)
        phase, step, delay = _ladder(State.LEARNING, 0, rating, params.learning_steps)

    elif state.state in LEARNING_PHASES:
        difficulty = formulas.next_difficulty(state.difficulty, rating, params)
        if elapsed < 1:
            stability = formulas.short_term_stability(state.stability, rating, params)
        else:
            stability = _long_term_stability(state, rating, elapsed, params)
        steps = (
            params.learning_steps if state.state == State.LEARNING else params.relearning_steps
        )
        phase, step, delay = _ladder(state.state, state.learning_step, rating, steps)

    else:
        difficulty = formulas.next_difficulty(state.difficulty, rating, params)
        if rating == Rating.AGAIN:
            stability = _long_term_stability(state, rating, elapsed, params)
            if params.relearning_steps:
                phase, step, delay = State.RELEARNING, 0, params.relearning_steps[0]
            else:
                phase, step, delay = State.REVIEW, None, None
        else:
            if elapsed < 1:
                stability = formulas.short_term_stability(state.stability, rating, params)
            else:
                stability = _long_term_stability(state, rating, elapsed, params)
            phase, step, delay = State.REVIEW, None, None

    reps = state.reps + 1
    if delay is None:
        scheduled_days = formulas.next_interval(stability, params)
        if params.enable_fuzz:
            seed = formulas.fuzz_seed(now, reps, difficulty, stability)
            scheduled_days = formulas.fuzz_interval(scheduled_days, elapsed_days, params, seed)
        due = now + timedelta(days=scheduled_days)
    else:
        scheduled_days = delay.days
        due = now + delay

    return MemoryState(
        state=phase,
        due=due,
        stability=stability,
        difficulty=difficulty,
        last_review=now,
        reps=reps,
        lapses=lapses,
        elapsed_days=elapsed_days,
        scheduled_days=scheduled_days,
        learning_step=step,
    )


def _long_term_stability(
    state: MemoryState,
    rating: Rating,
    elapsed: float,
    params: ParameterSet,
) -> float:
    r = formulas.retrievability(elapsed, state.stability)
    if rating == Rating.AGAIN:
        return formulas.forget_stability(state.difficulty, state.stability, r, params)
    return formulas.recall_stability(state.difficulty, state.stability, r, rating, params)


def _ladder(
    phase: State,
    step: int,
    rating: Rating,
    steps: tuple[timedelta, ...],
) -> tuple[State, int | None, timedelta | None]:
    """
    Walk the short-term step ladder.

    Returns (next phase, next step, delay). A None delay means the card graduated
    to REVIEW and its interval comes from stability.
    """
    graduated = (State.REVIEW, None, None)
    if not steps:
        return graduated

    if rating == Rating.AGAIN:
        return phase, 0, steps[0]

    # The ladder may have been shortened since this card entered it.
    if step >= len(steps):
        return graduated

    if rating == Rating.HARD:
        if step == 0 and len(steps) == 1:
            return phase, step, min(steps[0] * 1.5, steps[0] + timedelta(days=1))
        if step == 0:
            return phase, step, (steps[0] + steps[1]) / 2
        return phase, step, steps[step]

    if rating == Rating.GOOD:
        if step + 1 >= len(steps):
            return graduated
        return phase, step + 1, steps[step + 1]

    return graduated


def _order_review_intervals(
    candidates: dict[Rating, MemoryState],
    now: datetime,
    params: ParameterSet,
) -> dict[Rating, MemoryState]:
    """Keep Hard <= Good < Easy for day intervals computed from a REVIEW state."""
    hard = candidates[Rating.HARD]
    good = candidates[Rating.GOOD]
    easy = candidates[Rating.EASY]
    if not all(m.state == State.REVIEW for m in (hard, good, easy)):
        return candidates

    cap = params.maximum_interval
    hard_days = min(hard.scheduled_days, good.scheduled_days)
    good_days = min(max(good.scheduled_days, hard_days + 1), cap)
    easy_days = min(max(easy.scheduled_days, good_days + 1), cap)

    def with_days(memory: MemoryState, days: int) -> MemoryState:
        if days == memory.scheduled_days:
            return memory
        return replace(memory, scheduled_days=days, due=now + timedelta(days=days))

    ordered = dict(candidates)
    ordered[Rating.HARD] = with_days(hard, hard_days)
    ordered[Rating.GOOD] = with_days(good, good_days)
    ordered[Rating.EASY] = with_days(easy, easy_days)
    return ordered
