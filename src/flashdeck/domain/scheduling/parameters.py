"""Immutable scheduler parameter set."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import timedelta

from flashdeck.domain.constants import (
    DEFAULT_DESIRED_RETENTION,
    DEFAULT_LEARNING_STEPS_MINUTES,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_RELEARNING_STEPS_MINUTES,
    DEFAULT_WEIGHTS,
    WEIGHT_COUNT,
)


def minutes_to_steps(minutes: Iterable[float]) -> tuple[timedelta, ...]:
    return tuple(timedelta(minutes=m) for m in minutes)


@dataclass(frozen=True)
class ParameterSet:
    """
    Tunable knobs of the scheduler, passed explicitly into every call.

    Attributes:
        weights: The 19 model weights (see formulas.py for their roles).
        learning_steps: Delays used while a new card is in LEARNING.
        relearning_steps: Delays used after a lapse while RELEARNING.
        desired_retention: Target recall probability at the due date.
        maximum_interval: Upper bound on review intervals, in days.
        enable_fuzz: Jitter long intervals deterministically.
    """

    weights: tuple[float, ...] = DEFAULT_WEIGHTS
    learning_steps: tuple[timedelta, ...] = field(
        default_factory=lambda: minutes_to_steps(DEFAULT_LEARNING_STEPS_MINUTES)
    )
    relearning_steps: tuple[timedelta, ...] = field(
        default_factory=lambda: minutes_to_steps(DEFAULT_RELEARNING_STEPS_MINUTES)
    )
    desired_retention: float = DEFAULT_DESIRED_RETENTION
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
    enable_fuzz: bool = False

    def __post_init__(self):
        # Accept lists from config loaders but store tuples so the set stays hashable.
        object.__setattr__(self, "weights", tuple(float(w) for w in self.weights))
        object.__setattr__(self, "learning_steps", tuple(self.learning_steps))
        object.__setattr__(self, "relearning_steps", tuple(self.relearning_steps))

        if len(self.weights) != WEIGHT_COUNT:
            raise ValueError(f"expected {WEIGHT_COUNT} weights, got {len(self.weights)}")
        if not 0.0 < self.desired_retention < 1.0:
            raise ValueError("desired_retention must be in the open interval (0, 1)")
        if self.maximum_interval < 1:
            raise ValueError("maximum_interval must be at least 1 day")
        for step in self.learning_steps + self.relearning_steps:
            if step <= timedelta(0):
                raise ValueError("learning and relearning steps must be positive")


DEFAULT_PARAMETERS = ParameterSet()
