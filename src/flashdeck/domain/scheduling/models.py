"""
Domain models for the scheduling engine.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum

from flashdeck.domain.constants import MAX_DIFFICULTY, MIN_DIFFICULTY
from flashdeck.domain.errors import InvalidRating


class State(IntEnum):
    """Discrete scheduling phase. Values match the persisted record format."""

    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


class Rating(IntEnum):
    """Reviewer's self-assessed recall, ordered by severity."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @classmethod
    def parse(cls, value: object) -> "Rating":
        """
        Coerce user input into a Rating.

        Accepts a Rating, an integral int/float in 1..4, or a name / digit string
        ("good", "3"). Raises InvalidRating for anything else, including booleans.
        """
        if isinstance(value, Rating):
            return value
        if isinstance(value, bool):
            raise InvalidRating(value)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, str):
            text = value.strip()
            if text.isascii() and text.isdecimal():
                value = int(text)
            else:
                try:
                    return cls[text.upper()]
                except KeyError:
                    raise InvalidRating(value) from None
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidRating(value) from None
        raise InvalidRating(value)

    @property
    def label(self) -> str:
        return self.name.capitalize()


LEARNING_PHASES = (State.LEARNING, State.RELEARNING)


@dataclass(frozen=True)
class MemoryState:
    """
    Learning state of one card.

    Attributes:
        state: Scheduling phase.
        due: Next scheduled presentation (UTC).
        stability: Days until recall probability decays to 90%. None while NEW.
        difficulty: Intrinsic hardness in [1, 10]. None while NEW.
        last_review: Instant of the most recent committed rating.
        reps: Committed reviews since creation.
        lapses: Committed Again ratings since creation.
        elapsed_days: Whole days between the previous review and the latest one.
        scheduled_days: Whole days between the latest review and the due it produced.
        learning_step: Index into the step ladder. Only set while LEARNING/RELEARNING.
    """

    state: State
    due: datetime
    stability: float | None = None
    difficulty: float | None = None
    last_review: datetime | None = None
    reps: int = 0
    lapses: int = 0
    elapsed_days: int = 0
    scheduled_days: int = 0
    learning_step: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "state", State(self.state))

        if self.state in LEARNING_PHASES:
            if self.learning_step is None or self.learning_step < 0:
                raise ValueError(f"{self.state.name} requires a non-negative learning_step")
        elif self.learning_step is not None:
            raise ValueError(f"learning_step is only valid while learning, not {self.state.name}")

        if self.state != State.NEW:
            if self.stability is None or self.stability <= 0:
                raise ValueError("stability must be positive once a card has been reviewed")
            if self.difficulty is None:
                raise ValueError("difficulty must be set once a card has been reviewed")
        if self.difficulty is not None and not (
            MIN_DIFFICULTY <= self.difficulty <= MAX_DIFFICULTY
        ):
            raise ValueError(f"difficulty {self.difficulty} outside [1, 10]")

        if self.lapses < 0 or self.reps < self.lapses:
            raise ValueError("counters must satisfy reps >= lapses >= 0")
        if self.last_review is not None and self.due < self.last_review:
            raise ValueError("due must not precede last_review")

    @property
    def phase(self) -> tuple[State, int | None]:
        """Tagged view: (state, step) where step is only present in learning phases."""
        return self.state, self.learning_step


def initial(now: datetime) -> MemoryState:
    """The only constructor for a never-reviewed card."""
    return MemoryState(state=State.NEW, due=now)


def is_due(state: MemoryState, now: datetime) -> bool:
    return state.due <= now


def is_new(state: MemoryState) -> bool:
    return state.reps == 0
