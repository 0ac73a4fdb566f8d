from datetime import timedelta

import pytest

from flashdeck.domain.errors import InvalidRating
from flashdeck.domain.scheduling import MemoryState, Rating, State, initial, is_due, is_new


def test_initial_card_is_new_and_due(t0):
    memory = initial(t0)

    assert memory.state == State.NEW
    assert memory.reps == 0
    assert memory.lapses == 0
    assert memory.stability is None
    assert memory.difficulty is None
    assert memory.last_review is None
    assert memory.learning_step is None
    assert memory.due == t0
    assert is_due(memory, t0)
    assert is_new(memory)


def test_is_due_boundary(t0):
    memory = initial(t0)
    assert is_due(memory, t0 + timedelta(seconds=1))
    assert not is_due(memory, t0 - timedelta(seconds=1))


def test_phase_carries_step_only_while_learning(t0):
    learning = MemoryState(
        state=State.LEARNING, due=t0, stability=2.4, difficulty=5.0, last_review=t0,
        reps=1, learning_step=1,
    )
    review = MemoryState(
        state=State.REVIEW, due=t0, stability=2.4, difficulty=5.0, last_review=t0, reps=2
    )

    assert learning.phase == (State.LEARNING, 1)
    assert review.phase == (State.REVIEW, None)


def test_state_accepts_persisted_integer(t0):
    memory = MemoryState(state=0, due=t0)
    assert memory.state is State.NEW


@pytest.mark.parametrize(
    "kwargs",
    [
        # learning without a step
        {"state": State.LEARNING, "stability": 1.0, "difficulty": 5.0, "reps": 1},
        # step outside learning
        {"state": State.REVIEW, "stability": 1.0, "difficulty": 5.0, "reps": 1, "learning_step": 0},
        # reviewed card without stability
        {"state": State.REVIEW, "difficulty": 5.0, "reps": 1},
        # non-positive stability
        {"state": State.REVIEW, "stability": 0.0, "difficulty": 5.0, "reps": 1},
        # difficulty out of range
        {"state": State.REVIEW, "stability": 1.0, "difficulty": 10.5, "reps": 1},
        # more lapses than reps
        {"state": State.REVIEW, "stability": 1.0, "difficulty": 5.0, "reps": 1, "lapses": 2},
    ],
)
def test_invalid_memory_state_rejected(t0, kwargs):
    with pytest.raises(ValueError):
        MemoryState(due=t0, **kwargs)


def test_due_before_last_review_rejected(t0):
    with pytest.raises(ValueError, match="due"):
        MemoryState(
            state=State.REVIEW, due=t0 - timedelta(days=1), last_review=t0,
            stability=1.0, difficulty=5.0, reps=1,
        )


# --- Rating ---


@pytest.mark.parametrize(
    "value, expected",
    [
        (1, Rating.AGAIN),
        (4, Rating.EASY),
        (3.0, Rating.GOOD),
        ("2", Rating.HARD),
        (" good ", Rating.GOOD),
        ("EASY", Rating.EASY),
        (Rating.HARD, Rating.HARD),
    ],
)
def test_rating_parse(value, expected):
    assert Rating.parse(value) is expected


@pytest.mark.parametrize("value", [0, 5, -1, 2.5, "", "meh", None, True, [3]])
def test_rating_parse_rejects(value):
    with pytest.raises(InvalidRating) as exc_info:
        Rating.parse(value)
    assert "1 (Again)" in exc_info.value.message
    assert exc_info.value.status_code == 400


def test_rating_label():
    assert [r.label for r in Rating] == ["Again", "Hard", "Good", "Easy"]
