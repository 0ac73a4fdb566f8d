"""Centralized constants for flashdeck.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- FSRS weights ----------
# w[0..16]: published FSRS v4 reference parameters.
# w[17..18]: FSRS-5 short-term (same-day) stability pair.
DEFAULT_WEIGHTS = (
    0.4,
    0.6,
    2.4,
    5.8,
    4.93,
    0.94,
    0.86,
    0.01,
    1.49,
    0.14,
    0.94,
    2.18,
    0.05,
    0.34,
    1.26,
    0.29,
    2.61,
    0.51655,
    0.6621,
)
WEIGHT_COUNT = len(DEFAULT_WEIGHTS)

# ---------- Forgetting curve ----------
# R(t, S) = (1 + FACTOR * t / S) ** DECAY, so R(S, S) == 0.9
DECAY = -1.0
FACTOR = 1.0 / 9.0

# ---------- Bounds ----------
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0
MIN_STABILITY = 0.1  # days

# ---------- Scheduling defaults ----------
DEFAULT_DESIRED_RETENTION = 0.9
DEFAULT_MAXIMUM_INTERVAL = 36500  # days
DEFAULT_LEARNING_STEPS_MINUTES = (1.0, 10.0)
DEFAULT_RELEARNING_STEPS_MINUTES = (10.0,)

# ---------- Fuzz ----------
# (start_days, end_days, factor)
FUZZ_RANGES = (
    (2.5, 7.0, 0.15),
    (7.0, 20.0, 0.1),
    (20.0, float("inf"), 0.05),
)
FUZZ_MIN_INTERVAL = 2.5

# ---------- Sessions ----------
SESSION_COOKIE_NAME = "flashdeck_session"
DEFAULT_SESSION_MAX_AGE = 7 * 24 * 60 * 60  # seconds

# ---------- Storage ----------
CARDS_FILENAME = "cards.json"
COLLECTIONS_FILENAME = "collections.json"
