"""
Domain models for cards and collections.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime

from ulid import ULID

from flashdeck.domain.scheduling.models import MemoryState


def generate_card_id() -> str:
    return f"card_{ULID()}"


def generate_collection_id() -> str:
    return f"col_{ULID()}"


@dataclass(frozen=True)
class Collection:
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    description: str | None = None


@dataclass(frozen=True)
class Card:
    """
    A flashcard: markdown content plus its scheduling state.

    Attributes:
        id: Stable card ID.
        collection_id: Owning collection.
        front: Prompt (markdown).
        back: Answer (markdown).
        memory: Scheduling state, replaced on every committed review.
        note_id: Optional reference to an external note, unique across cards.
    """

    id: str
    collection_id: str
    front: str
    back: str
    created_at: datetime
    updated_at: datetime
    memory: MemoryState
    note_id: str | None = None


# Fields a client may change through the card update endpoint.
EDITABLE_CARD_FIELDS = ("front", "back", "note_id", "collection_id")
