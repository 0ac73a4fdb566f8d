"""
Ports (interfaces) for card and collection storage.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

import threading
import weakref
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from .models import Card, Collection


class CardStore(ABC):
    """
    Port for reading and writing cards.

    Writes are whole-record and last-write-wins. Callers that read, transform and
    write back a card must hold `card_lock(card_id)` for the whole sequence.

    Implementations:
        - JsonCardStore: One JSON file holding every card.
    """

    def __init__(self):
        # Entries vanish once no caller holds or waits on the lock.
        self._card_locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._card_locks_guard = threading.Lock()

    @contextmanager
    def card_lock(self, card_id: str) -> Iterator[None]:
        """Serialize read-modify-write sequences for one card identity."""
        with self._card_locks_guard:
            lock = self._card_locks.setdefault(card_id, threading.Lock())
        with lock:
            yield

    @abstractmethod
    def list_cards(self) -> list[Card]:
        pass

    @abstractmethod
    def get_card(self, card_id: str) -> Card | None:
        pass

    @abstractmethod
    def get_card_by_note_id(self, note_id: str) -> Card | None:
        pass

    @abstractmethod
    def create_card(self, card: Card) -> Card:
        pass

    @abstractmethod
    def update_card(self, card_id: str, changes: dict[str, Any], now: datetime) -> Card | None:
        """
        Merge `changes` (Card field names) into the stored card and refresh updated_at.

        Returns:
            The persisted card, or None if no card has that ID.
        """
        pass

    @abstractmethod
    def delete_card(self, card_id: str) -> bool:
        pass

    @abstractmethod
    def delete_cards_in_collection(self, collection_id: str) -> int:
        """Remove every card of a collection. Returns the number removed."""
        pass


class CollectionStore(ABC):
    """Port for reading and writing collections."""

    @abstractmethod
    def list_collections(self) -> list[Collection]:
        pass

    @abstractmethod
    def get_collection(self, collection_id: str) -> Collection | None:
        pass

    @abstractmethod
    def create_collection(self, collection: Collection) -> Collection:
        pass

    @abstractmethod
    def update_collection(
        self, collection_id: str, changes: dict[str, Any], now: datetime
    ) -> Collection | None:
        pass

    @abstractmethod
    def delete_collection(self, collection_id: str) -> bool:
        pass
