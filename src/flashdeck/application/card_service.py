"""Service for creating, listing and editing cards."""

import logging
from datetime import datetime
from typing import Any

from flashdeck.domain.cards.models import EDITABLE_CARD_FIELDS, Card, generate_card_id
from flashdeck.domain.cards.ports import CardStore
from flashdeck.domain.errors import Conflict, InvalidRequest, NotFound
from flashdeck.domain.scheduling import initial, is_due, is_new

from .collection_service import CollectionService

logger = logging.getLogger(__name__)


class CardService:
    def __init__(self, cards: CardStore, collections: CollectionService):
        self._cards = cards
        self._collections = collections

    def get_card(self, card_id: str) -> Card:
        card = self._cards.get_card(card_id)
        if card is None:
            raise NotFound("Card not found")
        return card

    def list_cards(
        self,
        now: datetime,
        collection_id: str | None = None,
        due: bool = False,
        new: bool = False,
    ) -> list[Card]:
        """
        List cards, optionally filtered.

        Args:
            now: Reference instant for the due filter.
            collection_id: Only cards of this collection.
            due: Only cards due at `now`, soonest first.
            new: Only never-reviewed cards. Ignored when `due` is set.
        """
        cards = self._cards.list_cards()
        if collection_id:
            cards = [c for c in cards if c.collection_id == collection_id]

        if due:
            return sorted((c for c in cards if is_due(c.memory, now)), key=lambda c: c.memory.due)
        if new:
            return [c for c in cards if is_new(c.memory)]
        return cards

    def create_card(
        self,
        front: str | None,
        back: str | None,
        now: datetime,
        collection_id: str | None = None,
        collection_name: str | None = None,
        note_id: str | None = None,
    ) -> Card:
        """
        Create a new card in a collection given by ID or by name.

        Raises:
            NotFound: collection_name does not match any collection.
            InvalidRequest: collection, front or back missing.
            Conflict: another card already references note_id.
        """
        if not collection_id and collection_name:
            collection = self._collections.find_by_name(collection_name)
            if collection is None:
                raise NotFound(f'Collection "{collection_name}" not found')
            collection_id = collection.id

        if not collection_id or not front or not back:
            raise InvalidRequest("collectionId (or collection), front, and back are required")

        if note_id and self._cards.get_card_by_note_id(note_id) is not None:
            raise Conflict("Card with this noteId already exists")

        card = Card(
            id=generate_card_id(),
            collection_id=collection_id,
            front=front,
            back=back,
            note_id=note_id or None,
            created_at=now,
            updated_at=now,
            memory=initial(now),
        )
        self._cards.create_card(card)
        logger.info(f"Created card {card.id} in {collection_id}")
        return card

    def update_card(self, card_id: str, changes: dict[str, Any], now: datetime) -> Card:
        """Update content fields only. Scheduling state changes only through reviews."""
        allowed = {k: v for k, v in changes.items() if k in EDITABLE_CARD_FIELDS}
        updated = self._cards.update_card(card_id, allowed, now)
        if updated is None:
            raise NotFound("Card not found")
        return updated

    def delete_card(self, card_id: str) -> None:
        if not self._cards.delete_card(card_id):
            raise NotFound("Card not found")
