"""Service for managing collections."""

import logging
from datetime import datetime

from flashdeck.domain.cards.models import Collection, generate_collection_id
from flashdeck.domain.cards.ports import CardStore, CollectionStore
from flashdeck.domain.errors import InvalidRequest, NotFound

logger = logging.getLogger(__name__)


class CollectionService:
    def __init__(self, collections: CollectionStore, cards: CardStore):
        self._collections = collections
        self._cards = cards

    def list_collections(self) -> list[Collection]:
        return self._collections.list_collections()

    def get_collection(self, collection_id: str) -> Collection:
        collection = self._collections.get_collection(collection_id)
        if collection is None:
            raise NotFound("Collection not found")
        return collection

    def find_by_name(self, name: str) -> Collection | None:
        return next((c for c in self.list_collections() if c.name == name), None)

    def create_collection(
        self, name: str | None, now: datetime, description: str | None = None
    ) -> Collection:
        if not name or not name.strip():
            raise InvalidRequest("name is required")
        collection = Collection(
            id=generate_collection_id(),
            name=name.strip(),
            description=description,
            created_at=now,
            updated_at=now,
        )
        self._collections.create_collection(collection)
        logger.info(f"Created collection {collection.id} ({collection.name})")
        return collection

    def update_collection(
        self,
        collection_id: str,
        now: datetime,
        name: str | None = None,
        description: str | None = None,
    ) -> Collection:
        changes: dict[str, str] = {}
        if name is not None:
            if not name.strip():
                raise InvalidRequest("name must not be empty")
            changes["name"] = name.strip()
        if description is not None:
            changes["description"] = description

        updated = self._collections.update_collection(collection_id, changes, now)
        if updated is None:
            raise NotFound("Collection not found")
        return updated

    def delete_collection(self, collection_id: str) -> None:
        """Delete a collection and every card in it."""
        if not self._collections.delete_collection(collection_id):
            raise NotFound("Collection not found")
        removed = self._cards.delete_cards_in_collection(collection_id)
        logger.info(f"Deleted collection {collection_id} and {removed} card(s)")
