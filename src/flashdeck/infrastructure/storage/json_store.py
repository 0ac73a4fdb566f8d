"""
JSON File Stores — Infrastructure adapters for the card and collection ports.

Each store keeps every record in one JSON array file under the data directory.
Every read-modify-write of a file runs under that file's lock, and writes go
through a temporary file plus os.replace so readers never see a partial file.
Cross-process writers are not coordinated: the last writer wins.
"""

import json
import logging
import os
import tempfile
import threading
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

from flashdeck.domain.cards.models import Card, Collection
from flashdeck.domain.cards.ports import CardStore, CollectionStore
from flashdeck.domain.constants import CARDS_FILENAME, COLLECTIONS_FILENAME
from flashdeck.domain.errors import StoreFailure

from .records import (
    card_from_record,
    card_to_record,
    collection_from_record,
    collection_to_record,
)

logger = logging.getLogger(__name__)


class JsonFile:
    """A JSON array file guarded by a re-entrant lock."""

    def __init__(self, path: Path):
        self.path = path
        self.lock = threading.RLock()

    def read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {self.path}: {e}", exc_info=True)
            raise StoreFailure(f"Could not read {self.path.name}") from e
        if not isinstance(data, list):
            raise StoreFailure(f"{self.path.name} does not contain a JSON array")
        return data

    def write(self, records: list[dict[str, Any]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(records, fh, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to write {self.path}: {e}", exc_info=True)
            raise StoreFailure(f"Could not write {self.path.name}") from e


def _decode(decoder, record: dict[str, Any], path: Path):
    try:
        return decoder(record)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Malformed record in {path}: {record.get('id')!r}: {e}")
        raise StoreFailure(f"Malformed record in {path.name}") from e


class JsonCardStore(CardStore):
    def __init__(self, data_dir: Path):
        super().__init__()
        self._file = JsonFile(Path(data_dir) / CARDS_FILENAME)

    def _load(self) -> list[Card]:
        return [_decode(card_from_record, r, self._file.path) for r in self._file.read()]

    def _save(self, cards: list[Card]) -> None:
        self._file.write([card_to_record(c) for c in cards])

    def list_cards(self) -> list[Card]:
        with self._file.lock:
            return self._load()

    def get_card(self, card_id: str) -> Card | None:
        return next((c for c in self.list_cards() if c.id == card_id), None)

    def get_card_by_note_id(self, note_id: str) -> Card | None:
        return next((c for c in self.list_cards() if c.note_id == note_id), None)

    def create_card(self, card: Card) -> Card:
        with self._file.lock:
            cards = self._load()
            cards.append(card)
            self._save(cards)
        return card

    def update_card(self, card_id: str, changes: dict[str, Any], now: datetime) -> Card | None:
        with self._file.lock:
            cards = self._load()
            for index, card in enumerate(cards):
                if card.id == card_id:
                    updated = replace(card, **changes, updated_at=now)
                    cards[index] = updated
                    self._save(cards)
                    return updated
        return None

    def delete_card(self, card_id: str) -> bool:
        with self._file.lock:
            cards = self._load()
            remaining = [c for c in cards if c.id != card_id]
            if len(remaining) == len(cards):
                return False
            self._save(remaining)
        return True

    def delete_cards_in_collection(self, collection_id: str) -> int:
        with self._file.lock:
            cards = self._load()
            remaining = [c for c in cards if c.collection_id != collection_id]
            removed = len(cards) - len(remaining)
            if removed:
                self._save(remaining)
        return removed


class JsonCollectionStore(CollectionStore):
    def __init__(self, data_dir: Path):
        self._file = JsonFile(Path(data_dir) / COLLECTIONS_FILENAME)

    def _load(self) -> list[Collection]:
        return [_decode(collection_from_record, r, self._file.path) for r in self._file.read()]

    def _save(self, collections: list[Collection]) -> None:
        self._file.write([collection_to_record(c) for c in collections])

    def list_collections(self) -> list[Collection]:
        with self._file.lock:
            return self._load()

    def get_collection(self, collection_id: str) -> Collection | None:
        return next((c for c in self.list_collections() if c.id == collection_id), None)

    def create_collection(self, collection: Collection) -> Collection:
        with self._file.lock:
            collections = self._load()
            collections.append(collection)
            self._save(collections)
        return collection

    def update_collection(
        self, collection_id: str, changes: dict[str, Any], now: datetime
    ) -> Collection | None:
        with self._file.lock:
            collections = self._load()
            for index, collection in enumerate(collections):
                if collection.id == collection_id:
                    updated = replace(collection, **changes, updated_at=now)
                    collections[index] = updated
                    self._save(collections)
                    return updated
        return None

    def delete_collection(self, collection_id: str) -> bool:
        with self._file.lock:
            collections = self._load()
            remaining = [c for c in collections if c.id != collection_id]
            if len(remaining) == len(collections):
                return False
            self._save(remaining)
        return True
