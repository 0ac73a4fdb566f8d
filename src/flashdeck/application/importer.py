"""
Bulk card import from YAML files.

Expected layout:

    collection: Spanish
    description: Core vocabulary     # optional, used when the collection is created
    cards:
      - front: "hola"
        back: "hello"
        id: vocab-001                # optional external note reference

Cards whose `id` is already used by a stored card are skipped, so re-importing the
same file is safe.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from flashdeck.domain.errors import Conflict, InvalidRequest

from .card_service import CardService
from .collection_service import CollectionService

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    collection_id: str
    created: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


def load_import_file(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidRequest(f"Cannot read {path}: {e}") from e

    # Tabs are a common hand-editing mistake and YAML rejects them.
    if "\t" in raw:
        raw = raw.replace("\t", "  ")

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        where = f" (line {mark.line + 1})" if mark is not None else ""
        raise InvalidRequest(f"Invalid YAML in {path.name}{where}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidRequest(f"{path.name} must contain a mapping with 'collection' and 'cards'")
    if not data.get("collection"):
        raise InvalidRequest(f"{path.name} is missing 'collection'")
    if not isinstance(data.get("cards", []), list):
        raise InvalidRequest(f"'cards' in {path.name} must be a list")
    return data


def import_cards(
    path: Path,
    cards: CardService,
    collections: CollectionService,
    now: datetime,
) -> ImportResult:
    data = load_import_file(path)
    name = str(data["collection"])

    collection = collections.find_by_name(name)
    if collection is None:
        collection = collections.create_collection(name, now, description=data.get("description"))

    result = ImportResult(collection_id=collection.id)
    for index, entry in enumerate(data.get("cards") or [], start=1):
        if not isinstance(entry, dict):
            result.errors.append(f"card #{index}: expected a mapping")
            continue

        note_id = entry.get("id")
        try:
            cards.create_card(
                front=_text(entry.get("front")),
                back=_text(entry.get("back")),
                now=now,
                collection_id=collection.id,
                note_id=str(note_id) if note_id is not None else None,
            )
            result.created += 1
        except Conflict:
            result.skipped += 1
        except InvalidRequest:
            result.errors.append(f"card #{index}: front and back are required")

    logger.info(
        f"Imported {path.name} into {collection.name}: "
        f"{result.created} created, {result.skipped} skipped, {len(result.errors)} errors"
    )
    return result


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip()
