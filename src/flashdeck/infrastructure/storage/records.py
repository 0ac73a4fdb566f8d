"""
Record codec between domain objects and the camelCase JSON format.

The same records are written to disk and returned over HTTP. New cards keep
stability/difficulty as 0 and every card carries a `learningSteps` integer, so
decoding normalises those back into the tagged MemoryState.
"""

from datetime import datetime, timezone
from typing import Any

from flashdeck.domain.cards.models import Card, Collection
from flashdeck.domain.scheduling.models import LEARNING_PHASES, MemoryState, State


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _optional_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    return parse_timestamp(value)


# ---------- Memory state ----------


def memory_to_record(memory: MemoryState) -> dict[str, Any]:
    record: dict[str, Any] = {
        "due": format_timestamp(memory.due),
        "stability": memory.stability if memory.stability is not None else 0,
        "difficulty": memory.difficulty if memory.difficulty is not None else 0,
        "reps": memory.reps,
        "lapses": memory.lapses,
        "state": int(memory.state),
        "learningSteps": memory.learning_step if memory.learning_step is not None else 0,
        "scheduledDays": memory.scheduled_days,
        "elapsedDays": memory.elapsed_days,
    }
    if memory.last_review is not None:
        record["lastReview"] = format_timestamp(memory.last_review)
    return record


def memory_from_record(record: dict[str, Any]) -> MemoryState:
    state = State(int(record.get("state", State.NEW)))
    if state == State.NEW:
        stability = None
        difficulty = None
    else:
        stability = float(record["stability"])
        difficulty = float(record["difficulty"])

    step = int(record.get("learningSteps") or 0) if state in LEARNING_PHASES else None

    return MemoryState(
        state=state,
        due=parse_timestamp(record["due"]),
        stability=stability,
        difficulty=difficulty,
        last_review=_optional_timestamp(record.get("lastReview")),
        reps=int(record.get("reps", 0)),
        lapses=int(record.get("lapses", 0)),
        elapsed_days=int(record.get("elapsedDays") or 0),
        scheduled_days=int(record.get("scheduledDays") or 0),
        learning_step=step,
    )


# ---------- Cards ----------


def card_to_record(card: Card) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": card.id,
        "collectionId": card.collection_id,
        "front": card.front,
        "back": card.back,
        "noteId": card.note_id,
        "createdAt": format_timestamp(card.created_at),
        "updatedAt": format_timestamp(card.updated_at),
    }
    record.update(memory_to_record(card.memory))
    return record


def card_from_record(record: dict[str, Any]) -> Card:
    return Card(
        id=record["id"],
        collection_id=record["collectionId"],
        front=record.get("front", ""),
        back=record.get("back", ""),
        note_id=record.get("noteId") or None,
        created_at=parse_timestamp(record["createdAt"]),
        updated_at=parse_timestamp(record["updatedAt"]),
        memory=memory_from_record(record),
    )


# ---------- Collections ----------


def collection_to_record(collection: Collection) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": collection.id,
        "name": collection.name,
        "createdAt": format_timestamp(collection.created_at),
        "updatedAt": format_timestamp(collection.updated_at),
    }
    if collection.description is not None:
        record["description"] = collection.description
    return record


def collection_from_record(record: dict[str, Any]) -> Collection:
    return Collection(
        id=record["id"],
        name=record["name"],
        description=record.get("description"),
        created_at=parse_timestamp(record["createdAt"]),
        updated_at=parse_timestamp(record["updatedAt"]),
    )
