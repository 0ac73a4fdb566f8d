"""
Stats Service — snapshot of due / new / total card counts.

Counts are computed at a given instant from current card state only; no review
history is kept or aggregated.
"""

from dataclasses import dataclass, field
from datetime import datetime

from flashdeck.domain.cards.ports import CardStore, CollectionStore
from flashdeck.domain.scheduling import is_due, is_new


@dataclass
class CollectionSummary:
    id: str
    name: str
    total_cards: int = 0
    due_cards: int = 0
    new_cards: int = 0


@dataclass
class StatsSnapshot:
    total_collections: int
    total_cards: int
    due_cards: int
    new_cards: int
    collections: list[CollectionSummary] = field(default_factory=list)


class StatsService:
    """
    Application service for card counts.

    Stateless apart from the stores it reads.
    """

    def __init__(self, cards: CardStore, collections: CollectionStore):
        self._cards = cards
        self._collections = collections

    def snapshot(self, now: datetime) -> StatsSnapshot:
        cards = self._cards.list_cards()
        summaries = {
            c.id: CollectionSummary(id=c.id, name=c.name)
            for c in self._collections.list_collections()
        }

        due_total = 0
        new_total = 0
        for card in cards:
            due = is_due(card.memory, now)
            new = is_new(card.memory)
            due_total += due
            new_total += new

            summary = summaries.get(card.collection_id)
            if summary is None:
                continue
            summary.total_cards += 1
            summary.due_cards += due
            summary.new_cards += new

        return StatsSnapshot(
            total_collections=len(summaries),
            total_cards=len(cards),
            due_cards=due_total,
            new_cards=new_total,
            collections=list(summaries.values()),
        )
