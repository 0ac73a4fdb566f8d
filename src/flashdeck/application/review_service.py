"""
Review Service — Application layer orchestrator for the review flow.

Loads a card from the store, asks the scheduler for previews or a committed
transition, and persists the result. The scheduler itself stays pure.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from flashdeck.domain.cards.models import Card
from flashdeck.domain.cards.ports import CardStore
from flashdeck.domain.errors import NotFound
from flashdeck.domain.scheduling import DEFAULT_PARAMETERS, ParameterSet, Rating, commit, project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOption:
    rating: int
    interval: str


class ReviewService:
    def __init__(self, cards: CardStore, parameters: ParameterSet = DEFAULT_PARAMETERS):
        self._cards = cards
        self._params = parameters

    def _require(self, card_id: str) -> Card:
        card = self._cards.get_card(card_id)
        if card is None:
            raise NotFound("Card not found")
        return card

    def get_review_options(self, card_id: str, now: datetime) -> list[ReviewOption]:
        """Interval label for each rating, Again first. Read-only."""
        card = self._require(card_id)
        outcomes = project(card.memory, now, self._params)
        return [ReviewOption(rating=int(r), interval=o.interval) for r, o in outcomes.items()]

    def submit_review(self, card_id: str, rating: object, now: datetime) -> Card:
        """
        Commit one rating and persist the card.

        Raises:
            InvalidRating: rating is not 1..4 (checked before the card lookup).
            NotFound: no card has that ID.
        """
        parsed = Rating.parse(rating)

        with self._cards.card_lock(card_id):
            card = self._require(card_id)
            memory = commit(card.memory, parsed, now, self._params)
            updated = self._cards.update_card(card_id, {"memory": memory}, now)

        if updated is None:
            raise NotFound("Card not found")

        logger.info(
            f"Reviewed {card_id} as {parsed.label}: "
            f"{card.memory.state.name} -> {memory.state.name}, due {memory.due.isoformat()}"
        )
        return updated
