"""
Service Factory
Centralizes wiring of stores and services from configuration.
"""

from dataclasses import dataclass

from flashdeck.application.auth import SessionManager
from flashdeck.application.card_service import CardService
from flashdeck.application.collection_service import CollectionService
from flashdeck.application.config import AppConfig
from flashdeck.application.review_service import ReviewService
from flashdeck.application.stats import StatsService
from flashdeck.domain.cards.ports import CardStore, CollectionStore
from flashdeck.infrastructure.storage import JsonCardStore, JsonCollectionStore


@dataclass
class Services:
    config: AppConfig
    card_store: CardStore
    collection_store: CollectionStore
    cards: CardService
    collections: CollectionService
    reviews: ReviewService
    stats: StatsService
    sessions: SessionManager


def build_services(config: AppConfig) -> Services:
    """Wire JSON stores under config.data_dir into every service."""
    card_store = JsonCardStore(config.data_dir)
    collection_store = JsonCollectionStore(config.data_dir)

    collections = CollectionService(collection_store, card_store)
    return Services(
        config=config,
        card_store=card_store,
        collection_store=collection_store,
        cards=CardService(card_store, collections),
        collections=collections,
        reviews=ReviewService(card_store, config.scheduler_parameters()),
        stats=StatsService(card_store, collection_store),
        sessions=SessionManager(
            username=config.username,
            password=config.password,
            secret=config.session_secret,
            max_age=config.session_max_age,
            api_token=config.api_token,
        ),
    )
