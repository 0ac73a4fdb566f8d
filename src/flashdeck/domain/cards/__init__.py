# Domain Cards Package
from .models import EDITABLE_CARD_FIELDS, Card, Collection, generate_card_id, generate_collection_id
from .ports import CardStore, CollectionStore

__all__ = [
    "Card",
    "Collection",
    "EDITABLE_CARD_FIELDS",
    "generate_card_id",
    "generate_collection_id",
    "CardStore",
    "CollectionStore",
]
