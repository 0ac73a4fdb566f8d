from .json_store import JsonCardStore, JsonCollectionStore

__all__ = ["JsonCardStore", "JsonCollectionStore"]
