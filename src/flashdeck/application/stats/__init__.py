# Application Stats Package
from .service import CollectionSummary, StatsService, StatsSnapshot

__all__ = ["CollectionSummary", "StatsService", "StatsSnapshot"]
