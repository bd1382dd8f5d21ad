"""Data store module.

Provides the SQLAlchemy schema, the explicit ``SlateStore`` handle and the
query helpers used by the candidate source and the slate persistor.
"""

from .database import SlateStore, build_engine, translate_store_error
from .models import (
    Base,
    Content,
    ContentFeature,
    Event,
    EventType,
    Slate,
    SlateItem,
    ThemeItem,
    UserDomainStat,
)
from .queries import (
    count_open_events,
    create_impression_events,
    create_slate,
    create_slate_items,
    list_domain_stats,
    list_saved_items,
)

__all__ = [
    # Connection
    "SlateStore",
    "build_engine",
    "translate_store_error",
    # Models
    "Base",
    "Content",
    "ContentFeature",
    "ThemeItem",
    "Event",
    "EventType",
    "UserDomainStat",
    "Slate",
    "SlateItem",
    # Reads
    "list_saved_items",
    "count_open_events",
    "list_domain_stats",
    # Writes
    "create_slate",
    "create_slate_items",
    "create_impression_events",
]
