"""Transactional persistence of slates, slate items and impression events."""

from .persistor import EMPTY_SLATE_META, MAX_ATTEMPTS, SlatePersistor, persist_slate

__all__ = [
    "SlatePersistor",
    "persist_slate",
    "EMPTY_SLATE_META",
    "MAX_ATTEMPTS",
]
