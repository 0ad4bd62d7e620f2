"""SQLAlchemy models for the application."""

from .birth_parents import BirthParents
from .history import (
    HISTORY_MODELS,
    AliasHistory,
    GuardianHistory,
    HistoryKind,
    HistoryMixin,
    NameHistory,
    SexHistory,
)
from .person import Person

__all__ = [
    "AliasHistory",
    "BirthParents",
    "GuardianHistory",
    "HISTORY_MODELS",
    "HistoryKind",
    "HistoryMixin",
    "NameHistory",
    "Person",
    "SexHistory",
]
