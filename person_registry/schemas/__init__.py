"""Pydantic schemas for API requests and responses."""

from .envelope import Envelope
from .history import (
    AliasHistoryResponse,
    GuardianHistoryResponse,
    NameHistoryResponse,
    SexHistoryResponse,
)
from .person import PersonCreate, PersonCreated, PersonResponse, PersonUpdate

__all__ = [
    "AliasHistoryResponse",
    "Envelope",
    "GuardianHistoryResponse",
    "NameHistoryResponse",
    "PersonCreate",
    "PersonCreated",
    "PersonResponse",
    "PersonUpdate",
    "SexHistoryResponse",
]
