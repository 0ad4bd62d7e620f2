"""Pydantic schemas for attribute history listings."""

from datetime import date

from pydantic import BaseModel


class HistoryRecordBase(BaseModel):
    history_id: int
    person_id: int
    start_date: date

    model_config = {"from_attributes": True}


class NameHistoryResponse(HistoryRecordBase):
    name: str


class SexHistoryResponse(HistoryRecordBase):
    sex: str


class AliasHistoryResponse(HistoryRecordBase):
    alias: str


class GuardianHistoryResponse(HistoryRecordBase):
    guardian_id: int
