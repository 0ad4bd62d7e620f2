"""Append-only attribute history models."""

import enum
from typing import ClassVar
from datetime import date

from sqlalchemy import Date, Index, Integer, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from ..database import Base


class HistoryKind(str, enum.Enum):
    """Historized person attributes."""

    NAME = "name"
    SEX = "sex"
    ALIAS = "alias"
    GUARDIAN = "guardian"


class HistoryMixin:
    """Columns shared by every history table.

    A record is valid from ``start_date`` until the next record's
    ``start_date`` for the same person; the newest one is open-ended.
    """

    # Name of the column holding the historized value
    value_column: ClassVar[str]

    # Person field mirrored by the newest record
    person_field: ClassVar[str]

    history_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    person_id: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    @declared_attr.directive
    def __table_args__(cls) -> tuple:
        table_name = cls.__tablename__  # type: ignore[attr-defined]
        return (
            Index(
                f"ix_{table_name}_person_order", "person_id", "start_date", "history_id"
            ),
            {"sqlite_autoincrement": True},
        )

    @property
    def value(self):
        return getattr(self, self.value_column)


class NameHistory(HistoryMixin, Base):
    __tablename__ = "name_history"
    value_column = "name"
    person_field = "first_name"

    name: Mapped[str] = mapped_column(String(255), nullable=False)


class SexHistory(HistoryMixin, Base):
    __tablename__ = "sex_history"
    value_column = "sex"
    person_field = "current_sex"

    sex: Mapped[str] = mapped_column(String(50), nullable=False)


class AliasHistory(HistoryMixin, Base):
    __tablename__ = "alias_history"
    value_column = "alias"
    person_field = "current_alias"

    alias: Mapped[str] = mapped_column(String(255), nullable=False)


class GuardianHistory(HistoryMixin, Base):
    __tablename__ = "guardian_history"
    value_column = "guardian_id"
    person_field = "guardian_id"

    guardian_id: Mapped[int] = mapped_column(Integer, nullable=False)


HISTORY_MODELS: dict[HistoryKind, type[HistoryMixin]] = {
    HistoryKind.NAME: NameHistory,
    HistoryKind.SEX: SexHistory,
    HistoryKind.ALIAS: AliasHistory,
    HistoryKind.GUARDIAN: GuardianHistory,
}
