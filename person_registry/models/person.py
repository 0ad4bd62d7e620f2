"""Person model: the current projection of an identity record."""

from datetime import date

from sqlalchemy import Boolean, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class Person(Base):
    """Latest known state of a person.

    ``current_sex``, ``current_alias``, ``first_name`` and ``guardian_id``
    mirror the newest entry of their history ledger. Parent and guardian
    ids are plain back-references; deleting a person leaves them dangling.
    """

    __tablename__ = "people"

    person_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_alive: Mapped[bool] = mapped_column(Boolean, nullable=False)

    current_sex: Mapped[str | None] = mapped_column(String(50), nullable=True)
    current_alias: Mapped[str | None] = mapped_column(String(255), nullable=True)

    first_parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    first_parent_relationship: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    second_parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    second_parent_relationship: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )

    guardian_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    # Never hand out a deleted person's id again on SQLite
    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self) -> str:
        return f"<Person(person_id={self.person_id}, first_name={self.first_name})>"
