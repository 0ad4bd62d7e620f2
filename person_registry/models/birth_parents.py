"""Biological parentage, written once per person."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class BirthParents(Base):
    """Immutable parentage record; the registry never updates these rows."""

    __tablename__ = "birth_parents"

    # One row per person, enforced by the primary key
    person_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    first_parent_id: Mapped[int] = mapped_column(Integer, nullable=False)
    second_parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    first_parent_relationship: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    second_parent_relationship: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<BirthParents(person_id={self.person_id}, "
            f"first_parent_id={self.first_parent_id}, "
            f"second_parent_id={self.second_parent_id})>"
        )
