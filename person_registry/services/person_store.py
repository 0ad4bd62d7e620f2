"""Data access for the ``people`` projection table."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFound
from ..models.person import Person
from .partial_update import PartialUpdateBuilder

logger = logging.getLogger(__name__)

# Closed set of columns a patch may touch, in SET clause order
UPDATABLE_FIELDS = (
    "first_name",
    "last_name",
    "birth_date",
    "is_alive",
    "current_sex",
    "current_alias",
    "guardian_id",
)

CREATABLE_FIELDS = UPDATABLE_FIELDS + (
    "first_parent_id",
    "first_parent_relationship",
    "second_parent_id",
    "second_parent_relationship",
)

person_update_builder = PartialUpdateBuilder(
    Person.__table__, key="person_id", updatable=UPDATABLE_FIELDS  # type: ignore[arg-type]
)


class PersonStore:
    """Create, read, patch and delete rows of the current projection.

    Has no history side effects; those are sequenced by the orchestrator.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, fields: Mapping[str, Any]) -> int:
        """Insert a person and return the assigned ``person_id``."""
        unknown = set(fields) - set(CREATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown person fields: {sorted(unknown)}")

        person = Person(**fields)
        self.session.add(person)
        await self.session.flush()
        return person.person_id

    async def get(self, person_id: int, for_update: bool = False) -> Person | None:
        """Load one person, optionally locking the row until the transaction ends."""
        query = (
            select(Person)
            .where(Person.person_id == person_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def require(self, person_id: int, for_update: bool = False) -> Person:
        """Like ``get`` but raises NotFound for a missing identity."""
        person = await self.get(person_id, for_update=for_update)
        if person is None:
            raise NotFound(f"Person {person_id} not found", person_id=person_id)
        return person

    async def missing(self, person_ids: Iterable[int]) -> set[int]:
        """Return the ids from ``person_ids`` that have no row."""
        wanted = set(person_ids)
        if not wanted:
            return set()
        result = await self.session.execute(
            select(Person.person_id).where(Person.person_id.in_(wanted))
        )
        return wanted - set(result.scalars().all())

    async def list(self) -> Sequence[Person]:
        """All people ordered by ``person_id``."""
        result = await self.session.execute(select(Person).order_by(Person.person_id))
        return result.scalars().all()

    async def update(self, person_id: int, patch: Mapping[str, Any]) -> int:
        """Apply ``patch`` to one person and return the affected row count.

        An empty patch issues no statement and returns 0.

        Raises:
            NotFound: if a statement was issued and matched no row.
        """
        partial = person_update_builder.build(patch)
        if partial is None:
            logger.debug("person.update_skipped", extra={"person_id": person_id})
            return 0

        result = await self.session.execute(partial.statement(person_id))
        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise NotFound(f"Person {person_id} not found", person_id=person_id)

        logger.info(
            "person.projection_updated",
            extra={"person_id": person_id, "fields": list(partial.fields)},
        )
        return result.rowcount  # type: ignore[attr-defined]

    async def delete(self, person_id: int) -> bool:
        """Delete one person. Returns False when there was nothing to delete."""
        result = await self.session.execute(
            delete(Person).where(Person.person_id == person_id)
        )
        return result.rowcount > 0  # type: ignore[attr-defined]
