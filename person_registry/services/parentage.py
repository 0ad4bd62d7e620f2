"""One-time writer for biological parentage."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ValidationFailure
from ..models.birth_parents import BirthParents

logger = logging.getLogger(__name__)


def check_pairing(
    first_parent_id: int | None,
    first_relationship: str | None,
    second_parent_id: int | None,
    second_relationship: str | None,
) -> None:
    """Reject relationship labels without a parent and a second parent without a first.

    Raises:
        ValidationFailure: on any inconsistent combination.
    """
    if first_relationship is not None and first_parent_id is None:
        raise ValidationFailure(
            "first_parent_relationship requires first_parent_id"
        )
    if second_relationship is not None and second_parent_id is None:
        raise ValidationFailure(
            "second_parent_relationship requires second_parent_id"
        )
    if second_parent_id is not None and first_parent_id is None:
        raise ValidationFailure("second_parent_id requires first_parent_id")
    if (
        first_parent_id is not None
        and second_parent_id is not None
        and first_parent_id == second_parent_id
    ):
        raise ValidationFailure("first and second parent must be different people")


class ParentageLinker:
    """Writes a person's ``birth_parents`` row exactly once."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, person_id: int) -> BirthParents | None:
        result = await self.session.execute(
            select(BirthParents).where(BirthParents.person_id == person_id)
        )
        return result.scalar_one_or_none()

    async def link_once(
        self,
        person_id: int,
        first_parent_id: int,
        first_relationship: str | None = None,
        second_parent_id: int | None = None,
        second_relationship: str | None = None,
    ) -> BirthParents:
        """Record the birth parents of ``person_id``.

        Raises:
            ValidationFailure: if the inputs are inconsistent, a parent is
                the person itself, or parentage was already recorded.
        """
        check_pairing(
            first_parent_id, first_relationship, second_parent_id, second_relationship
        )
        if person_id in (first_parent_id, second_parent_id):
            raise ValidationFailure("A person cannot be their own parent")

        if await self.get(person_id) is not None:
            logger.warning("parentage.already_linked", extra={"person_id": person_id})
            raise ValidationFailure(
                f"Parentage for person {person_id} is already recorded"
            )

        link = BirthParents(
            person_id=person_id,
            first_parent_id=first_parent_id,
            first_parent_relationship=first_relationship,
            second_parent_id=second_parent_id,
            second_parent_relationship=second_relationship,
        )
        self.session.add(link)
        await self.session.flush()

        logger.info(
            "parentage.linked",
            extra={
                "person_id": person_id,
                "first_parent_id": first_parent_id,
                "second_parent_id": second_parent_id,
            },
        )
        return link
