"""Person mutation orchestration.

Every write request runs as one transaction that covers the projection
row, the history appends and the parentage link. Writers for the same
person are serialized, first by an in-process lock and then by a row
lock, so concurrent patches never interleave their steps.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Mapping, Sequence
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, TypeVar

from fastapi import Request
from opentelemetry import trace
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings
from ..database import Database
from ..errors import RegistryError, StorageFailure, ValidationFailure
from ..models.history import HISTORY_MODELS, HistoryKind, HistoryMixin
from ..models.person import Person
from ..observability.metrics import PERSON_MUTATIONS
from .history import HistoryLedger
from .identity_lock import IdentityLocks
from .parentage import ParentageLinker, check_pairing
from .person_store import PersonStore

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("person-registry.person")

T = TypeVar("T")

# Person field -> history kind it is recorded in
HISTORIZED_FIELDS: dict[str, HistoryKind] = {
    model.person_field: kind for kind, model in HISTORY_MODELS.items()
}

APPEND_ON_PRESENCE = "presence"
APPEND_ON_CHANGE = "change"


class PersonMutationOrchestrator:
    """Sequences PersonStore, HistoryLedger and ParentageLinker calls.

    This is the only component that drives the three of them together;
    routes go through it for reads as well.
    """

    def __init__(
        self,
        database: Database,
        locks: IdentityLocks | None = None,
        step_timeout: float | None = None,
        append_policy: str = APPEND_ON_PRESENCE,
    ):
        if append_policy not in (APPEND_ON_PRESENCE, APPEND_ON_CHANGE):
            raise ValueError(f"Unknown history append policy: {append_policy}")
        self.database = database
        self.locks = locks if locks is not None else IdentityLocks(timeout=step_timeout)
        self.step_timeout = step_timeout
        self.append_policy = append_policy

    @classmethod
    def from_settings(
        cls, database: Database, settings: Settings
    ) -> "PersonMutationOrchestrator":
        return cls(
            database,
            step_timeout=settings.step_timeout_seconds,
            append_policy=settings.history_append_policy,
        )

    @asynccontextmanager
    async def _unit_of_work(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Run a block in one transaction and translate storage errors.

        The transaction is rolled back before any error leaves this block.
        """
        try:
            async with self.database.transaction() as session:
                yield session
        except RegistryError:
            PERSON_MUTATIONS.labels(operation, "rejected").inc()
            raise
        except SQLAlchemyError as exc:
            PERSON_MUTATIONS.labels(operation, "failed").inc()
            logger.error(
                "person.storage_failure",
                extra={"operation": operation, "error": str(exc)},
            )
            raise StorageFailure(f"{operation} failed: {exc}") from exc
        PERSON_MUTATIONS.labels(operation, "ok").inc()

    async def _step(self, awaitable: Awaitable[T], step: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.step_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "person.step_timeout",
                extra={"step": step, "timeout": self.step_timeout},
            )
            raise StorageFailure(f"Timed out during {step}") from None

    async def _check_references(
        self, store: PersonStore, refs: Mapping[str, int | None]
    ) -> None:
        present = {field: ref for field, ref in refs.items() if ref is not None}
        missing = await self._step(store.missing(present.values()), "reference check")
        for field, ref in present.items():
            if ref in missing:
                raise ValidationFailure(f"{field} {ref} does not exist")

    # -- writes -------------------------------------------------------------

    async def create(self, fields: Mapping[str, Any]) -> int:
        """Create a person with seeded history and optional parentage.

        Args:
            fields: Initial values; absent or None fields stay empty.

        Returns:
            The new ``person_id``.

        Raises:
            ValidationFailure: on inconsistent parentage input or unknown
                referenced people.
            StorageFailure: if any storage step fails; nothing is kept.
        """
        fields = {k: v for k, v in fields.items() if v is not None}
        check_pairing(
            fields.get("first_parent_id"),
            fields.get("first_parent_relationship"),
            fields.get("second_parent_id"),
            fields.get("second_parent_relationship"),
        )

        with tracer.start_as_current_span("person.create") as span:
            today = date.today()
            async with self._unit_of_work("create") as session:
                store = PersonStore(session)
                ledger = HistoryLedger(session)

                await self._check_references(
                    store,
                    {
                        "guardian_id": fields.get("guardian_id"),
                        "first_parent_id": fields.get("first_parent_id"),
                        "second_parent_id": fields.get("second_parent_id"),
                    },
                )

                person_id = await self._step(store.create(fields), "person insert")
                span.set_attribute("person_id", person_id)

                for field, kind in HISTORIZED_FIELDS.items():
                    if field in fields:
                        await self._step(
                            ledger.append(person_id, kind, fields[field], today),
                            f"{kind.value} history append",
                        )

                if "first_parent_id" in fields:
                    await self._step(
                        ParentageLinker(session).link_once(
                            person_id,
                            fields["first_parent_id"],
                            fields.get("first_parent_relationship"),
                            fields.get("second_parent_id"),
                            fields.get("second_parent_relationship"),
                        ),
                        "parentage link",
                    )

        logger.info(
            "person.created",
            extra={"person_id": person_id, "fields": sorted(fields)},
        )
        return person_id

    async def update(self, person_id: int, patch: Mapping[str, Any]) -> Person:
        """Apply a partial update and append history for historized fields.

        Fields mapped to None are treated as absent. An empty patch changes
        nothing but still fails for an unknown person.

        Returns:
            The person as stored after the update.

        Raises:
            NotFound: if the person does not exist.
            ValidationFailure: if the guardian is unknown or the person itself.
            StorageFailure: if any storage step fails; nothing is kept.
        """
        patch = {k: v for k, v in patch.items() if v is not None}

        with tracer.start_as_current_span("person.update") as span:
            span.set_attribute("person_id", person_id)
            span.set_attribute("fields", sorted(patch))

            async with self.locks.hold(person_id):
                async with self._unit_of_work("update") as session:
                    store = PersonStore(session)
                    ledger = HistoryLedger(session)

                    person = await self._step(
                        store.require(person_id, for_update=True), "person lock"
                    )
                    if not patch:
                        return person

                    guardian_id = patch.get("guardian_id")
                    if guardian_id == person_id:
                        raise ValidationFailure("A person cannot be their own guardian")
                    await self._check_references(store, {"guardian_id": guardian_id})

                    previous = {field: getattr(person, field) for field in HISTORIZED_FIELDS}
                    appends = [
                        (kind, patch[field])
                        for field, kind in HISTORIZED_FIELDS.items()
                        if field in patch
                        and (
                            self.append_policy == APPEND_ON_PRESENCE
                            or previous[field] != patch[field]
                        )
                    ]

                    await self._step(store.update(person_id, patch), "person update")

                    today = date.today()
                    for kind, value in appends:
                        await self._step(
                            ledger.append(person_id, kind, value, today),
                            f"{kind.value} history append",
                        )

                    updated = await self._step(store.require(person_id), "person reload")

        logger.info(
            "person.updated",
            extra={
                "person_id": person_id,
                "fields": sorted(patch),
                "history": [kind.value for kind, _ in appends],
            },
        )
        return updated

    async def delete(self, person_id: int) -> bool:
        """Remove the projection row; history and parentage are retained.

        Returns:
            False if there was no such person (not an error).
        """
        with tracer.start_as_current_span("person.delete") as span:
            span.set_attribute("person_id", person_id)
            async with self.locks.hold(person_id):
                async with self._unit_of_work("delete") as session:
                    deleted = await self._step(
                        PersonStore(session).delete(person_id), "person delete"
                    )

        logger.info("person.deleted", extra={"person_id": person_id, "deleted": deleted})
        return deleted

    # -- reads --------------------------------------------------------------

    @asynccontextmanager
    async def _reader(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self.database.session() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("person.read_failure", extra={"error": str(exc)})
            raise StorageFailure(f"read failed: {exc}") from exc

    async def list_people(self) -> Sequence[Person]:
        async with self._reader() as session:
            return await PersonStore(session).list()

    async def get_person(self, person_id: int) -> Person:
        async with self._reader() as session:
            return await PersonStore(session).require(person_id)

    async def list_history(self, kind: HistoryKind) -> AsyncIterator[HistoryMixin]:
        """Stream the full ledger of ``kind``; every call starts from the top."""
        async with self._reader() as session:
            async for record in HistoryLedger(session).list(kind):
                yield record

    async def list_person_history(
        self, person_id: int, kind: HistoryKind
    ) -> Sequence[HistoryMixin]:
        """History of one person; still available after the person is deleted."""
        async with self._reader() as session:
            return await HistoryLedger(session).list_for_person(person_id, kind)


def get_orchestrator(request: Request) -> PersonMutationOrchestrator:
    """FastAPI dependency returning the application's orchestrator."""
    return request.app.state.orchestrator
