"""Append-only ledger for historized person attributes."""

import logging
from collections.abc import AsyncIterator, Sequence
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ValidationFailure
from ..models.history import HISTORY_MODELS, HistoryKind, HistoryMixin
from ..observability.metrics import HISTORY_APPENDS

logger = logging.getLogger(__name__)


def _ordered(model: type[HistoryMixin]):
    return select(model).order_by(model.start_date, model.history_id)


class HistoryLedger:
    """Writer and reader for the name, sex, alias and guardian histories.

    ``append`` is the only mutating operation. The current value of an
    attribute is always the record with the greatest
    ``(start_date, history_id)`` for that person; no separate index of
    latest values is kept.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(
        self,
        person_id: int,
        kind: HistoryKind,
        value: Any,
        effective_date: date | None = None,
    ) -> HistoryMixin:
        """Insert one history record for ``person_id``.

        Args:
            person_id: Owning person.
            kind: Attribute being recorded.
            value: New value; a person id for guardian history.
            effective_date: Day the value takes effect (default: today).

        Returns:
            The flushed record, with its ``history_id`` assigned.

        Raises:
            ValidationFailure: if the value is missing or the effective
                date precedes the current record for this attribute.
        """
        if value is None:
            raise ValidationFailure(f"A {kind.value} history record needs a value")

        start_date = effective_date or date.today()
        latest = await self.current(person_id, kind)
        if latest is not None and start_date < latest.start_date:
            raise ValidationFailure(
                f"{kind.value} history for person {person_id} already has a "
                f"record starting {latest.start_date.isoformat()}"
            )

        model = HISTORY_MODELS[kind]
        record = model(person_id=person_id, start_date=start_date)  # type: ignore[call-arg]
        setattr(record, model.value_column, value)
        self.session.add(record)
        await self.session.flush()

        HISTORY_APPENDS.labels(kind.value).inc()
        logger.info(
            "history.appended",
            extra={
                "person_id": person_id,
                "kind": kind.value,
                "history_id": record.history_id,
                "start_date": start_date.isoformat(),
            },
        )
        return record

    async def current(self, person_id: int, kind: HistoryKind) -> HistoryMixin | None:
        """Return the newest record for ``(person_id, kind)``, if any."""
        model = HISTORY_MODELS[kind]
        result = await self.session.execute(
            select(model)
            .where(model.person_id == person_id)
            .order_by(model.start_date.desc(), model.history_id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list(self, kind: HistoryKind) -> AsyncIterator[HistoryMixin]:
        """Lazily iterate all records of ``kind`` in ``(start_date, history_id)`` order.

        Rows are fetched from a server-side cursor as they are consumed.
        Each call opens a fresh cursor, so the sequence can be restarted.
        """
        result = await self.session.stream_scalars(_ordered(HISTORY_MODELS[kind]))
        try:
            async for record in result:
                yield record
        finally:
            await result.close()

    async def list_for_person(
        self, person_id: int, kind: HistoryKind
    ) -> Sequence[HistoryMixin]:
        """Records of ``kind`` for one person, in ledger order."""
        model = HISTORY_MODELS[kind]
        result = await self.session.execute(
            _ordered(model).where(model.person_id == person_id)
        )
        return result.scalars().all()
