"""Tests for the append-only history ledger."""

from datetime import date, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from person_registry.errors import ValidationFailure
from person_registry.models.history import GuardianHistory, HistoryKind, NameHistory
from person_registry.services.history import HistoryLedger


@pytest.mark.asyncio
class TestHistoryLedger:
    async def test_append_assigns_id_and_defaults_to_today(self, db_session: AsyncSession):
        ledger = HistoryLedger(db_session)
        record = await ledger.append(1, HistoryKind.NAME, "Ada")

        assert isinstance(record, NameHistory)
        assert record.history_id is not None
        assert record.person_id == 1
        assert record.name == "Ada"
        assert record.value == "Ada"
        assert record.start_date == date.today()

    async def test_guardian_value_is_person_id(self, db_session: AsyncSession):
        record = await HistoryLedger(db_session).append(2, HistoryKind.GUARDIAN, 9)
        assert isinstance(record, GuardianHistory)
        assert record.guardian_id == 9

    async def test_append_never_touches_prior_records(self, db_session: AsyncSession):
        ledger = HistoryLedger(db_session)
        first = await ledger.append(1, HistoryKind.SEX, "F")
        second = await ledger.append(1, HistoryKind.SEX, "M")
        third = await ledger.append(1, HistoryKind.SEX, "F")
        await db_session.commit()

        records = [r async for r in ledger.list(HistoryKind.SEX)]
        assert [r.history_id for r in records] == [
            first.history_id,
            second.history_id,
            third.history_id,
        ]
        assert [r.sex for r in records] == ["F", "M", "F"]

    async def test_list_orders_by_start_date_then_id(self, db_session: AsyncSession):
        ledger = HistoryLedger(db_session)
        today = date.today()
        early = await ledger.append(5, HistoryKind.ALIAS, "Old", today - timedelta(days=30))
        # Different person, earlier date, inserted later
        other = await ledger.append(6, HistoryKind.ALIAS, "Other", today - timedelta(days=60))
        late = await ledger.append(5, HistoryKind.ALIAS, "New", today)

        records = [r async for r in ledger.list(HistoryKind.ALIAS)]
        assert [r.history_id for r in records] == [
            other.history_id,
            early.history_id,
            late.history_id,
        ]
        dates = [r.start_date for r in records]
        assert dates == sorted(dates)

    async def test_kinds_are_kept_apart(self, db_session: AsyncSession):
        ledger = HistoryLedger(db_session)
        await ledger.append(1, HistoryKind.NAME, "Ada")
        await ledger.append(1, HistoryKind.ALIAS, "Countess")

        assert len([r async for r in ledger.list(HistoryKind.NAME)]) == 1
        assert len([r async for r in ledger.list(HistoryKind.ALIAS)]) == 1
        assert [r async for r in ledger.list(HistoryKind.SEX)] == []

    async def test_current_is_greatest_start_date_and_id(self, db_session: AsyncSession):
        ledger = HistoryLedger(db_session)
        today = date.today()
        await ledger.append(1, HistoryKind.NAME, "Augusta", today - timedelta(days=10))
        await ledger.append(1, HistoryKind.NAME, "Ada", today)
        latest = await ledger.append(1, HistoryKind.NAME, "Ada King", today)

        current = await ledger.current(1, HistoryKind.NAME)
        assert current.history_id == latest.history_id
        assert current.name == "Ada King"

    async def test_current_none_without_records(self, db_session: AsyncSession):
        assert await HistoryLedger(db_session).current(1, HistoryKind.GUARDIAN) is None

    async def test_rejects_backdated_append(self, db_session: AsyncSession):
        ledger = HistoryLedger(db_session)
        await ledger.append(1, HistoryKind.NAME, "Ada")
        with pytest.raises(ValidationFailure):
            await ledger.append(
                1, HistoryKind.NAME, "Augusta", date.today() - timedelta(days=1)
            )

    async def test_backdating_allowed_for_other_person(self, db_session: AsyncSession):
        ledger = HistoryLedger(db_session)
        await ledger.append(1, HistoryKind.NAME, "Ada")
        record = await ledger.append(
            2, HistoryKind.NAME, "Charles", date.today() - timedelta(days=1)
        )
        assert record.person_id == 2

    async def test_rejects_missing_value(self, db_session: AsyncSession):
        with pytest.raises(ValidationFailure):
            await HistoryLedger(db_session).append(1, HistoryKind.SEX, None)

    async def test_list_for_person_filters(self, db_session: AsyncSession):
        ledger = HistoryLedger(db_session)
        await ledger.append(1, HistoryKind.NAME, "Ada")
        await ledger.append(2, HistoryKind.NAME, "Charles")
        await ledger.append(1, HistoryKind.NAME, "Ada King")

        records = await ledger.list_for_person(1, HistoryKind.NAME)
        assert [r.name for r in records] == ["Ada", "Ada King"]

    async def test_list_is_restartable(self, db_session: AsyncSession):
        ledger = HistoryLedger(db_session)
        for value in ("a", "b", "c"):
            await ledger.append(1, HistoryKind.ALIAS, value)
        await db_session.commit()

        first_pass = [r.alias async for r in ledger.list(HistoryKind.ALIAS)]
        second_pass = [r.alias async for r in ledger.list(HistoryKind.ALIAS)]
        assert first_pass == second_pass == ["a", "b", "c"]
