"""Build UPDATE statements from sparse patches."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Column, Table, Update, update

from ..errors import ValidationFailure


@dataclass(frozen=True)
class Assignment:
    """One SET clause together with the value bound to it."""

    column: Column
    value: Any


@dataclass(frozen=True)
class PartialUpdate:
    """A non-empty, ordered set of assignments for one row."""

    table: Table
    key: Column
    assignments: tuple[Assignment, ...]

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(a.column.name for a in self.assignments)

    def statement(self, key_value: Any) -> Update:
        # Each column is bound by name from its own assignment, so the
        # clause list and bound values cannot drift apart.
        return (
            update(self.table)
            .where(self.key == key_value)
            .values({a.column: a.value for a in self.assignments})
        )


class PartialUpdateBuilder:
    """Turn ``{field: value}`` patches into UPDATE statements.

    Only columns named in ``updatable`` may ever appear in a statement;
    the order of ``updatable`` fixes the clause order. Field names from
    a patch are used solely to look up that closed set.
    """

    def __init__(self, table: Table, key: str, updatable: Sequence[str]):
        unknown = [name for name in updatable if name not in table.c]
        if unknown:
            raise ValueError(f"Unknown columns for {table.name}: {unknown}")
        if key in updatable:
            raise ValueError(f"Key column {key} cannot be updatable")

        self.table = table
        self.key = table.c[key]
        self.updatable: tuple[str, ...] = tuple(updatable)

    def build(self, patch: Mapping[str, Any]) -> PartialUpdate | None:
        """Return the update for ``patch``, or None when nothing is set.

        Fields mapped to None count as absent.

        Raises:
            ValidationFailure: if the patch names a field outside the
                updatable set.
        """
        unknown = sorted(set(patch) - set(self.updatable))
        if unknown:
            raise ValidationFailure(f"Fields cannot be updated: {', '.join(unknown)}")

        assignments = tuple(
            Assignment(self.table.c[name], patch[name])
            for name in self.updatable
            if patch.get(name) is not None
        )
        if not assignments:
            return None
        return PartialUpdate(table=self.table, key=self.key, assignments=assignments)
