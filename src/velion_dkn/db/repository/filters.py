"""Composable query predicates.

Each clause is a small typed value that renders to one bound SQLAlchemy
expression. A ``FilterSet`` collects clauses, silently skipping empty inputs,
and ``apply_filters`` folds them into a single ``WHERE`` joined with ``AND``.
User input only ever reaches the database as bound parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement


class Clause:
    def to_sql(self) -> ColumnElement[bool]:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(Clause):
    column: Any
    value: Any

    def to_sql(self) -> ColumnElement[bool]:
        return self.column == self.value


@dataclass(frozen=True)
class Contains(Clause):
    """Case-sensitivity follows the backend's ``LIKE``."""

    column: Any
    value: str

    def to_sql(self) -> ColumnElement[bool]:
        return self.column.contains(self.value, autoescape=True)


@dataclass(frozen=True)
class AnyContains(Clause):
    """Substring match against any of several columns."""

    columns: tuple[Any, ...]
    value: str

    def to_sql(self) -> ColumnElement[bool]:
        return or_(*(c.contains(self.value, autoescape=True) for c in self.columns))


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class FilterSet:
    """Builder for optional filters; blank values add nothing."""

    clauses: list[Clause] = field(default_factory=list)

    def eq(self, column: Any, value: Any) -> "FilterSet":
        if not _is_blank(value):
            self.clauses.append(Eq(column, value))
        return self

    def contains(self, column: Any, value: str | None) -> "FilterSet":
        if not _is_blank(value):
            self.clauses.append(Contains(column, value))  # type: ignore[arg-type]
        return self

    def any_contains(self, columns: Iterable[Any], value: str | None) -> "FilterSet":
        if not _is_blank(value):
            self.clauses.append(AnyContains(tuple(columns), value))  # type: ignore[arg-type]
        return self

    def __iter__(self) -> Iterator[Clause]:
        return iter(self.clauses)

    def __len__(self) -> int:
        return len(self.clauses)


def apply_filters(stmt, clauses: Iterable[Clause] | None):
    items = list(clauses or ())
    if not items:
        return stmt
    return stmt.where(and_(*(c.to_sql() for c in items)))
