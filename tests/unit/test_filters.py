from sqlalchemy import select
from sqlalchemy.dialects import sqlite

from velion_dkn.db.repository import AnyContains, Contains, Eq, FilterSet, apply_filters
from velion_dkn.documents.models import Document


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=sqlite.dialect()))


def test_blank_values_add_nothing():
    fs = (
        FilterSet()
        .eq(Document.department, None)
        .eq(Document.region, "   ")
        .contains(Document.tags, "")
        .any_contains((Document.title, Document.description), None)
    )

    assert len(fs) == 0
    stmt = select(Document.id)
    assert apply_filters(stmt, fs) is stmt


def test_builds_one_clause_per_present_filter():
    fs = (
        FilterSet()
        .eq(Document.department, "Strategy")
        .contains(Document.tags, "pricing")
        .any_contains((Document.title, Document.description), "plan")
    )

    kinds = [type(c) for c in fs]
    assert kinds == [Eq, Contains, AnyContains]


def test_apply_filters_joins_with_and_and_binds_values():
    fs = FilterSet().eq(Document.department, "Strategy").contains(Document.tags, "x")
    sql = _sql(apply_filters(select(Document.id), fs))

    assert "WHERE" in sql
    assert " AND " in sql
    assert "LIKE" in sql
    # values travel as parameters, never inline
    assert "Strategy" not in sql


def test_contains_escapes_wildcards():
    clause = Contains(Document.tags, "100%_done").to_sql()
    compiled = clause.compile(dialect=sqlite.dialect())

    assert "ESCAPE" in str(compiled)
    assert any("/%" in str(v) for v in compiled.params.values())


def test_any_contains_is_an_or():
    sql = _sql(select(Document.id).where(AnyContains((Document.title, Document.tags), "q").to_sql()))
    assert " OR " in sql
