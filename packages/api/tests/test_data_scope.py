# This project was developed with assistance from AI tools.
"""Unit tests for data scope construction and query filtering.

Attorneys see only clients they hold an active grant for; admin and staff
see every client.
"""

from db import Client, Policy
from db.enums import UserRole
from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from src.core.auth import build_data_scope
from src.schemas.auth import DataScope
from src.services.scope import apply_data_scope


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def test_attorney_scope_is_grant_based():
    scope = build_data_scope(UserRole.ATTORNEY, "attorney-1")
    assert scope.attorney_id == "attorney-1"
    assert scope.full_access is False


def test_admin_and_staff_have_full_access():
    for role in (UserRole.ADMIN, UserRole.STAFF):
        scope = build_data_scope(role, "someone")
        assert scope.full_access is True
        assert scope.attorney_id is None


def test_full_access_leaves_query_untouched():
    stmt = select(Client)
    assert apply_data_scope(stmt, DataScope(full_access=True)) is stmt


def test_attorney_query_filters_on_active_grants():
    sql = _sql(apply_data_scope(select(Client), DataScope(attorney_id="attorney-1")))
    assert "attorney_client_access" in sql
    assert "is_active IS true" in sql
    assert "clients.id IN" in sql


def test_client_column_targets_owning_resource():
    sql = _sql(
        apply_data_scope(
            select(Policy),
            DataScope(attorney_id="attorney-1"),
            client_column=Policy.client_id,
        )
    )
    assert "policies.client_id IN" in sql


def test_empty_scope_matches_nothing():
    sql = _sql(apply_data_scope(select(Client), DataScope()))
    assert "clients.id IS NULL" in sql
