# This project was developed with assistance from AI tools.
"""Shared data scope filtering for service queries.

Centralizes the DataScope -> SQL WHERE logic so that every client-owned
resource (clients, policies, beneficiaries, receipts, documents) applies the
same rule: attorneys see only clients they hold an active access grant for;
admin and staff see everything.
"""

from db import AttorneyClientAccess, Client
from sqlalchemy import select

from ..schemas.auth import DataScope


def accessible_client_ids(attorney_id: str):
    """Subquery of client ids the attorney holds an active grant for."""
    return select(AttorneyClientAccess.client_id).where(
        AttorneyClientAccess.attorney_id == attorney_id,
        AttorneyClientAccess.is_active.is_(True),
    )


def apply_data_scope(stmt, scope: DataScope, *, client_column=None):
    """Apply data scope filtering to a SQLAlchemy query.

    Args:
        stmt: A SQLAlchemy select statement.
        scope: The caller's DataScope.
        client_column: Column holding the owning client id (e.g.
            ``Policy.client_id``). Defaults to ``Client.id`` for queries
            over clients directly.

    Returns:
        The filtered statement.
    """
    if scope.full_access:
        return stmt
    column = client_column if client_column is not None else Client.id
    if scope.attorney_id:
        return stmt.where(column.in_(accessible_client_ids(scope.attorney_id)))
    # No scope at all -- match nothing
    return stmt.where(column.is_(None))
