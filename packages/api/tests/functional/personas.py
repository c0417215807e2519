# This project was developed with assistance from AI tools.
"""Persona factories for functional tests.

Each function returns a UserContext matching the DataScope built by
``core/auth.py:build_data_scope()`` for that role. Fixed user IDs
ensure cross-test consistency.
"""

from db.enums import UserRole

from src.schemas.auth import DataScope, UserContext

# Fixed IDs for cross-test referencing
ATTORNEY_USER_ID = "attorney-hale-001"
OTHER_ATTORNEY_USER_ID = "attorney-brook-002"
STAFF_USER_ID = "staff-ortiz-003"
ADMIN_USER_ID = "admin-user"


def attorney() -> UserContext:
    return UserContext(
        user_id=ATTORNEY_USER_ID,
        role=UserRole.ATTORNEY,
        email="hale@hale-law.example",
        name="Margaret Hale",
        data_scope=DataScope(attorney_id=ATTORNEY_USER_ID),
    )


def other_attorney() -> UserContext:
    return UserContext(
        user_id=OTHER_ATTORNEY_USER_ID,
        role=UserRole.ATTORNEY,
        email="brook@brook-legal.example",
        name="Dana Brook",
        data_scope=DataScope(attorney_id=OTHER_ATTORNEY_USER_ID),
    )


def staff() -> UserContext:
    return UserContext(
        user_id=STAFF_USER_ID,
        role=UserRole.STAFF,
        email="ortiz@heirvault.app",
        name="Luis Ortiz",
        data_scope=DataScope(full_access=True),
    )


def admin() -> UserContext:
    return UserContext(
        user_id=ADMIN_USER_ID,
        role=UserRole.ADMIN,
        email="admin@heirvault.app",
        name="Admin",
        data_scope=DataScope(full_access=True),
    )
