# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Kept free of request state so scope rules can be unit-tested directly.
"""

from db.enums import UserRole

from ..schemas.auth import DataScope


def build_data_scope(role: UserRole, user_id: str) -> DataScope:
    """Build data scope rules based on the user's role."""
    if role == UserRole.ATTORNEY:
        return DataScope(attorney_id=user_id)
    if role in (UserRole.ADMIN, UserRole.STAFF):
        return DataScope(full_access=True)
    # unknown -- no client visibility
    return DataScope(attorney_id=user_id)
