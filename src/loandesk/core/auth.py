# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Used by the middleware layer and by services that need to reason about
ownership. Keeping them separate from ``middleware/auth.py`` avoids pulling
FastAPI/Starlette imports into service code.
"""

from loandesk_db.enums import UserRole

from ..schemas.auth import DataScope, UserContext


def build_data_scope(role: UserRole, user_id: str) -> DataScope:
    """Build data scope rules based on the user's role."""
    if role == UserRole.ADMIN:
        return DataScope(full_pipeline=True)
    return DataScope(own_data_only=True, user_id=user_id)


def can_access(user: UserContext, owner_id: str) -> bool:
    """True when the caller owns the resource or sees the full pipeline."""
    if user.data_scope.full_pipeline:
        return True
    return user.user_id == owner_id
