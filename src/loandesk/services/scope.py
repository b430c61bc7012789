# This project was developed with assistance from AI tools.
"""Shared data scope filtering for application queries.

Centralizes the DataScope -> SQL WHERE logic so list and count queries
apply the same rule: users see their own applications, admins see all.
"""

from loandesk_db import Application

from ..schemas.auth import DataScope


def apply_data_scope(stmt, scope: DataScope):
    """Apply data scope filtering to a select over ``Application``."""
    if scope.full_pipeline:
        return stmt
    if scope.own_data_only and scope.user_id:
        return stmt.where(Application.user_id == scope.user_id)
    # No recognised scope: match nothing rather than everything.
    return stmt.where(Application.id.is_(None))
