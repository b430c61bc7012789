# This project was developed with assistance from AI tools.
"""Application review endpoints (admin only)."""

from fastapi import APIRouter, Body, Depends
from loandesk_db import get_db
from loandesk_db.enums import UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.application import ApplicationResponse, RejectRequest
from ..services.application import to_response
from ..services.decision import approve_application, reject_application

router = APIRouter()


@router.post(
    "/{application_id}/approve",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def approve(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Approve a submitted application and email the applicant."""
    app, warnings = await approve_application(session, user, application_id)
    return to_response(app, warnings)


@router.post(
    "/{application_id}/reject",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def reject(
    application_id: int,
    user: CurrentUser,
    body: RejectRequest | None = Body(default=None),
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Reject a submitted application. The reason defaults to a standard text."""
    reason = body.rejection_reason if body else None
    app, warnings = await reject_application(session, user, application_id, reason)
    return to_response(app, warnings)
