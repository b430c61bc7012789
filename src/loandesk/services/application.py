# This project was developed with assistance from AI tools.
"""Application reads and edits with ownership checks.

Reads by id distinguish "does not exist" (NotFound) from "exists but is
not yours" (NotAuthorized). Lists are filtered through the caller's
DataScope so users only ever see their own applications.
"""

import logging

from loandesk_db import Application
from loandesk_db.enums import ApplicationStatus
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.auth import can_access
from ..schemas.application import (
    ApplicationResponse,
    ApplicationUpdate,
    DocumentResponse,
    LoanDetailsResponse,
)
from ..schemas.auth import UserContext
from .errors import NotAuthorized, NotFound
from .scope import apply_data_scope

logger = logging.getLogger(__name__)


def to_response(app: Application, warnings: list[str] | None = None) -> ApplicationResponse:
    return ApplicationResponse(
        id=app.id,
        application_number=app.application_number,
        user_id=app.user_id,
        loan_id=app.loan_id,
        loan_type=app.loan_type,
        personal_info=app.personal_info or {},
        address=app.address or {},
        employment_info=app.employment_info or {},
        loan_details=LoanDetailsResponse(
            loan_amount=float(app.loan_amount),
            loan_tenure=app.tenure_months,
            interest_rate=float(app.interest_rate),
            emi=app.emi,
            loan_purpose=app.loan_purpose,
        ),
        dynamic_fields=app.dynamic_fields or {},
        documents=[DocumentResponse.model_validate(d) for d in app.documents],
        status=app.status,
        submitted_at=app.submitted_at,
        approved_at=app.approved_at,
        approved_by=app.approved_by,
        rejected_at=app.rejected_at,
        rejected_by=app.rejected_by,
        rejection_reason=app.rejection_reason,
        created_at=app.created_at,
        updated_at=app.updated_at,
        warnings=warnings or [],
    )


async def load_application(session: AsyncSession, application_id: int) -> Application | None:
    """Fetch an application with its documents and loan, bypassing stale identity-map state."""
    stmt = (
        select(Application)
        .options(selectinload(Application.documents), selectinload(Application.loan))
        .where(Application.id == application_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> Application:
    """Return an application visible to the caller.

    Raises:
        NotFound: no application with this id.
        NotAuthorized: the caller is neither its owner nor an admin.
    """
    app = await load_application(session, application_id)
    if app is None:
        raise NotFound(f"Application {application_id} not found")
    if not can_access(user, app.user_id):
        logger.warning(
            "Access denied: user=%s tried to read application %s owned by %s",
            user.user_id, application_id, app.user_id,
        )
        raise NotAuthorized("Not authorized to access this application")
    return app


async def list_applications(
    session: AsyncSession,
    user: UserContext,
    *,
    offset: int = 0,
    limit: int = 20,
    filter_status: ApplicationStatus | None = None,
) -> tuple[list[Application], int]:
    """Return applications visible to the current user, newest first."""
    count_stmt = apply_data_scope(select(func.count(Application.id)), user.data_scope)
    stmt = apply_data_scope(
        select(Application)
        .options(selectinload(Application.documents))
        .order_by(Application.created_at.desc(), Application.id.desc())
        .offset(offset)
        .limit(limit),
        user.data_scope,
    )
    if filter_status is not None:
        count_stmt = count_stmt.where(Application.status == filter_status)
        stmt = stmt.where(Application.status == filter_status)

    total = (await session.execute(count_stmt)).scalar() or 0
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


async def update_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    data: ApplicationUpdate,
) -> Application:
    """Edit an application's applicant-supplied sections.

    Owners may edit only while the application is a Draft; admins may edit
    any application regardless of status. Loan terms, the rate/EMI snapshot
    and the status are never changed here.
    """
    app = await get_application(session, user, application_id)
    if not user.is_admin and app.status != ApplicationStatus.DRAFT:
        raise NotAuthorized("Applications can only be edited while in Draft")

    changes = data.model_dump(exclude_unset=True)
    for attr, value in changes.items():
        if value is None:
            continue
        setattr(app, attr, value)
    await session.commit()

    logger.info(
        "Application %s updated by %s (%s)",
        app.application_number, user.user_id, ", ".join(sorted(changes)) or "no changes",
    )
    return await load_application(session, application_id)
